from __future__ import annotations

import logging
import math
import os
from typing import Any, Callable, Dict, List

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import FilterCriteriaModel, MetaOptionsResponse, SessionRecordModel
from evalboard.aggregations import detail_rows, records_to_rows
from evalboard.data import load_dashboard_data, prepare_context
from evalboard.filters import SCORE_RANGE_OPTIONS, FilterCriteria, normalize_filters
from evalboard.metrics_colleges import compute_colleges
from evalboard.metrics_debug import compute_debug
from evalboard.metrics_overview import compute_overview
from evalboard.metrics_subjects import compute_subjects
from evalboard.metrics_trainers import compute_trainers


app = FastAPI(title="Session Evaluation Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS_ENV = "EVALBOARD_CORS_ORIGINS"


def cors_origins() -> List[str]:
    """Comma-separated browser origins allowed to call the API; none by default."""
    raw = os.getenv(CORS_ORIGINS_ENV, "")
    return [o.strip() for o in raw.split(",") if o.strip()]


_origins = cors_origins()
if _origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _filters_from_model(model: FilterCriteriaModel) -> FilterCriteria:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _page(name: str, compute: Callable[[FilterCriteria, Dict[str, Any]], Dict[str, Any]], filters: FilterCriteriaModel):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute(f, ctx))
    except Exception as exc:
        return _error(name, exc)


@app.get("/meta/options", response_model=MetaOptionsResponse)
def meta_options():
    try:
        data_ctx = load_dashboard_data()
        return _json(
            {
                "colleges": data_ctx.get("colleges", []),
                "semesters": [int(s) for s in data_ctx.get("semesters", [])],
                "curricula": data_ctx.get("curricula", []),
                "score_ranges": SCORE_RANGE_OPTIONS,
                "files": data_ctx.get("files", []),
            }
        )
    except Exception as exc:
        return _error("meta_options", exc)


@app.post("/overview")
def overview(filters: FilterCriteriaModel):
    return _page("overview", compute_overview, filters)


@app.post("/colleges")
def colleges(filters: FilterCriteriaModel):
    return _page("colleges", compute_colleges, filters)


@app.post("/subjects")
def subjects(filters: FilterCriteriaModel):
    return _page("subjects", compute_subjects, filters)


@app.post("/trainers")
def trainers(filters: FilterCriteriaModel):
    return _page("trainers", compute_trainers, filters)


@app.post("/debug")
def debug(filters: FilterCriteriaModel):
    return _page("debug", compute_debug, filters)


@app.post("/records", response_model=List[SessionRecordModel])
def records(filters: FilterCriteriaModel, limit: int = Query(default=50, ge=1, le=1000)):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(detail_rows(ctx["filtered_records"], limit=limit))
    except Exception as exc:
        return _error("records", exc)


@app.post("/export/{page}")
def export_page(page: str, filters: FilterCriteriaModel):
    data_ctx = load_dashboard_data()
    f = _filters_from_model(filters)
    ctx = prepare_context(f, data_ctx)

    export_df = ctx.get("filtered_records")
    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    else:
        export_df = pd.DataFrame(records_to_rows(export_df), columns=list(export_df.columns))
    filename = f"{page}.csv"
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
