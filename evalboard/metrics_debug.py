from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from evalboard.data import is_numeric_semester


def compute_debug(filters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    payload = {
        "filters": asdict(filters),
        "files": list(ctx.get("files", []) or []),
        "row_counts": {
            "records": int(len(records)),
            "filtered_records": int(len(filtered)),
        },
        "cleaning_checks": {
            "dropped_columns": list(ctx.get("dropped_columns", []) or []),
            "missing_content_score": 0,
            "missing_trainer_score": 0,
            "non_numeric_semester": 0,
            "with_action_items": 0,
        },
        "non_numeric_semesters": [],
        "college_counts": [],
    }
    if records.empty:
        return payload

    checks = payload["cleaning_checks"]
    checks["missing_content_score"] = int(records["content_score"].isna().sum())
    checks["missing_trainer_score"] = int(records["trainer_score"].isna().sum())
    odd = records[~records["semester"].map(is_numeric_semester).astype(bool)]
    checks["non_numeric_semester"] = int(len(odd))
    checks["with_action_items"] = int(records["action_items"].notna().sum())

    if not odd.empty:
        payload["non_numeric_semesters"] = (
            odd["semester"].map(lambda v: "" if v is None else str(v)).value_counts().head(20)
            .rename_axis("semester").reset_index(name="count").to_dict(orient="records")
        )
    college_counts = records["college"].replace("", "(blank)").value_counts().head(20)
    payload["college_counts"] = college_counts.rename_axis("college").reset_index(name="count").to_dict(orient="records")
    return payload
