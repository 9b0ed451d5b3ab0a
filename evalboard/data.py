from __future__ import annotations

import logging
import math
import numbers
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from evalboard.filters import ALL, FilterCriteria, normalize_filters


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DEFAULT_DATA_PATH = DATA_DIR / "sessions.csv"
DATA_PATH_ENV = "EVALBOARD_DATA_PATH"

RECORD_COLUMNS = [
    "subject",
    "college",
    "semester",
    "content_score",
    "trainer_score",
    "curriculum",
    "action_items",
]

SOURCE_COLUMNS = {
    "Subject": "subject",
    "College": "college",
    "Sem": "semester",
    "Semester": "semester",
    "ContentScore": "content_score",
    "Content Score": "content_score",
    "TrainerScore": "trainer_score",
    "Trainer Score": "trainer_score",
    "Curriculum": "curriculum",
    "ActionItems": "action_items",
    "Action Items": "action_items",
}
SOURCE_COLUMNS.update({c: c for c in RECORD_COLUMNS})

TEXT_COLUMNS = ["subject", "college", "curriculum"]
SCORE_COLUMNS = ["content_score", "trainer_score"]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def get_data_path() -> Path:
    override = os.getenv(DATA_PATH_ENV, "").strip()
    return Path(override) if override else DEFAULT_DATA_PATH


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def is_numeric_semester(value: object) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def parse_semester(value: object) -> object:
    """Leading-integer parse; anything else (including 0) is returned unchanged."""
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if _is_number(value):
        if not math.isfinite(value):
            return value
        parsed = int(value)
        return parsed if parsed else value
    match = _LEADING_INT.match(str(value))
    if not match:
        return value
    parsed = int(match.group(1))
    return parsed if parsed else value


def parse_score(value: object) -> Optional[float]:
    """Leading-float parse; failure and exactly zero both map to ``None``."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if _is_number(value):
        out = float(value)
    else:
        match = _LEADING_FLOAT.match(str(value))
        if not match:
            return None
        out = float(match.group(1))
    if not math.isfinite(out) or out == 0:
        return None
    return out


def parse_text(value: object) -> str:
    if _is_missing(value):
        return ""
    return str(value)


def parse_action_items(value: object) -> Optional[str]:
    if _is_missing(value):
        return None
    s = str(value)
    return s if s.strip() else None


def normalize_records(raw: pd.DataFrame | List[Dict[str, object]]) -> Tuple[pd.DataFrame, List[str]]:
    """Coerce raw rows into the record schema.

    Returns the normalized frame and the list of source columns that were
    dropped because they are not part of the schema.
    """
    df = raw.copy() if isinstance(raw, pd.DataFrame) else pd.DataFrame.from_records(list(raw))
    dropped = [str(c) for c in df.columns if c not in SOURCE_COLUMNS]
    df = df[[c for c in df.columns if c in SOURCE_COLUMNS]].rename(columns=SOURCE_COLUMNS)
    df = df.loc[:, ~df.columns.duplicated()]

    for col in RECORD_COLUMNS:
        if col not in df.columns:
            df[col] = None

    def _object_column(col: str, parse) -> pd.Series:
        # keep python objects; Series.map would upcast ints mixed with None to float
        return pd.Series([parse(v) for v in df[col]], index=df.index, dtype=object)

    out = pd.DataFrame(index=df.index)
    for col in TEXT_COLUMNS:
        out[col] = _object_column(col, parse_text)
    out["semester"] = _object_column("semester", parse_semester)
    for col in SCORE_COLUMNS:
        out[col] = pd.Series([parse_score(v) for v in df[col]], index=df.index, dtype=float)
    out["action_items"] = _object_column("action_items", parse_action_items)
    return out[RECORD_COLUMNS].reset_index(drop=True), dropped


def read_source(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return pd.read_json(path, orient="records", dtype=False)
    if suffix == ".xlsx":
        return pd.read_excel(path, dtype=object)
    return pd.read_csv(path, dtype=str, keep_default_na=False)


# ---------------- Filter evaluation ----------------
def semester_matches(value: object, selector: str) -> bool:
    """Loose equality between a record semester and selector text."""
    if value is None or isinstance(value, bool):
        return False
    if _is_number(value):
        try:
            return float(selector) == float(value)
        except ValueError:
            return False
    return str(value) == selector


def filter_records(records: pd.DataFrame, criteria: FilterCriteria) -> pd.DataFrame:
    if records.empty or criteria.is_unfiltered:
        return records.copy()

    mask = pd.Series(True, index=records.index)
    if criteria.college != ALL:
        mask &= records["college"] == criteria.college
    if criteria.semester != ALL:
        mask &= records["semester"].map(lambda v: semester_matches(v, criteria.semester)).astype(bool)
    if criteria.curriculum != ALL:
        mask &= records["curriculum"] == criteria.curriculum
    if criteria.score_range is not None:
        rng = criteria.score_range
        scores = records["content_score"]
        mask &= scores.notna() & (scores >= rng.min) & (scores < rng.max)
    return records[mask].copy()


# ---------------- Public API ----------------
def filter_options(records: pd.DataFrame) -> Dict[str, list]:
    if records.empty:
        return {"colleges": [], "semesters": [], "curricula": []}
    colleges = sorted({c for c in records["college"] if c})
    semesters = sorted({s for s in records["semester"] if is_numeric_semester(s)})
    curricula = sorted({c for c in records["curriculum"] if c})
    return {"colleges": colleges, "semesters": semesters, "curricula": curricula}


def build_data_context(records: pd.DataFrame, *, files: Optional[List[str]] = None, dropped_columns: Optional[List[str]] = None) -> Dict[str, object]:
    return {
        "files": files or [],
        "records": records,
        "dropped_columns": dropped_columns or [],
        **filter_options(records),
    }


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(signature: Tuple[str, float]) -> Dict[str, object]:
    path = Path(signature[0])
    raw = read_source(path)
    records, dropped = normalize_records(raw)
    logger.info("Loaded %d session records from %s", len(records), path.name)
    if dropped:
        logger.warning("Ignoring unknown columns in %s: %s", path.name, ", ".join(dropped))
    return build_data_context(records, files=[path.name], dropped_columns=dropped)


def load_dashboard_data(path: Optional[Path] = None) -> Dict[str, object]:
    path = Path(path) if path is not None else get_data_path()
    if not path.exists():
        logger.warning("Session data file not found: %s", path)
        return build_data_context(pd.DataFrame(columns=RECORD_COLUMNS))
    return _load_dashboard_data_cached(file_signature(path))


def prepare_context(filters: dict | FilterCriteria, data_ctx: Dict[str, object]) -> Dict[str, object]:
    records: pd.DataFrame = data_ctx.get("records", pd.DataFrame(columns=RECORD_COLUMNS))
    filt = filters if isinstance(filters, FilterCriteria) else normalize_filters(filters)
    return {
        "filters": filt,
        "records": records,
        "filtered_records": filter_records(records, filt),
        "files": data_ctx.get("files", []),
        "dropped_columns": data_ctx.get("dropped_columns", []),
    }
