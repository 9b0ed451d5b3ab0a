"""Grouping + reduction over filtered session records.

Every function here is total: an empty input (or a group with no usable
values) yields ``None`` for the statistic instead of 0 or NaN.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence, Union

import pandas as pd

from evalboard.data import RECORD_COLUMNS, SCORE_COLUMNS, is_numeric_semester

GroupOrder = Literal["first", "ascending", "mean_desc"]
KeySpec = Union[str, Callable[[pd.DataFrame], pd.Series]]

DEFAULT_BUCKET_EDGES = (6.0, 7.0, 8.0, 9.0)
HISTOGRAM_TOP = 10.0


def _scores(values: Optional[Iterable[Any]]) -> pd.Series:
    if values is None:
        return pd.Series(dtype=float)
    s = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=object)
    return pd.to_numeric(s, errors="coerce").dropna()


def mean_score(values: Optional[Iterable[Any]]) -> Optional[float]:
    s = _scores(values)
    if s.empty:
        return None
    return float(s.sum() / len(s))


def score_stats(values: Optional[Iterable[Any]]) -> Dict[str, Any]:
    s = _scores(values)
    if s.empty:
        return {"mean": None, "min": None, "max": None, "count": 0}
    lo = float(s.min())
    hi = float(s.max())
    # float summation can drift a ulp outside the observed range
    mean = min(max(float(s.sum() / len(s)), lo), hi)
    return {"mean": mean, "min": lo, "max": hi, "count": int(len(s))}


def summary_stats(records: pd.DataFrame) -> Dict[str, Optional[float]]:
    content = score_stats(records["content_score"] if "content_score" in records.columns else None)
    trainer = score_stats(records["trainer_score"] if "trainer_score" in records.columns else None)
    return {
        "avg_content_score": content["mean"],
        "avg_trainer_score": trainer["mean"],
        "highest_score": content["max"],
        "lowest_score": content["min"],
    }


def _group_keys(records: pd.DataFrame, key: KeySpec) -> pd.Series:
    if callable(key):
        return key(records)
    return records[key]


def _mean_sort_key(row: Dict[str, Any]) -> float:
    mean = row["content_score"]["mean"]
    return float("-inf") if mean is None else mean


def group_stats(
    records: pd.DataFrame,
    key: KeySpec,
    *,
    order: GroupOrder = "first",
    limit: Optional[int] = None,
    fields: Sequence[str] = tuple(SCORE_COLUMNS),
) -> List[Dict[str, Any]]:
    """Partition ``records`` by ``key`` and reduce each group to score stats.

    Blank keys (``None``, ``""``) are not grouped. ``order`` is applied before
    ``limit``: ``"first"`` keeps first-appearance order, ``"ascending"`` sorts
    by key and ``"mean_desc"`` sorts by mean content score, highest first.
    """
    if records.empty:
        return []
    keys = _group_keys(records, key)
    keep = keys.map(lambda k: k is not None and k == k and k != "").astype(bool)
    if not keep.any():
        return []
    base = records[keep]
    rows: List[Dict[str, Any]] = []
    for group_key, part in base.groupby(keys[keep], sort=False):
        row: Dict[str, Any] = {"key": group_key, "count": int(len(part))}
        for f in fields:
            row[f] = score_stats(part[f])
        rows.append(row)

    if order == "ascending":
        rows.sort(key=lambda r: r["key"])
    elif order == "mean_desc":
        rows.sort(key=_mean_sort_key, reverse=True)
    if limit is not None:
        rows = rows[: max(0, int(limit))]
    return rows


def _means_table(rows: List[Dict[str, Any]], label: str) -> List[Dict[str, Any]]:
    return [
        {
            label: r["key"],
            "avg_content_score": r["content_score"]["mean"],
            "avg_trainer_score": r["trainer_score"]["mean"],
            "count": r["count"],
        }
        for r in rows
    ]


def college_comparison(records: pd.DataFrame, limit: int = 5) -> List[Dict[str, Any]]:
    """First ``limit`` colleges by first appearance, with mean scores."""
    return _means_table(group_stats(records, "college", order="first", limit=limit), "college")


def college_means(records: pd.DataFrame) -> List[Dict[str, Any]]:
    return _means_table(group_stats(records, "college", order="ascending"), "college")


def semester_means(records: pd.DataFrame) -> List[Dict[str, Any]]:
    if records.empty:
        return []
    numeric = records[records["semester"].map(is_numeric_semester).astype(bool)]
    return _means_table(group_stats(numeric, "semester", order="ascending"), "semester")


def _stripped_subject(records: pd.DataFrame) -> pd.Series:
    return records["subject"].map(lambda s: s.strip() if isinstance(s, str) else s)


def subject_score_points(records: pd.DataFrame) -> List[Dict[str, Any]]:
    if records.empty:
        return []
    subjects = _stripped_subject(records)
    mask = subjects.map(bool).astype(bool) & records["content_score"].notna()
    return [
        {"subject": subj, "content_score": float(score)}
        for subj, score in zip(subjects[mask], records.loc[mask, "content_score"])
    ]


def subject_performance(records: pd.DataFrame) -> List[Dict[str, Any]]:
    """Mean content score per subject, unscored subjects dropped, best first."""
    rows = group_stats(records, _stripped_subject, order="mean_desc", fields=("content_score",))
    return [
        {"subject": r["key"], "avg_content_score": r["content_score"]["mean"], "count": r["content_score"]["count"]}
        for r in rows
        if r["content_score"]["mean"] is not None
    ]


def _fmt_edge(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def bucket_labels(edges: Sequence[float] = DEFAULT_BUCKET_EDGES) -> List[str]:
    edges = list(edges)
    labels = [f"Below {_fmt_edge(edges[0])}"]
    labels += [f"{_fmt_edge(a)}-{_fmt_edge(b)}" for a, b in zip(edges, edges[1:])]
    last = edges[-1]
    labels.append(f"{_fmt_edge(last)}-{_fmt_edge(HISTOGRAM_TOP)}" if last < HISTOGRAM_TOP else f"{_fmt_edge(last)}+")
    return labels


def trainer_histogram(records: pd.DataFrame, edges: Sequence[float] = DEFAULT_BUCKET_EDGES) -> List[Dict[str, Any]]:
    """Count trainer scores into half-open buckets, in declaration order."""
    edges = sorted(edges) if edges else list(DEFAULT_BUCKET_EDGES)
    labels = bucket_labels(edges)
    scores = _scores(records["trainer_score"] if "trainer_score" in records.columns else None)
    if scores.empty:
        return [{"bucket": label, "count": 0} for label in labels]
    bins = [float("-inf"), *edges, float("inf")]
    counts = pd.cut(scores, bins=bins, right=False, labels=labels).value_counts(sort=False)
    return [{"bucket": label, "count": int(counts.get(label, 0))} for label in labels]


def action_items(records: pd.DataFrame) -> List[Dict[str, Any]]:
    if records.empty:
        return []
    items = records[records["action_items"].notna()]
    return items[["subject", "college", "action_items"]].to_dict(orient="records")


def records_to_rows(records: pd.DataFrame) -> List[Dict[str, Any]]:
    cols = [c for c in RECORD_COLUMNS if c in records.columns]
    df = records[cols].astype(object)
    return df.where(df.notna(), None).to_dict(orient="records")


def detail_rows(records: pd.DataFrame, limit: int = 50) -> List[Dict[str, Any]]:
    if records.empty:
        return []
    return records_to_rows(records.head(max(0, int(limit))))
