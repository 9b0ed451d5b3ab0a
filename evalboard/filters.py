from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

ALL = "All"

SCORE_RANGE_OPTIONS = [ALL, "0-6", "6-7", "7-8", "8-9", "9-"]


@dataclass(frozen=True)
class Limits:
    max_table_rows: int = 50
    max_compare_groups: int = 5
    score_range_ceiling: float = 11.0
    trainer_bucket_edges: Tuple[float, ...] = (6.0, 7.0, 8.0, 9.0)


@dataclass(frozen=True)
class ScoreRange:
    """Half-open content score interval ``[min, max)``."""

    min: float
    max: float

    def contains(self, value: Optional[float]) -> bool:
        if value is None:
            return False
        return self.min <= value < self.max


@dataclass(frozen=True)
class FilterCriteria:
    college: str = ALL
    semester: str = ALL
    curriculum: str = ALL
    score_range: Optional[ScoreRange] = None
    limits: Limits = field(default_factory=Limits)

    @property
    def is_unfiltered(self) -> bool:
        return (
            self.college == ALL
            and self.semester == ALL
            and self.curriculum == ALL
            and self.score_range is None
        )


def _as_selector(value: object) -> str:
    """Blank means "All"; anything else is compared exactly as given."""
    if value is None:
        return ALL
    s = str(value)
    return s if s.strip() else ALL


def _to_number(text: object) -> float:
    s = str(text).strip()
    if not s:
        return 0.0
    try:
        return float(s)
    except ValueError:
        return float("nan")


def parse_score_range(value: object, *, ceiling: float = 11.0) -> Optional[ScoreRange]:
    """Parse ``"min-max"`` selector text; ``None`` means no range filter.

    A missing or zero upper bound falls back to ``ceiling`` so ``"9-"`` covers
    ``[9, ceiling)``. An unparseable lower bound yields a range that matches
    nothing.
    """
    if isinstance(value, ScoreRange):
        return value
    if isinstance(value, dict):
        lo = value.get("min")
        hi = value.get("max")
        lo_f = _to_number(lo) if lo is not None else 0.0
        hi_f = _to_number(hi) if hi is not None else 0.0
        if hi_f != hi_f or hi_f == 0:
            hi_f = ceiling
        return ScoreRange(lo_f, hi_f)
    text = _as_selector(value)
    if text == ALL:
        return None
    lo_text, _, hi_text = text.partition("-")
    lo = _to_number(lo_text)
    hi = _to_number(hi_text)
    if hi != hi or hi == 0:
        hi = ceiling
    return ScoreRange(lo, hi)


def _as_edges(values: Optional[Iterable[object]], default: Tuple[float, ...]) -> Tuple[float, ...]:
    """Histogram thresholds; anything but ``len(default)`` distinct numbers falls back to ``default``."""
    if not values:
        return default
    out = []
    for v in values:
        try:
            out.append(float(v))
        except (TypeError, ValueError):
            continue
    out = sorted(set(out))
    return tuple(out) if len(out) == len(default) else default


def normalize_limits(raw: Optional[dict]) -> Limits:
    t = raw or {}
    defaults = Limits()

    def _int(key: str, default: int, lo: int, hi: int) -> int:
        try:
            v = int(t.get(key, default))
        except (TypeError, ValueError):
            v = default
        return max(lo, min(hi, v))

    try:
        ceiling = float(t.get("score_range_ceiling", defaults.score_range_ceiling))
    except (TypeError, ValueError):
        ceiling = defaults.score_range_ceiling

    return Limits(
        max_table_rows=_int("max_table_rows", defaults.max_table_rows, 1, 1000),
        max_compare_groups=_int("max_compare_groups", defaults.max_compare_groups, 1, 50),
        score_range_ceiling=ceiling,
        trainer_bucket_edges=_as_edges(t.get("trainer_bucket_edges"), defaults.trainer_bucket_edges),
    )


def normalize_filters(raw: Optional[dict]) -> FilterCriteria:
    raw = raw or {}
    limits = raw.get("limits")
    if not isinstance(limits, Limits):
        limits = normalize_limits(limits)
    return FilterCriteria(
        college=_as_selector(raw.get("college")),
        semester=_as_selector(raw.get("semester")),
        curriculum=_as_selector(raw.get("curriculum")),
        score_range=parse_score_range(raw.get("score_range"), ceiling=limits.score_range_ceiling),
        limits=limits,
    )
