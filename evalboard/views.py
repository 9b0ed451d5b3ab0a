"""Per-view controllers.

Each view owns its rendered state and is updated through ``refresh``; a
``Dashboard`` is configured with the views a page declares and recomputes all
of them from a single filter pass.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from evalboard.data import prepare_context
from evalboard.filters import FilterCriteria, normalize_filters
from evalboard.metrics_colleges import compute_colleges
from evalboard.metrics_debug import compute_debug
from evalboard.metrics_overview import compute_overview
from evalboard.metrics_subjects import compute_subjects
from evalboard.metrics_trainers import compute_trainers

NOT_APPLICABLE = "N/A"

VIEW_COMPUTE: Dict[str, Callable[[FilterCriteria, Dict[str, Any]], Dict[str, Any]]] = {
    "overview": compute_overview,
    "colleges": compute_colleges,
    "subjects": compute_subjects,
    "trainers": compute_trainers,
    "debug": compute_debug,
}

PAGE_VIEWS: Dict[str, List[str]] = {
    "Overview": ["overview"],
    "Colleges": ["colleges"],
    "Subjects": ["subjects"],
    "Trainers": ["trainers"],
    "Data Quality": ["debug"],
}

EMPTY_MESSAGES = {
    "table": "No data matches the selected filters.",
    "action_items": "No priority action items for this selection.",
}

SCORE_KEYS = {
    "avg_content_score",
    "avg_trainer_score",
    "highest_score",
    "lowest_score",
    "content_score",
    "trainer_score",
}


def format_score(value: Optional[float]) -> str:
    if value is None or value != value:
        return NOT_APPLICABLE
    return f"{float(value):.2f}"


def format_text(value: object) -> str:
    if value is None or value == "":
        return NOT_APPLICABLE
    return str(value)


def format_row(row: Dict[str, Any]) -> Dict[str, str]:
    out = {}
    for key, value in row.items():
        if key in SCORE_KEYS:
            out[key] = format_score(value)
        elif key == "count":
            out[key] = str(value)
        else:
            out[key] = format_text(value)
    return out


def render_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """Display-ready copy of a page payload: scores as text, sentinels as N/A."""
    state: Dict[str, Any] = {}
    for key, value in result.items():
        if key == "summary" and isinstance(value, dict):
            state[key] = {k: format_score(v) for k, v in value.items()}
        elif key in EMPTY_MESSAGES and isinstance(value, list):
            state[key] = {
                "rows": [format_row(r) for r in value],
                "placeholder": None if value else EMPTY_MESSAGES[key],
            }
        else:
            state[key] = value
    return state


class ViewController:
    """Owns the rendered state for one view."""

    def __init__(self, name: str):
        if name not in VIEW_COMPUTE:
            raise ValueError(f"Unknown view '{name}'. Expected one of: {', '.join(VIEW_COMPUTE)}")
        self.name = name
        self.compute = VIEW_COMPUTE[name]
        self.state: Optional[Dict[str, Any]] = None
        self.revision = 0

    def refresh(self, result: Dict[str, Any]) -> Dict[str, Any]:
        self.state = render_result(result)
        self.revision += 1
        return self.state

    def __repr__(self) -> str:
        return f"ViewController(name={self.name!r}, revision={self.revision})"


class Dashboard:
    """A declared set of active views over one loaded dataset."""

    def __init__(self, data_ctx: Dict[str, Any], views: Iterable[str]):
        names = list(dict.fromkeys(views))
        if not names:
            raise ValueError("At least one view must be declared")
        self.data_ctx = data_ctx
        self.controllers: Dict[str, ViewController] = {name: ViewController(name) for name in names}

    @classmethod
    def for_page(cls, data_ctx: Dict[str, Any], page: str) -> "Dashboard":
        if page not in PAGE_VIEWS:
            raise ValueError(f"Unknown page '{page}'. Expected one of: {', '.join(PAGE_VIEWS)}")
        return cls(data_ctx, PAGE_VIEWS[page])

    @property
    def views(self) -> List[str]:
        return list(self.controllers)

    def update(self, filters: dict | FilterCriteria | None = None) -> Dict[str, Dict[str, Any]]:
        filt = filters if isinstance(filters, FilterCriteria) else normalize_filters(filters)
        ctx = prepare_context(filt, self.data_ctx)
        return {
            name: controller.refresh(controller.compute(filt, ctx))
            for name, controller in self.controllers.items()
        }
