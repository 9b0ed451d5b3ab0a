import json

import pytest

from evalboard.data import prepare_context
from evalboard.filters import normalize_filters
from evalboard.metrics_colleges import compute_colleges
from evalboard.metrics_debug import compute_debug
from evalboard.metrics_overview import compute_overview
from evalboard.metrics_subjects import compute_subjects
from evalboard.metrics_trainers import compute_trainers


def _run(compute, data_ctx, raw=None):
    f = normalize_filters(raw or {})
    return compute(f, prepare_context(f, data_ctx))


def test_overview_payload(data_ctx):
    payload = _run(compute_overview, data_ctx)
    assert payload["row_count"] == 5
    assert payload["summary"]["highest_score"] == 9.5
    assert [r["college"] for r in payload["college_comparison"]] == ["A", "B", "C"]
    assert [r["semester"] for r in payload["semester_means"]] == [1, 2, 3]
    assert len(payload["subject_scores"]) == 3
    assert len(payload["action_items"]) == 2
    assert len(payload["table"]) == 5
    assert set(payload["charts"]) == {"college_comparison", "semester_bar", "subject_heatmap"}
    assert payload["filters"]["college"] == "All"


def test_overview_respects_limits(data_ctx):
    payload = _run(compute_overview, data_ctx, {"limits": {"max_table_rows": 2, "max_compare_groups": 1}})
    assert len(payload["table"]) == 2
    assert [r["college"] for r in payload["college_comparison"]] == ["A"]
    assert len(payload["action_items"]) == 2


def test_overview_palette_is_deterministic(data_ctx):
    first = _run(compute_overview, data_ctx)
    second = _run(compute_overview, data_ctx)
    assert first == second
    scale = first["charts"]["college_comparison"]["encoding"]["color"]["scale"]
    assert scale["domain"] == ["A", "B", "C"]
    assert scale["range"] == ["#4f46e5", "#10b981", "#f59e0b"]


def test_overview_empty_selection(data_ctx):
    payload = _run(compute_overview, data_ctx, {"college": "Nowhere"})
    assert payload["row_count"] == 0
    assert all(v is None for v in payload["summary"].values())
    assert payload["charts"] == {}
    assert payload["table"] == []
    assert payload["action_items"] == []


def test_colleges_payload(data_ctx):
    payload = _run(compute_colleges, data_ctx, {"curriculum": "Core"})
    assert [r["college"] for r in payload["colleges"]] == ["A", "C"]
    assert "college_performance" in payload["charts"]
    assert payload["summary"]["avg_content_score"] == pytest.approx(7.0)


def test_subjects_payload(data_ctx):
    payload = _run(compute_subjects, data_ctx)
    assert [r["subject"] for r in payload["subjects"]] == ["Physics", "Algebra", "Chemistry"]
    assert "subject_performance" in payload["charts"]
    assert _run(compute_subjects, data_ctx) == payload


def test_trainers_payload(data_ctx):
    payload = _run(compute_trainers, data_ctx)
    assert payload["scored_sessions"] == 4
    assert [b["count"] for b in payload["histogram"]] == [1, 0, 1, 1, 1]
    assert "trainer_histogram" in payload["charts"]


def test_trainers_empty_selection_keeps_all_buckets(data_ctx):
    payload = _run(compute_trainers, data_ctx, {"score_range": "0-1"})
    assert payload["row_count"] == 0
    assert [b["count"] for b in payload["histogram"]] == [0, 0, 0, 0, 0]


def test_debug_payload(data_ctx):
    payload = _run(compute_debug, data_ctx, {"college": "A"})
    assert payload["row_counts"] == {"records": 5, "filtered_records": 2}
    checks = payload["cleaning_checks"]
    assert checks["missing_content_score"] == 2
    assert checks["missing_trainer_score"] == 1
    assert checks["non_numeric_semester"] == 1
    assert checks["with_action_items"] == 2
    assert payload["non_numeric_semesters"][0]["semester"] == "Summer"


@pytest.mark.parametrize("compute", [compute_overview, compute_colleges, compute_subjects, compute_trainers])
def test_payloads_are_json_serializable(data_ctx, compute):
    json.dumps(_run(compute, data_ctx), allow_nan=False)
