import pandas as pd
import pytest

from evalboard.aggregations import (
    action_items,
    bucket_labels,
    college_comparison,
    college_means,
    detail_rows,
    group_stats,
    mean_score,
    score_stats,
    semester_means,
    subject_performance,
    subject_score_points,
    summary_stats,
    trainer_histogram,
)
from evalboard.data import filter_records, normalize_records
from evalboard.filters import normalize_filters


def test_mean_score_ignores_nulls():
    assert mean_score([8.0, None, float("nan"), 6.0]) == 7.0
    assert mean_score([]) is None
    assert mean_score([None, float("nan")]) is None


def test_score_stats_empty_is_not_applicable():
    assert score_stats([]) == {"mean": None, "min": None, "max": None, "count": 0}


def test_score_stats_mean_within_bounds():
    values = [0.1, 0.1, 0.1, 9.7, 3.3]
    stats = score_stats(values)
    assert stats["min"] <= stats["mean"] <= stats["max"]
    assert stats["count"] == 5
    same = score_stats([0.1] * 7)
    assert same["min"] <= same["mean"] <= same["max"]


def test_summary_stats(records):
    summary = summary_stats(records)
    assert summary["avg_content_score"] == pytest.approx(23.5 / 3)
    assert summary["avg_trainer_score"] == pytest.approx(29.7 / 4)
    assert summary["highest_score"] == 9.5
    assert summary["lowest_score"] == 6.0


def test_summary_stats_empty_set(records):
    empty = filter_records(records, normalize_filters({"college": "Nowhere"}))
    assert summary_stats(empty) == {
        "avg_content_score": None,
        "avg_trainer_score": None,
        "highest_score": None,
        "lowest_score": None,
    }
    assert summary_stats(pd.DataFrame()) == summary_stats(empty)


def test_worked_example():
    df, _ = normalize_records(
        [
            {"College": "A", "Sem": 1, "ContentScore": 8, "TrainerScore": 7},
            {"College": "A", "Sem": 1, "ContentScore": None, "TrainerScore": 9},
        ]
    )
    out = filter_records(df, normalize_filters({"college": "A"}))
    assert len(out) == 2
    assert mean_score(out["content_score"]) == 8.0
    counts = {b["bucket"]: b["count"] for b in trainer_histogram(out)}
    assert counts == {"Below 6": 0, "6-7": 0, "7-8": 1, "8-9": 0, "9-10": 1}


def test_group_stats_first_appearance_order(records):
    rows = group_stats(records, "college")
    assert [r["key"] for r in rows] == ["A", "B", "C"]
    a = rows[0]
    assert a["count"] == 2
    assert a["content_score"] == {"mean": 8.0, "min": 8.0, "max": 8.0, "count": 1}
    assert a["trainer_score"]["mean"] == 8.0


def test_group_stats_skips_blank_keys():
    df, _ = normalize_records(
        [{"College": "", "ContentScore": 7}, {"College": "X", "ContentScore": 8}, {"ContentScore": 9}]
    )
    assert [r["key"] for r in group_stats(df, "college")] == ["X"]


def test_group_stats_empty():
    assert group_stats(pd.DataFrame(), "college") == []


def test_college_comparison_caps_groups(records):
    rows = college_comparison(records, limit=2)
    assert [r["college"] for r in rows] == ["A", "B"]
    assert rows[1]["avg_content_score"] == 9.5
    assert rows[1]["avg_trainer_score"] == pytest.approx(6.85)


def test_college_comparison_reports_missing_scores_as_none(records):
    rows = college_comparison(records, limit=5)
    c = rows[-1]
    assert c["college"] == "C"
    assert c["avg_content_score"] == 6.0
    assert c["avg_trainer_score"] is None


def test_college_means_sorted_by_name():
    df, _ = normalize_records(
        [{"College": "Zeta", "ContentScore": 7}, {"College": "Alpha", "ContentScore": 8}, {"College": "Mid", "ContentScore": 9}]
    )
    assert [r["college"] for r in college_means(df)] == ["Alpha", "Mid", "Zeta"]


def test_semester_means_numeric_ascending(records):
    rows = semester_means(records)
    assert [r["semester"] for r in rows] == [1, 2, 3]
    assert rows[0]["avg_content_score"] == 8.0
    assert rows[0]["avg_trainer_score"] == 8.0
    assert rows[2]["avg_content_score"] is None
    assert rows[2]["avg_trainer_score"] == 8.2


def test_subject_score_points(records):
    points = subject_score_points(records)
    assert points == [
        {"subject": "Algebra", "content_score": 8.0},
        {"subject": "Physics", "content_score": 9.5},
        {"subject": "Chemistry", "content_score": 6.0},
    ]


def test_subject_performance_sorted_descending(records):
    rows = subject_performance(records)
    assert [r["subject"] for r in rows] == ["Physics", "Algebra", "Chemistry"]
    assert rows[1] == {"subject": "Algebra", "avg_content_score": 8.0, "count": 1}


def test_subject_performance_drops_unscored_subjects():
    df, _ = normalize_records(
        [{"Subject": "Art", "ContentScore": "n/a"}, {"Subject": "Music", "ContentScore": 7}]
    )
    assert [r["subject"] for r in subject_performance(df)] == ["Music"]


def test_subject_performance_ties_keep_first_appearance():
    df, _ = normalize_records(
        [{"Subject": "B", "ContentScore": 8}, {"Subject": "A", "ContentScore": 8}, {"Subject": "C", "ContentScore": 9}]
    )
    assert [r["subject"] for r in subject_performance(df)] == ["C", "B", "A"]


def test_bucket_labels():
    assert bucket_labels() == ["Below 6", "6-7", "7-8", "8-9", "9-10"]
    assert bucket_labels([5, 7.5]) == ["Below 5", "5-7.5", "7.5-10"]


def test_trainer_histogram_declaration_order(records):
    hist = trainer_histogram(records)
    assert [b["bucket"] for b in hist] == ["Below 6", "6-7", "7-8", "8-9", "9-10"]
    assert [b["count"] for b in hist] == [1, 0, 1, 1, 1]


def test_trainer_histogram_boundaries_are_half_open():
    df, _ = normalize_records([{"TrainerScore": s} for s in [5.99, 6, 7, 8, 9, 10]])
    assert [b["count"] for b in trainer_histogram(df)] == [1, 1, 1, 1, 2]


def test_trainer_histogram_custom_edges():
    df, _ = normalize_records([{"TrainerScore": s} for s in [4, 6, 8]])
    hist = trainer_histogram(df, edges=(5, 7))
    assert hist == [
        {"bucket": "Below 5", "count": 1},
        {"bucket": "5-7", "count": 1},
        {"bucket": "7-10", "count": 1},
    ]


@pytest.mark.parametrize(
    "raw",
    [{}, {"college": "A"}, {"college": "Nowhere"}, {"curriculum": "Elective"}, {"score_range": "7-8"}],
)
def test_trainer_histogram_sums_to_scored_sessions(records, raw):
    subset = filter_records(records, normalize_filters(raw))
    total = sum(b["count"] for b in trainer_histogram(subset))
    assert total == int(subset["trainer_score"].notna().sum())


def test_action_items_only_non_blank(records):
    assert action_items(records) == [
        {"subject": "Algebra ", "college": "A", "action_items": "Review homework"},
        {"subject": "Chemistry", "college": "C", "action_items": "More labs"},
    ]


def test_detail_rows_truncates_and_uses_none(records):
    rows = detail_rows(records, limit=2)
    assert len(rows) == 2
    assert rows[1]["content_score"] is None
    assert rows[1]["trainer_score"] == 9.0
    assert detail_rows(records.iloc[0:0]) == []


def test_aggregations_are_idempotent(records):
    f = normalize_filters({"curriculum": "Core"})
    first = filter_records(records, f)
    second = filter_records(records, f)
    assert summary_stats(first) == summary_stats(second)
    assert group_stats(first, "college") == group_stats(second, "college")
    assert trainer_histogram(first) == trainer_histogram(second)
    assert subject_performance(first) == subject_performance(second)
