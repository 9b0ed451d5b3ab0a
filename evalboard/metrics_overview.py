from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from evalboard.aggregations import (
    action_items,
    college_comparison,
    detail_rows,
    semester_means,
    subject_score_points,
    summary_stats,
)
from evalboard.charts import (
    SCORE_AXIS_DOMAIN,
    SCORE_BANDS,
    color_scale,
    palette_for,
    score_band,
    score_pair_bars,
    score_pair_long,
    to_vega_spec,
)
from evalboard.filters import FilterCriteria


def compute_overview(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    limits = filters.limits

    comparison = college_comparison(df, limit=limits.max_compare_groups)
    semesters = semester_means(df)
    points = subject_score_points(df)

    charts: Dict[str, Any] = {}
    if comparison:
        colleges = [r["college"] for r in comparison]
        # One color per college, keyed by its position in the comparison
        compare_df = score_pair_long(comparison, "college")
        compare_chart = (
            alt.Chart(compare_df)
            .mark_bar()
            .encode(
                x=alt.X("metric:N", title=None, axis=alt.Axis(grid=False, labelAngle=0)),
                xOffset=alt.XOffset("college:N", sort=[str(c) for c in colleges]),
                y=alt.Y(
                    "score:Q",
                    title="Average Score",
                    scale=alt.Scale(domain=SCORE_AXIS_DOMAIN, clamp=True),
                    axis=alt.Axis(format=".1f", gridDash=[4, 4], domain=False, ticks=False),
                ),
                color=alt.Color("college:N", title="College", scale=color_scale(colleges, palette_for(colleges))),
                tooltip=[
                    alt.Tooltip("college:N", title="College"),
                    alt.Tooltip("metric:N", title="Metric"),
                    alt.Tooltip("score:Q", title="Score", format=".2f"),
                ],
            )
        )
        charts["college_comparison"] = to_vega_spec(compare_chart)

    if semesters:
        sem_rows = [{**r, "semester": f"Sem {r['semester']}"} for r in semesters]
        charts["semester_bar"] = to_vega_spec(score_pair_bars(sem_rows, "semester", "Semester"))

    if points:
        heat_df = pd.DataFrame(points)
        heat_df["band"] = heat_df["content_score"].map(score_band)
        bands = [label for _, label, _ in SCORE_BANDS]
        heatmap = (
            alt.Chart(heat_df)
            .mark_rect()
            .encode(
                x=alt.X("subject:N", title="Subject", axis=alt.Axis(labels=False, ticks=False)),
                y=alt.Y("content_score:Q", title="Content Score", bin=alt.Bin(step=0.5)),
                color=alt.Color("band:N", title="Score", scale=color_scale(bands, [c for _, _, c in SCORE_BANDS])),
                tooltip=[
                    alt.Tooltip("subject:N", title="Subject"),
                    alt.Tooltip("content_score:Q", title="Content Score", format=".2f"),
                ],
            )
        )
        charts["subject_heatmap"] = to_vega_spec(heatmap)

    return {
        "filters": asdict(filters),
        "row_count": int(len(df)),
        "summary": summary_stats(df),
        "college_comparison": comparison,
        "semester_means": semesters,
        "subject_scores": points,
        "action_items": action_items(df),
        "table": detail_rows(df, limit=limits.max_table_rows),
        "charts": charts,
    }
