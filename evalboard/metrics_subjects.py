from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from evalboard.aggregations import detail_rows, subject_performance
from evalboard.charts import color_scale, palette_for, to_vega_spec
from evalboard.filters import FilterCriteria


def compute_subjects(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    ranking = subject_performance(df)

    charts: Dict[str, Any] = {}
    if ranking:
        rank_df = pd.DataFrame(ranking)
        subjects = rank_df["subject"].astype(str).tolist()
        hover = alt.selection_point(name="subject_hover", fields=["subject"], on="mouseover", empty="all")
        base = alt.Chart(rank_df).encode(
            y=alt.Y("subject:N", title="Subject", sort=subjects, axis=alt.Axis(grid=False)),
            x=alt.X(
                "avg_content_score:Q",
                title="Average Content Score",
                axis=alt.Axis(format=".1f", gridDash=[4, 4], domain=False, ticks=False),
            ),
            tooltip=[
                alt.Tooltip("subject:N", title="Subject"),
                alt.Tooltip("avg_content_score:Q", title="Average Score", format=".2f"),
                alt.Tooltip("count:Q", title="Scored Sessions"),
            ],
        )
        bars = (
            base.mark_bar()
            .encode(
                color=alt.Color("subject:N", legend=None, scale=color_scale(subjects, palette_for(subjects))),
                opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            )
            .add_params(hover)
        )
        labels = base.mark_text(align="left", dx=4).encode(text=alt.Text("avg_content_score:Q", format=".1f"))
        charts["subject_performance"] = to_vega_spec(alt.layer(bars, labels))

    return {
        "filters": asdict(filters),
        "row_count": int(len(df)),
        "subjects": ranking,
        "table": detail_rows(df, limit=filters.limits.max_table_rows),
        "charts": charts,
    }
