from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from evalboard.aggregations import detail_rows, trainer_histogram
from evalboard.charts import HISTOGRAM_COLORS, color_scale, palette_for, to_vega_spec
from evalboard.filters import FilterCriteria


def compute_trainers(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    histogram = trainer_histogram(df, edges=filters.limits.trainer_bucket_edges)
    scored = int(sum(b["count"] for b in histogram))

    hist_df = pd.DataFrame(histogram, columns=["bucket", "count"])
    buckets = hist_df["bucket"].tolist()
    colors = HISTOGRAM_COLORS if len(buckets) == len(HISTOGRAM_COLORS) else palette_for(buckets)
    chart = (
        alt.Chart(hist_df)
        .mark_bar()
        .encode(
            x=alt.X("bucket:N", title="Trainer Score", sort=buckets, axis=alt.Axis(grid=False, labelAngle=0)),
            y=alt.Y("count:Q", title="Number of Sessions", axis=alt.Axis(format="d", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("bucket:N", legend=None, scale=color_scale(buckets, colors)),
            tooltip=[alt.Tooltip("bucket:N", title="Trainer Score"), alt.Tooltip("count:Q", title="Sessions")],
        )
    )

    return {
        "filters": asdict(filters),
        "row_count": int(len(df)),
        "scored_sessions": scored,
        "histogram": histogram,
        "table": detail_rows(df, limit=filters.limits.max_table_rows),
        "charts": {"trainer_histogram": to_vega_spec(chart)},
    }
