from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from evalboard.aggregations import college_means, detail_rows, summary_stats
from evalboard.charts import score_pair_bars, to_vega_spec
from evalboard.filters import FilterCriteria


def compute_colleges(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    colleges = college_means(df)

    charts: Dict[str, Any] = {}
    if colleges:
        chart = score_pair_bars(colleges, "college", "College", horizontal=True)
        charts["college_performance"] = to_vega_spec(chart)

    return {
        "filters": asdict(filters),
        "row_count": int(len(df)),
        "summary": summary_stats(df),
        "colleges": colleges,
        "table": detail_rows(df, limit=filters.limits.max_table_rows),
        "charts": charts,
    }
