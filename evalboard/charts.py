from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

SCORE_METRIC_LABELS = {"avg_content_score": "Content Score", "avg_trainer_score": "Trainer Score"}
SCORE_AXIS_DOMAIN = [4, 10]

PALETTE = ["#4f46e5", "#10b981", "#f59e0b", "#ef4444", "#0ea5e9", "#8b5cf6", "#ec4899", "#14b8a6"]
CONTENT_COLOR = "#4f46e5"
TRAINER_COLOR = "#10b981"
HISTOGRAM_COLORS = ["#EF4444", "#F59E0B", "#FBBF24", "#A7F3D0", "#10B981"]

# (upper bound, label, color) for content score heat bands
SCORE_BANDS = [(6.5, "Low", "#EF4444"), (8.0, "Medium", "#F59E0B"), (float("inf"), "High", "#10B981")]


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def palette_for(groups: Sequence[object], palette: Sequence[str] = PALETTE) -> List[str]:
    """Colors keyed by group index, cycling through the palette."""
    return [palette[i % len(palette)] for i in range(len(groups))]


def score_band(score: float) -> str:
    for upper, label, _ in SCORE_BANDS:
        if score < upper:
            return label
    return SCORE_BANDS[-1][1]


def color_scale(domain: Sequence[object], colors: Sequence[str]) -> alt.Scale:
    return alt.Scale(domain=[str(d) for d in domain], range=list(colors))


def score_pair_long(rows: List[Dict[str, Any]], label_field: str) -> pd.DataFrame:
    """Melt ``avg_content_score``/``avg_trainer_score`` rows for grouped bars.

    Groups without a score are left out of the chart data.
    """
    df = pd.DataFrame(rows, columns=[label_field, "avg_content_score", "avg_trainer_score"])
    long_df = df.melt(
        id_vars=label_field,
        value_vars=["avg_content_score", "avg_trainer_score"],
        var_name="metric",
        value_name="score",
    )
    long_df["metric"] = long_df["metric"].map(SCORE_METRIC_LABELS)
    long_df[label_field] = long_df[label_field].astype(str)
    long_df["score"] = pd.to_numeric(long_df["score"], errors="coerce")
    return long_df.dropna(subset=["score"])


def score_pair_bars(rows: List[Dict[str, Any]], label_field: str, title: str, *, horizontal: bool = False) -> alt.Chart:
    long_df = score_pair_long(rows, label_field)
    metric_color = alt.Color(
        "metric:N",
        title="Metric",
        scale=color_scale(list(SCORE_METRIC_LABELS.values()), [CONTENT_COLOR, TRAINER_COLOR]),
    )
    score_axis = alt.Axis(format=".1f", gridDash=[4, 4], domain=False, ticks=False)
    score_scale = alt.Scale(domain=SCORE_AXIS_DOMAIN, clamp=True)
    tooltip = [
        alt.Tooltip(f"{label_field}:N", title=title),
        alt.Tooltip("metric:N", title="Metric"),
        alt.Tooltip("score:Q", title="Score", format=".2f"),
    ]
    base = alt.Chart(long_df).mark_bar()
    if horizontal:
        return base.encode(
            y=alt.Y(f"{label_field}:N", title=title, sort=None, axis=alt.Axis(grid=False)),
            yOffset="metric:N",
            x=alt.X("score:Q", title="Average Score", scale=score_scale, axis=score_axis),
            color=metric_color,
            tooltip=tooltip,
        )
    return base.encode(
        x=alt.X(f"{label_field}:N", title=title, sort=None, axis=alt.Axis(grid=False, labelAngle=0)),
        xOffset="metric:N",
        y=alt.Y("score:Q", title="Average Score", scale=score_scale, axis=score_axis),
        color=metric_color,
        tooltip=tooltip,
    )
