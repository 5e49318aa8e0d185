from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.charts import to_vega_spec
from core.config import TOP_TOPICS
from core.data import group_metrics, view_rows


def topic_rollup(df: pd.DataFrame, *, limit: int = TOP_TOPICS) -> List[Dict[str, Any]]:
    grouped = group_metrics(df, "topic", ["relevance", "likelihood"])
    if grouped.empty:
        return []
    grouped = grouped[grouped["count"] > 0]
    grouped = grouped.sort_values("count", ascending=False, kind="mergesort").head(max(0, int(limit)))
    return view_rows(grouped, ["topic", "avgRelevance", "avgLikelihood", "count"])


def topic_chart(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not rows:
        return {}
    long_df = pd.DataFrame(rows).melt(
        id_vars="topic", value_vars=["avgRelevance", "avgLikelihood"], var_name="metric", value_name="value"
    )
    hover = alt.selection_point(fields=["metric"], on="mouseover", empty="all")
    line = (
        alt.Chart(long_df)
        .mark_line(point={"filled": True})
        .encode(
            x=alt.X("topic:N", sort=None, title="Topic", axis=alt.Axis(labelAngle=-45)),
            y=alt.Y("value:Q", title="Average"),
            color=alt.Color("metric:N", title="Metric"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=[alt.Tooltip("topic:N", title="Topic"), alt.Tooltip("metric:N"), alt.Tooltip("value:Q")],
        )
        .add_params(hover)
        .properties(height=350)
    )
    return {"topic_rollup": to_vega_spec(line)}
