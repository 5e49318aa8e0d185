from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.charts import to_vega_spec
from core.data import DEFAULT_TREND_YEAR, group_metrics, view_rows, year_sort_key, year_text


def trend_years(df: pd.DataFrame) -> pd.Series:
    """End year, else start year, else the default reporting year, as text."""
    years = [
        year_text(end) or year_text(start) or DEFAULT_TREND_YEAR
        for end, start in zip(df["end_year"], df["start_year"])
    ]
    return pd.Series(years, index=df.index, dtype=object)


def year_trend(df: pd.DataFrame) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    keyed = df.assign(year=trend_years(df))
    grouped = group_metrics(keyed, "year", ["intensity", "relevance", "likelihood"])
    if grouped.empty:
        return []
    grouped = grouped.sort_values("year", key=lambda s: s.map(year_sort_key), kind="mergesort")
    return view_rows(grouped, ["year", "avgIntensity", "avgRelevance", "avgLikelihood", "count"])


def trend_chart(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not rows:
        return {}
    long_df = pd.DataFrame(rows).melt(
        id_vars="year",
        value_vars=["avgIntensity", "avgRelevance", "avgLikelihood"],
        var_name="metric",
        value_name="value",
    )
    hover = alt.selection_point(fields=["metric"], on="mouseover", empty="all")
    line = (
        alt.Chart(long_df)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("year:O", sort=None, title="Year"),
            y=alt.Y("value:Q", title="Average", axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("metric:N", title="Metric"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=[alt.Tooltip("year:O", title="Year"), alt.Tooltip("metric:N"), alt.Tooltip("value:Q")],
        )
        .add_params(hover)
        .properties(height=260)
    )
    return {"year_trend": to_vega_spec(line)}
