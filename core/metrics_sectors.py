from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.charts import to_vega_spec
from core.data import group_metrics, view_rows


def sector_intensity(df: pd.DataFrame) -> List[Dict[str, Any]]:
    grouped = group_metrics(df, "sector", ["intensity"])
    if grouped.empty:
        return []
    grouped = grouped.sort_values("avgIntensity", ascending=False, kind="mergesort")
    return view_rows(grouped, ["sector", "avgIntensity"])


def sector_rollup(df: pd.DataFrame) -> List[Dict[str, Any]]:
    grouped = group_metrics(df, "sector", ["intensity", "relevance", "likelihood"])
    if grouped.empty:
        return []
    grouped = grouped.sort_values("count", ascending=False, kind="mergesort")
    return view_rows(grouped, ["sector", "count", "avgIntensity", "avgRelevance", "avgLikelihood"])


def sector_charts(intensity_rows: List[Dict[str, Any]], rollup_rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    charts: Dict[str, Any] = {}
    if intensity_rows:
        bar = (
            alt.Chart(pd.DataFrame(intensity_rows))
            .mark_bar(cornerRadiusTopLeft=6, cornerRadiusTopRight=6)
            .encode(
                x=alt.X("sector:N", sort="-y", title="Sector", axis=alt.Axis(labelAngle=-45)),
                y=alt.Y("avgIntensity:Q", title="Average Intensity"),
                tooltip=[alt.Tooltip("sector:N", title="Sector"), alt.Tooltip("avgIntensity:Q", title="Average Intensity")],
            )
            .properties(height=350)
        )
        charts["sector_intensity"] = to_vega_spec(bar)
    if rollup_rows:
        area = (
            alt.Chart(pd.DataFrame(rollup_rows))
            .mark_area(line=True, opacity=0.6)
            .encode(
                x=alt.X("sector:N", sort=None, title="Sector", axis=alt.Axis(labelAngle=-45)),
                y=alt.Y("count:Q", title="Count"),
                tooltip=[
                    alt.Tooltip("sector:N", title="Sector"),
                    alt.Tooltip("count:Q", title="Count"),
                    alt.Tooltip("avgIntensity:Q", title="Avg Intensity"),
                    alt.Tooltip("avgRelevance:Q", title="Avg Relevance"),
                    alt.Tooltip("avgLikelihood:Q", title="Avg Likelihood"),
                ],
            )
            .properties(height=350)
        )
        charts["sector_rollup"] = to_vega_spec(area)
    return charts
