from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.charts import to_vega_spec
from core.data import format_percent_1, group_metrics


def region_distribution(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Record count per region; the percentage is taken over every filtered row."""
    grouped = group_metrics(df, "region")
    if grouped.empty:
        return []
    total = int(len(df))
    return [
        {"region": region, "count": int(count), "percentage": format_percent_1(int(count), total)}
        for region, count in zip(grouped["region"], grouped["count"])
    ]


def region_chart(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not rows:
        return {}
    pie = (
        alt.Chart(pd.DataFrame(rows))
        .mark_arc(outerRadius=120)
        .encode(
            theta=alt.Theta("count:Q"),
            color=alt.Color("region:N", title="Region"),
            tooltip=[
                alt.Tooltip("region:N", title="Region"),
                alt.Tooltip("count:Q", title="Count"),
                alt.Tooltip("percentage:N", title="Percentage"),
            ],
        )
        .properties(height=350)
    )
    return {"region_distribution": to_vega_spec(pie)}
