from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.config import PREVIEW_ROWS, TOP_TOPICS
from core.data import SCORE_FIELDS, average_column, records_to_frame, safe_average
from core.filters import FilterCriteria
from core.metrics_regions import region_chart, region_distribution
from core.metrics_sectors import sector_charts, sector_intensity, sector_rollup
from core.metrics_topics import topic_chart, topic_rollup
from core.metrics_trend import trend_chart, year_trend

LEVEL_HIGH = 7
LEVEL_MEDIUM = 4


def summary_stats(df: pd.DataFrame) -> Dict[str, Any]:
    total = int(len(df))
    stats: Dict[str, Any] = {"total": total}
    for metric in SCORE_FIELDS:
        column_total = float(pd.to_numeric(df[metric], errors="coerce").fillna(0).sum()) if total else 0.0
        stats[average_column(metric)] = safe_average(column_total, total)
    return stats


def stat_progress(value: Optional[float]) -> float:
    """Fill percentage of a stat card on a 0-10 scale, capped at 100."""
    if not value:
        return 0.0
    return max(0.0, min(float(value) / 10 * 100, 100.0))


def score_level(value: Optional[float]) -> str:
    value = value or 0
    if value > LEVEL_HIGH:
        return "high"
    if value > LEVEL_MEDIUM:
        return "medium"
    return "low"


def data_preview(df: pd.DataFrame, *, limit: int = PREVIEW_ROWS) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for _, r in df.head(max(0, int(limit))).iterrows():
        row: Dict[str, Any] = {}
        for col in ("topic", "sector", "region"):
            value = r[col]
            row[col] = value if isinstance(value, str) and value else "N/A"
        for metric in SCORE_FIELDS:
            value = r[metric]
            score = 0 if value is None or pd.isna(value) else value
            row[metric] = score
            row[f"{metric}_level"] = score_level(score)
        rows.append(row)
    return rows


def compute_dashboard(
    df: pd.DataFrame,
    criteria: Optional[FilterCriteria] = None,
    *,
    include_charts: bool = False,
    top_topics: int = TOP_TOPICS,
) -> Dict[str, Any]:
    """Every view model for one filtered dataset.

    Pure: the payload depends only on `df` (already filtered) and the
    arguments, so calling it twice on the same frame gives the same result.
    """
    criteria = criteria or FilterCriteria()
    stats = summary_stats(df)

    intensity_rows = sector_intensity(df)
    region_rows = region_distribution(df)
    rollup_rows = sector_rollup(df)
    topic_rows = topic_rollup(df, limit=top_topics)
    trend_rows = year_trend(df)

    charts: Dict[str, Any] = {}
    if include_charts:
        charts.update(sector_charts(intensity_rows, rollup_rows))
        charts.update(region_chart(region_rows))
        charts.update(topic_chart(topic_rows))
        charts.update(trend_chart(trend_rows))

    return {
        "filters": asdict(criteria),
        "summary": stats,
        "progress": {k: stat_progress(v) for k, v in stats.items() if k != "total"},
        "sector_intensity": intensity_rows,
        "region_distribution": region_rows,
        "sector_rollup": rollup_rows,
        "topic_rollup": topic_rows,
        "year_trend": trend_rows,
        "preview": data_preview(df),
        "charts": charts,
    }


def empty_dashboard(criteria: Optional[FilterCriteria] = None) -> Dict[str, Any]:
    return compute_dashboard(records_to_frame([]), criteria)
