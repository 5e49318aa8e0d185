from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd


logger = logging.getLogger(__name__)

TEXT_FIELDS = ["topic", "sector", "region", "pestle", "source", "country"]
DETAIL_FIELDS = ["title", "insight", "url", "impact", "added", "published"]
YEAR_FIELDS = ["end_year", "start_year"]
SCORE_FIELDS = ["intensity", "relevance", "likelihood"]

DEFAULT_TREND_YEAR = "2024"


@dataclass(frozen=True)
class Record:
    end_year: Optional[int] = None
    intensity: float = 0
    sector: Optional[str] = None
    topic: Optional[str] = None
    insight: Optional[str] = None
    url: Optional[str] = None
    region: Optional[str] = None
    start_year: Optional[int] = None
    impact: Optional[str] = None
    added: Optional[str] = None
    published: Optional[str] = None
    country: Optional[str] = None
    relevance: float = 0
    pestle: Optional[str] = None
    source: Optional[str] = None
    title: Optional[str] = None
    likelihood: float = 0


RECORD_FIELDS = [f.name for f in fields(Record)]


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_text(value: object) -> Optional[str]:
    if _is_missing(value):
        return None
    s = str(value).strip()
    return s or None


def clean_year(value: object) -> Optional[int]:
    if _is_missing(value) or isinstance(value, bool):
        return None
    try:
        out = float(str(value).strip())
    except ValueError:
        return None
    if math.isinf(out) or not out.is_integer():
        return None
    return int(out)


def clean_score(value: object) -> float:
    if _is_missing(value) or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        out = float(str(value).strip())
    except ValueError:
        return 0
    if math.isnan(out) or math.isinf(out):
        return 0
    return int(out) if out.is_integer() else out


def clean_record(raw: Mapping[str, Any]) -> Record:
    """Build a Record from a raw dataset row, defaulting anything missing or malformed."""
    values: Dict[str, Any] = {}
    for name in TEXT_FIELDS + DETAIL_FIELDS:
        values[name] = clean_text(raw.get(name))
    for name in YEAR_FIELDS:
        values[name] = clean_year(raw.get(name))
    for name in SCORE_FIELDS:
        values[name] = clean_score(raw.get(name))
    return Record(**values)


def clean_records(rows: Iterable[object]) -> List[Record]:
    out: List[Record] = []
    skipped = 0
    for row in rows:
        if isinstance(row, Record):
            out.append(row)
        elif isinstance(row, Mapping):
            out.append(clean_record(row))
        else:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d dataset rows that are not objects", skipped)
    return out


def records_to_frame(records: Sequence[Record]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(r) for r in records], columns=RECORD_FIELDS)
    for col in YEAR_FIELDS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("Int64")
    for col in SCORE_FIELDS:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    for col in TEXT_FIELDS + DETAIL_FIELDS:
        df[col] = df[col].astype(object).where(df[col].notna(), None)
    return df


def build_frame(rows: Iterable[object]) -> pd.DataFrame:
    return records_to_frame(clean_records(rows))


def frame_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Frame rows as plain dicts with missing values as None."""
    if df.empty:
        return []
    out = df.astype(object).where(df.notna(), None)
    return out.to_dict(orient="records")


def year_text(value: object) -> Optional[str]:
    """Text form of a year value: integral numbers drop their decimal part."""
    if _is_missing(value):
        return None
    if isinstance(value, str):
        return value
    try:
        if float(value).is_integer():  # type: ignore[arg-type]
            return str(int(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        pass
    return str(value)


def year_sort_key(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.inf


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def round_2(value: float) -> float:
    """Round the float scaled by 100 half away from zero, then scale back."""
    if math.isnan(value) or math.isinf(value):
        return 0.0
    scaled = math.floor(abs(value) * 100 + 0.5)
    return math.copysign(scaled, value) / 100


def safe_average(total: object, count: object) -> float:
    """Mean rounded to 2 places; 0 when there is nothing to average."""
    if not count:
        return 0.0
    return round_2(float(total) / float(count))  # type: ignore[arg-type]


def format_percent_1(count: int, total: int) -> str:
    if not total:
        return "0.0"
    return f"{round_half_up(count / total * 100, 1):.1f}"


def average_column(metric: str) -> str:
    return "avg" + metric[:1].upper() + metric[1:]


def group_metrics(df: pd.DataFrame, key: str, metrics: Sequence[str] = ()) -> pd.DataFrame:
    """Group rows by `key` (first-appearance order) with counts, totals and averages.

    Rows with a null key are dropped. For each metric the result carries
    `total_<metric>` and the rounded `avg<Metric>` column.
    """
    columns = [key, "count"] + [f"total_{m}" for m in metrics] + [average_column(m) for m in metrics]
    if df.empty or key not in df.columns:
        return pd.DataFrame(columns=columns)

    keyed = df[df[key].notna()]
    if keyed.empty:
        return pd.DataFrame(columns=columns)
    keyed = keyed.assign(**{m: pd.to_numeric(keyed[m], errors="coerce").fillna(0) for m in metrics})

    grouped = keyed.groupby(key, sort=False)
    out = grouped.size().rename("count").to_frame()
    for m in metrics:
        out[f"total_{m}"] = grouped[m].sum()
    out = out.reset_index()
    for m in metrics:
        out[average_column(m)] = [safe_average(t, c) for t, c in zip(out[f"total_{m}"], out["count"])]
    out["count"] = out["count"].astype(int)
    return out[columns]


def view_rows(df: pd.DataFrame, columns: Sequence[str]) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    return df[list(columns)].to_dict(orient="records")
