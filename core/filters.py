from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from core.data import Record, year_text


YEAR_FILTER_KEYS = ("end_year", "start_year")


@dataclass(frozen=True)
class FilterCriteria:
    end_year: str = ""
    topic: str = ""
    sector: str = ""
    region: str = ""
    pestle: str = ""
    source: str = ""
    country: str = ""
    start_year: str = ""

    def active(self) -> List[Tuple[str, str]]:
        return [(k, v) for k, v in asdict(self).items() if v]

    def is_empty(self) -> bool:
        return not self.active()

    def replace(self, **changes: object) -> "FilterCriteria":
        raw = asdict(self)
        raw.update(changes)
        return normalize_filters(raw)


FILTER_KEYS = tuple(f.name for f in fields(FilterCriteria))


def _as_criterion(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def normalize_filters(raw: Optional[Mapping[str, object]]) -> FilterCriteria:
    raw = raw or {}
    return FilterCriteria(**{key: _as_criterion(raw.get(key)) for key in FILTER_KEYS})


def _matches_year(value: object, wanted: str) -> bool:
    text = year_text(value)
    return text is not None and text == wanted


def _matches_text(value: object, wanted: str) -> bool:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return False
    return wanted.lower() in str(value).lower()


def _column_mask(series: pd.Series, key: str, wanted: str) -> pd.Series:
    if key in YEAR_FILTER_KEYS:
        return series.map(lambda v: _matches_year(v, wanted)).astype(bool)
    q = wanted.lower()
    return series.astype("string").str.lower().str.contains(q, regex=False, na=False).astype(bool)


def filter_records(df: pd.DataFrame, criteria: FilterCriteria) -> pd.DataFrame:
    """Rows satisfying every active criterion, in their original order.

    Year keys match the year's text form exactly; every other key is a
    case-insensitive substring match. A null field fails its criterion.
    """
    active = criteria.active()
    if not active or df.empty:
        return df
    mask = pd.Series(True, index=df.index)
    for key, wanted in active:
        if key not in df.columns:
            return df.iloc[0:0]
        mask &= _column_mask(df[key], key, wanted)
    return df[mask]


def record_matches(record: Record, criteria: FilterCriteria) -> bool:
    for key, wanted in criteria.active():
        value = getattr(record, key, None)
        ok = _matches_year(value, wanted) if key in YEAR_FILTER_KEYS else _matches_text(value, wanted)
        if not ok:
            return False
    return True


def filter_record_list(records: Sequence[Record], criteria: FilterCriteria) -> List[Record]:
    if criteria.is_empty():
        return list(records)
    return [r for r in records if record_matches(r, criteria)]
