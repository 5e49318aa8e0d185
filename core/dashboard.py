from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pandas as pd

from core.filters import FilterCriteria, filter_records, normalize_filters
from core.metrics_overview import compute_dashboard, empty_dashboard
from core.source import RecordSource, SourceUnavailable, empty_frame

logger = logging.getLogger(__name__)


class Dashboard:
    """One dashboard session over a dataset fetched once from a record source.

    Filtering happens locally on the fetched frame. Every criteria change
    bumps `generation`; a payload computed for an older generation is
    dropped by `publish`, so the latest criteria always win.
    """

    def __init__(self, source: RecordSource, *, include_charts: bool = False) -> None:
        self.source = source
        self.include_charts = include_charts
        self.records: pd.DataFrame = empty_frame()
        self.criteria = FilterCriteria()
        self.error: Optional[str] = None
        self.generation = 0
        self._payload: Dict[str, Any] = empty_dashboard(self.criteria)

    def load(self) -> Dict[str, Any]:
        try:
            self.records = self.source.get_all()
            self.error = None
        except SourceUnavailable as exc:
            logger.error("Record source unavailable: %s", exc)
            self.records = empty_frame()
            self.error = str(exc) or "Record source unavailable"
        return self.refresh()

    def filtered(self, criteria: Optional[FilterCriteria] = None) -> pd.DataFrame:
        return filter_records(self.records, criteria or self.criteria)

    def compute(self, criteria: FilterCriteria) -> Dict[str, Any]:
        return compute_dashboard(self.filtered(criteria), criteria, include_charts=self.include_charts)

    def begin(self, criteria: FilterCriteria | Dict[str, object]) -> int:
        """Make `criteria` the active set and return its generation token."""
        if not isinstance(criteria, FilterCriteria):
            criteria = normalize_filters(criteria)
        self.criteria = criteria
        self.generation += 1
        return self.generation

    def publish(self, generation: int, payload: Dict[str, Any]) -> bool:
        if generation != self.generation:
            logger.debug("Discarding stale dashboard payload (generation %d, current %d)", generation, self.generation)
            return False
        self._payload = payload
        return True

    def refresh(self) -> Dict[str, Any]:
        token = self.begin(self.criteria)
        self.publish(token, self.compute(self.criteria))
        return self.view()

    def apply_filters(self, criteria: FilterCriteria | Dict[str, object]) -> Dict[str, Any]:
        token = self.begin(criteria)
        self.publish(token, self.compute(self.criteria))
        return self.view()

    def clear_filters(self) -> Dict[str, Any]:
        return self.apply_filters(FilterCriteria())

    def view(self) -> Dict[str, Any]:
        if self.error is not None:
            payload = empty_dashboard(self.criteria)
            payload["error"] = self.error
            return payload
        return dict(self._payload)
