from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.config import API_BASE_URL, DATA_PATH, HTTP_TIMEOUT_SECONDS
from core.data import RECORD_FIELDS, build_frame, records_to_frame
from core.filters import FilterCriteria, filter_records

logger = logging.getLogger(__name__)


class SourceUnavailable(Exception):
    """Raised when the record source cannot supply data."""


def validate_field(field: str) -> str:
    if field not in RECORD_FIELDS:
        raise ValueError(f"Unknown column: {field}")
    return field


def unique_values(df: pd.DataFrame, field: str) -> List[Any]:
    """Distinct non-null, non-empty values of one column in first-appearance order."""
    validate_field(field)
    if df.empty:
        return []
    out: List[Any] = []
    seen = set()
    for value in df[field].tolist():
        if value is None or pd.isna(value) or value == "":
            continue
        value = int(value) if field in ("end_year", "start_year") else value
        if value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


class RecordSource:
    """Supplies the insight dataset as a frame of cleaned records."""

    def get_all(self) -> pd.DataFrame:
        raise NotImplementedError

    def get_filtered(self, criteria: FilterCriteria) -> pd.DataFrame:
        raise NotImplementedError

    def get_unique_values(self, field: str) -> List[Any]:
        raise NotImplementedError


# ---------------- File-backed source (JSON export of the table) ----------------
def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


@lru_cache(maxsize=4)
def _load_json_cached(file_sig: Tuple[str, float]) -> pd.DataFrame:
    path = Path(file_sig[0])
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if isinstance(raw, dict) and isinstance(raw.get("data"), list):
        raw = raw["data"]
    if not isinstance(raw, list):
        raise SourceUnavailable(f"Expected a JSON array of records in {path.name}, got {type(raw).__name__}")
    df = build_frame(raw)
    logger.info("Loaded %d records from %s", len(df), path)
    return df


class FileRecordSource(RecordSource):
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else DATA_PATH

    def get_all(self) -> pd.DataFrame:
        if not self.path.exists():
            raise SourceUnavailable(f"Dataset file not found: {self.path}")
        try:
            return _load_json_cached(file_signature(self.path)).copy()
        except SourceUnavailable:
            raise
        except (OSError, ValueError) as exc:
            raise SourceUnavailable(f"Could not read dataset {self.path.name}: {exc}") from exc

    def get_filtered(self, criteria: FilterCriteria) -> pd.DataFrame:
        return filter_records(self.get_all(), criteria)

    def get_unique_values(self, field: str) -> List[Any]:
        validate_field(field)
        return unique_values(self.get_all(), field)


# ---------------- HTTP source (the dashboard REST API) ----------------
def _build_retry_session() -> requests.Session:
    """Session with conservative retries on transient server errors."""
    session = requests.Session()

    retry = Retry(
        total=3,
        connect=3,
        read=3,
        status=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


class HttpRecordSource(RecordSource):
    def __init__(
        self,
        base_url: str = API_BASE_URL,
        *,
        timeout_seconds: int = HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or _build_retry_session()

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise SourceUnavailable(f"HTTP error while calling {path}: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            preview = (resp.text or "")[:200]
            raise SourceUnavailable(f"Non-JSON response from {path} (status={resp.status_code}). Preview: {preview}") from exc

        if resp.status_code >= 400:
            msg = data.get("error") if isinstance(data, dict) else None
            raise SourceUnavailable(msg or f"Request to {path} failed with status {resp.status_code}")
        return data

    def _frame(self, path: str, params: Optional[Dict[str, str]] = None) -> pd.DataFrame:
        data = self._get(path, params)
        if not isinstance(data, list):
            raise SourceUnavailable(f"Unexpected response type from {path}: {type(data).__name__}")
        return build_frame(data)

    def get_all(self) -> pd.DataFrame:
        return self._frame("/data")

    def get_filtered(self, criteria: FilterCriteria) -> pd.DataFrame:
        params = {k: v for k, v in criteria.active()}
        return self._frame("/data/filtered", params)

    def get_unique_values(self, field: str) -> List[Any]:
        validate_field(field)
        data = self._get(f"/data/unique/{field}")
        if not isinstance(data, list):
            raise SourceUnavailable(f"Unexpected response type for unique values of {field}: {type(data).__name__}")
        return [v for v in data if v is not None and v != ""]

    def check_connection(self) -> Tuple[bool, str]:
        root = self.base_url[: -len("/api")] if self.base_url.endswith("/api") else self.base_url
        try:
            resp = self.session.get(f"{root}/", timeout=self.timeout_seconds)
            resp.raise_for_status()
            message = resp.json().get("message", "")
        except (requests.RequestException, ValueError, AttributeError) as exc:
            logger.warning("Connection check against %s failed: %s", root, exc)
            return False, f"Cannot connect to backend server at {root}. Make sure it's running."
        return True, message


def empty_frame() -> pd.DataFrame:
    return records_to_frame([])
