from __future__ import annotations

import os
from pathlib import Path
from typing import List

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"

# JSON export of the insights table (array of flat records)
DATA_PATH = Path(os.getenv("DASHBOARD_DATA_PATH", str(DATA_DIR / "jsondata.json"))).expanduser()

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "Insights Dashboard API"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# HTTP record source (the REST API consumed by the dashboard client)
# ---------------------------------------------------------------------------

API_BASE_URL = os.getenv("DASHBOARD_API_URL", "http://localhost:5000/api").strip().rstrip("/")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


HTTP_TIMEOUT_SECONDS = _int_env("DASHBOARD_HTTP_TIMEOUT", 30)

# ---------------------------------------------------------------------------
# API server
# ---------------------------------------------------------------------------

PORT = _int_env("PORT", 5000)


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


CORS_ORIGINS = _split_origins(
    os.getenv("DASHBOARD_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
)

# ---------------------------------------------------------------------------
# Dashboard defaults
# ---------------------------------------------------------------------------

TOP_TOPICS = max(1, _int_env("DASHBOARD_TOP_TOPICS", 10))
PREVIEW_ROWS = 5
