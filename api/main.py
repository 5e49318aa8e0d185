from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardResponse, ErrorResponse, FilterCriteriaModel
from core.config import APP_NAME, APP_VERSION, CORS_ORIGINS, PORT
from core.data import frame_records
from core.filters import FilterCriteria, normalize_filters
from core.metrics_overview import compute_dashboard
from core.source import FileRecordSource, RecordSource, SourceUnavailable, validate_field


app = FastAPI(title=APP_NAME, version=APP_VERSION)
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def get_source() -> RecordSource:
    return FileRecordSource()


def _criteria_from_model(model: FilterCriteriaModel) -> FilterCriteria:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _source_error(exc: SourceUnavailable) -> JSONResponse:
    logger.error("Record source error: %s", exc)
    return JSONResponse(status_code=400, content={"error": str(exc)})


def _server_error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/")
def root():
    return {"message": "Dashboard API is running!"}


@app.get("/api/data", responses=ERROR_RESPONSES)
def get_all_data(source: RecordSource = Depends(get_source)):
    try:
        return _json(frame_records(source.get_all()))
    except SourceUnavailable as exc:
        return _source_error(exc)
    except Exception as exc:
        logger.exception("get_all_data failed")
        return _server_error(exc)


@app.get("/api/data/filtered", responses=ERROR_RESPONSES)
def get_filtered_data(
    end_year: str = Query(default=""),
    topic: str = Query(default=""),
    sector: str = Query(default=""),
    region: str = Query(default=""),
    pestle: str = Query(default=""),
    source_name: str = Query(default="", alias="source"),
    country: str = Query(default=""),
    start_year: str = Query(default=""),
    source: RecordSource = Depends(get_source),
):
    criteria = normalize_filters(
        {
            "end_year": end_year,
            "topic": topic,
            "sector": sector,
            "region": region,
            "pestle": pestle,
            "source": source_name,
            "country": country,
            "start_year": start_year,
        }
    )
    try:
        return _json(frame_records(source.get_filtered(criteria)))
    except SourceUnavailable as exc:
        return _source_error(exc)
    except Exception as exc:
        logger.exception("get_filtered_data failed")
        return _server_error(exc)


@app.get("/api/data/unique/{column}", responses=ERROR_RESPONSES)
def get_unique_values(column: str, source: RecordSource = Depends(get_source)):
    try:
        validate_field(column)
    except ValueError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    try:
        return _json(source.get_unique_values(column))
    except SourceUnavailable as exc:
        return _source_error(exc)
    except Exception as exc:
        logger.exception("get_unique_values failed")
        return _server_error(exc)


@app.post("/api/dashboard", responses={200: {"model": DashboardResponse}, **ERROR_RESPONSES})
def dashboard(
    filters: FilterCriteriaModel,
    charts: bool = Query(default=False),
    source: RecordSource = Depends(get_source),
):
    try:
        criteria = _criteria_from_model(filters)
        return _json(compute_dashboard(source.get_filtered(criteria), criteria, include_charts=charts))
    except SourceUnavailable as exc:
        return _source_error(exc)
    except Exception as exc:
        logger.exception("dashboard failed")
        return _server_error(exc)


@app.post("/api/export", responses=ERROR_RESPONSES)
def export_filtered(filters: FilterCriteriaModel, source: RecordSource = Depends(get_source)):
    try:
        export_df = source.get_filtered(_criteria_from_model(filters))
    except SourceUnavailable as exc:
        return _source_error(exc)
    except Exception as exc:
        logger.exception("export_filtered failed")
        return _server_error(exc)
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=insights.csv"})


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
