from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class FilterCriteriaModel(BaseModel):
    end_year: Union[str, int, None] = ""
    topic: Optional[str] = ""
    sector: Optional[str] = ""
    region: Optional[str] = ""
    pestle: Optional[str] = ""
    source: Optional[str] = ""
    country: Optional[str] = ""
    start_year: Union[str, int, None] = ""


class SummaryModel(BaseModel):
    total: int = 0
    avgIntensity: float = 0
    avgRelevance: float = 0
    avgLikelihood: float = 0


class DashboardResponse(BaseModel):
    filters: Dict[str, str]
    summary: SummaryModel
    progress: Dict[str, float] = Field(default_factory=dict)
    sector_intensity: List[Dict[str, Any]] = Field(default_factory=list)
    region_distribution: List[Dict[str, Any]] = Field(default_factory=list)
    sector_rollup: List[Dict[str, Any]] = Field(default_factory=list)
    topic_rollup: List[Dict[str, Any]] = Field(default_factory=list)
    year_trend: List[Dict[str, Any]] = Field(default_factory=list)
    preview: List[Dict[str, Any]] = Field(default_factory=list)
    charts: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str
    type: Optional[str] = None
