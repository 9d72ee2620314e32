"""
Insight Schemas

Pydantic models for the structured insight records produced by the engine.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class InsightType(str, Enum):
    """Kinds of insight, in generator dispatch order."""

    TREND = "trend"
    ANOMALY = "anomaly"
    MILESTONE = "milestone"
    COMPARISON = "comparison"
    FORECAST = "forecast"
    CORRELATION = "correlation"


class InsightSeverity(str, Enum):
    """Insight importance level."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class EvidencePoint(BaseModel):
    """A (month, value) observation shown as evidence."""

    month: str = Field(..., description="YYYY-MM")
    value: float


class InsightEvidence(BaseModel):
    """Supporting data for an insight."""

    values: Optional[list[EvidencePoint]] = None
    change_pct: Optional[float] = None
    z_score: Optional[float] = None
    notes: Optional[list[str]] = None


class InsightPeriod(BaseModel):
    """Month range an insight refers to."""

    start: str
    end: str


class Insight(BaseModel):
    """A single insight."""

    id: str = Field(..., description="Unique insight ID")
    type: InsightType
    title: str = Field(..., description="Brief insight title")
    summary: str = Field(..., description="Human-readable explanation")
    severity: Optional[InsightSeverity] = None

    # Context
    metric_keys: Optional[list[int]] = Field(default=None, description="Referenced metric numbers")
    period: Optional[InsightPeriod] = None
    evidence: Optional[InsightEvidence] = None
    recommendations: Optional[list[str]] = None

    # Set when an enrichment step produced or rewrote this insight
    ai_enhanced: bool = False
