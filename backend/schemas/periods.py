"""
Reporting Period Schemas

Pydantic models for the inputs the insights engine consumes: reporting
periods with their metric readings, tolerance bands, and request options.
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from schemas.insights import InsightType


BandOperator = Literal[">=", "<=", "==", "range"]


class MetricReading(BaseModel):
    """A metric value recorded within a reporting period."""

    metric_number: int = Field(..., ge=1, description="Metric number within the period")
    value: Optional[float] = Field(default=None, description="Recorded value")
    is_na: bool = Field(default=False, description="Metric not applicable this period")
    hidden: bool = Field(default=False, description="Hidden from the report")
    insight: Optional[str] = Field(default=None, description="Free-text commentary")

    @model_validator(mode="after")
    def check_na_has_no_value(self) -> "MetricReading":
        if self.is_na and self.value is not None:
            raise ValueError("value must be null when the metric is marked not applicable")
        return self

    @property
    def is_usable(self) -> bool:
        return not self.is_na and self.value is not None


class ReportingPeriod(BaseModel):
    """A labelled calendar interval holding metric readings."""

    id: str
    label: str = ""
    start_date: date
    end_date: date
    is_finalised: bool = False
    metrics: list[MetricReading] = Field(default_factory=list)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def truncate_datetime(cls, v):
        if isinstance(v, datetime):
            return v.date()
        return v

    @property
    def month(self) -> str:
        """Start month as YYYY-MM."""
        return f"{self.start_date.year}-{self.start_date.month:02d}"

    def reading(self, metric_number: int) -> Optional[MetricReading]:
        """First reading recorded for a metric, if any."""
        for metric in self.metrics:
            if metric.metric_number == metric_number:
                return metric
        return None


class ToleranceBand(BaseModel):
    """RAG thresholds and polarity for one metric."""

    metric_number: int = Field(..., ge=1)

    green_min: Optional[float] = None
    green_max: Optional[float] = None
    green_operator: BandOperator = "range"

    amber_min: Optional[float] = None
    amber_max: Optional[float] = None
    amber_operator: BandOperator = "range"

    red_min: Optional[float] = None
    red_max: Optional[float] = None
    red_operator: BandOperator = "range"

    is_lower_better: bool = Field(default=False, description="Decreasing values are improvements")
    flat_tolerance: float = Field(default=1.0, ge=0, description="Change below which movement is flat")


class InsightsOptions(BaseModel):
    """Request options for an insights run."""

    time_range: Optional[int] = Field(
        default=None,
        ge=0,
        description="Trailing window in months (0 or None = all time)"
    )
    metric_numbers: Optional[list[int]] = Field(
        default=None,
        description="Metrics to analyse (None = configured catalog)"
    )
    types: Optional[list[InsightType]] = Field(
        default=None,
        description="Insight types to generate (None = all)"
    )
