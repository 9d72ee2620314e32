"""
Metric Time Series

Turns reporting periods into the chronological (month, value) series
every insight generator works from.
"""

from dataclasses import dataclass

from schemas.insights import EvidencePoint
from schemas.periods import ReportingPeriod


@dataclass(frozen=True)
class MetricPoint:
    """One usable observation of a metric."""

    month: str  # YYYY-MM
    value: float
    period_id: str

    def to_evidence(self) -> EvidencePoint:
        return EvidencePoint(month=self.month, value=self.value)


def sort_periods(periods: list[ReportingPeriod], newest_first: bool = False) -> list[ReportingPeriod]:
    """Stable sort by start date."""
    return sorted(periods, key=lambda p: p.start_date, reverse=newest_first)


def prepare_metric_time_series(
    periods: list[ReportingPeriod],
    metric_number: int,
) -> list[MetricPoint]:
    """
    Build the series of a metric, oldest first.

    A period contributes only when it holds a reading for the metric that
    is not marked NA and has a value. Skipped months stay gaps: nothing is
    interpolated or zero-filled.
    """
    series: list[MetricPoint] = []

    for period in sort_periods(periods):
        reading = period.reading(metric_number)
        if reading is None or not reading.is_usable:
            continue
        series.append(MetricPoint(
            month=period.month,
            value=float(reading.value),
            period_id=period.id,
        ))

    return series


def to_evidence(points: list[MetricPoint]) -> list[EvidencePoint]:
    return [p.to_evidence() for p in points]
