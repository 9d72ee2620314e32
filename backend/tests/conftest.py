"""
Shared fixtures: reporting period and tolerance factories.
"""

import os
from datetime import date
from typing import Optional

# Keep test runs from writing log files
os.environ.setdefault("LOG_FILE_PATH", "")

import pytest

from config import InsightsSettings
from schemas.periods import MetricReading, ReportingPeriod, ToleranceBand


def _month_add(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _period(
    year: int,
    month: int,
    values: dict[int, Optional[float]],
    is_finalised: bool = True,
    na: tuple[int, ...] = (),
) -> ReportingPeriod:
    metrics = [
        MetricReading(metric_number=n, value=v)
        for n, v in values.items()
    ]
    metrics.extend(MetricReading(metric_number=n, is_na=True) for n in na)

    end_year, end_month = _month_add(year, month, 1)
    return ReportingPeriod(
        id=f"p-{year}-{month:02d}",
        label=date(year, month, 1).strftime("%B %Y"),
        start_date=date(year, month, 1),
        end_date=date(end_year, end_month, 1),
        is_finalised=is_finalised,
        metrics=metrics,
    )


@pytest.fixture
def make_period():
    """Build one period: make_period(2024, 3, {1: 80.0})."""
    return _period


@pytest.fixture
def make_series():
    """
    Build consecutive monthly periods from per-metric value lists.

    make_series({1: [80, 82, 85]}) gives three finalised periods from
    January 2024; shorter lists leave later months without a reading.
    """
    def factory(
        values_by_metric: dict[int, list[Optional[float]]],
        start: tuple[int, int] = (2024, 1),
        is_finalised: bool = True,
    ) -> list[ReportingPeriod]:
        length = max(len(v) for v in values_by_metric.values())
        periods = []
        for i in range(length):
            year, month = _month_add(start[0], start[1], i)
            values = {
                n: series[i]
                for n, series in values_by_metric.items()
                if i < len(series)
            }
            periods.append(_period(year, month, values, is_finalised=is_finalised))
        return periods

    return factory


@pytest.fixture
def make_tolerance():
    def factory(metric_number: int, is_lower_better: bool = False, **bands) -> ToleranceBand:
        return ToleranceBand(metric_number=metric_number, is_lower_better=is_lower_better, **bands)

    return factory


@pytest.fixture
def insights_settings():
    return InsightsSettings()
