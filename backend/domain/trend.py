"""
Trend Direction

Period-to-period direction of a metric for dashboard arrows, using the
tolerance's flat threshold and polarity.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from schemas.periods import ReportingPeriod, ToleranceBand


DEFAULT_HISTORY_SIZE = 6
DEFAULT_FLAT_TOLERANCE = 1.0


class TrendDirection(str, Enum):
    UP = "up"  # improved
    DOWN = "down"  # worsened
    FLAT = "flat"


@dataclass
class Trend:
    direction: TrendDirection
    values: list[float] = field(default_factory=list)


def calculate_trend(
    metric_number: int,
    current_period: ReportingPeriod,
    historical_periods: list[ReportingPeriod],
    band: Optional[ToleranceBand],
    history_size: int = DEFAULT_HISTORY_SIZE,
) -> Trend:
    """
    Compare the current value with the latest usable historical value.

    History is the most recent finalised periods other than the current
    one. UP/DOWN describe improvement under the metric's polarity, not
    the raw sign of the change.
    """
    history = sorted(
        (p for p in historical_periods if p.is_finalised and p.id != current_period.id),
        key=lambda p: p.start_date,
        reverse=True,
    )[:history_size]

    values: list[float] = []
    for period in reversed(history):
        reading = period.reading(metric_number)
        if reading is not None and reading.is_usable:
            values.append(reading.value)

    current = current_period.reading(metric_number)
    if current is not None and current.is_usable:
        values.append(current.value)

    if len(values) < 2:
        return Trend(direction=TrendDirection.FLAT, values=values)

    recent = values[-1]
    previous = values[-2]
    flat_tolerance = band.flat_tolerance if band is not None else DEFAULT_FLAT_TOLERANCE

    if abs(recent - previous) < flat_tolerance:
        return Trend(direction=TrendDirection.FLAT, values=values)

    is_lower_better = band.is_lower_better if band is not None else False
    increasing = recent > previous
    improved = not increasing if is_lower_better else increasing

    return Trend(
        direction=TrendDirection.UP if improved else TrendDirection.DOWN,
        values=values,
    )
