"""
Milestone Insights

New 12-month highs and lows, sustained directional streaks, and
transitions into the green or red tolerance zone.
"""

from typing import Optional

import numpy as np
from numba import jit

from analysis.base import InsightGenerator, find_tolerance
from analysis.time_series import MetricPoint, prepare_metric_time_series, to_evidence
from domain.metrics import get_metric_name
from schemas.insights import (
    Insight,
    InsightEvidence,
    InsightPeriod,
    InsightSeverity,
    InsightType,
)
from schemas.periods import ReportingPeriod, ToleranceBand


STREAK_UP = 1
STREAK_DOWN = -1
STREAK_NONE = 0


@jit(nopython=True, cache=True)
def _longest_streak_numba(values: np.ndarray) -> tuple[int, int]:
    """
    Longest run of same-direction consecutive changes, scanning from the
    most recent point backwards.

    A run of k points spans k-1 strictly monotonic steps; an equal step
    resets the run to length 1 with no direction.
    Returns (length, direction) with direction 1 up, -1 down, 0 none.
    """
    current = 1
    longest = 1
    direction = 0
    longest_direction = 0

    for i in range(len(values) - 1, 0, -1):
        if values[i] > values[i - 1]:
            if direction == 1:
                current += 1
            else:
                current = 2
                direction = 1
        elif values[i] < values[i - 1]:
            if direction == -1:
                current += 1
            else:
                current = 2
                direction = -1
        else:
            current = 1
            direction = 0

        if current > longest:
            longest = current
            longest_direction = direction

    return longest, longest_direction


def longest_streak(values: list[float]) -> tuple[int, int]:
    if len(values) < 2:
        return len(values), STREAK_NONE
    length, direction = _longest_streak_numba(np.asarray(values, dtype=np.float64))
    return int(length), int(direction)


def _in_zone(value: float, minimum: float, maximum: float) -> bool:
    return minimum <= value <= maximum


class MilestoneInsightGenerator(InsightGenerator):
    """Records, streaks and tolerance-zone crossings."""

    insight_type = InsightType.MILESTONE

    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        metric_numbers: list[int],
    ) -> list[Insight]:
        insights: list[Insight] = []

        for metric_number in metric_numbers:
            series = prepare_metric_time_series(periods, metric_number)
            if len(series) < 2:
                continue

            name = get_metric_name(metric_number)
            tolerance = find_tolerance(tolerances, metric_number)
            lower_is_better = tolerance.is_lower_better if tolerance is not None else False

            if len(series) >= 3:
                insights.extend(self._records(metric_number, name, series, lower_is_better))
                streak = self._streak(metric_number, name, series, lower_is_better)
                if streak is not None:
                    insights.append(streak)

            if tolerance is not None:
                insights.extend(self._zone_crossings(metric_number, name, series, tolerance))

        return insights

    def _records(
        self,
        metric_number: int,
        name: str,
        series: list[MetricPoint],
        lower_is_better: bool,
    ) -> list[Insight]:
        """New high and new low within the trailing window."""
        insights = []
        recent = series[-1]
        window = series[-self.settings.milestone_window:]
        window_values = [p.value for p in window]

        records = [
            ("high", "highest", max(window_values), not lower_is_better),
            ("low", "lowest", min(window_values), lower_is_better),
        ]

        for kind, superlative, extreme, is_good in records:
            if recent.value != extreme:
                continue

            if is_good:
                tail = " This is a positive achievement!"
            else:
                preferred = "lower" if kind == "high" else "higher"
                tail = f" This requires attention as {preferred} values are preferred."

            insights.append(Insight(
                id=self.new_id(metric_number, f"new-{kind}"),
                type=self.insight_type,
                title=f"{name}: New {kind.capitalize()} in Last 12 Months",
                summary=(
                    f"Reached a new {kind} of {extreme:.1f} in {recent.month}, the {superlative} "
                    f"value in the last {len(window)} months.{tail}"
                ),
                severity=InsightSeverity.INFO if is_good else InsightSeverity.WARNING,
                metric_keys=[metric_number],
                period=InsightPeriod(start=window[0].month, end=recent.month),
                evidence=InsightEvidence(values=to_evidence(window)),
            ))

        return insights

    def _streak(
        self,
        metric_number: int,
        name: str,
        series: list[MetricPoint],
        lower_is_better: bool,
    ) -> Optional[Insight]:
        length, direction = longest_streak([p.value for p in series])
        if length < self.settings.streak_min_length:
            return None

        rising = direction == STREAK_UP
        is_good = (not rising) if lower_is_better else rising

        if is_good:
            trend_text = "an excellent trend. This is a positive achievement!"
        else:
            trend_text = "a concerning trend. This requires attention."

        return Insight(
            id=self.new_id(metric_number, "streak"),
            type=self.insight_type,
            title=f"{name}: {'Upward' if rising else 'Downward'} Streak",
            summary=(
                f"{'Rose' if rising else 'Fell'} for {length} consecutive months, "
                f"indicating {trend_text}"
            ),
            severity=InsightSeverity.INFO if is_good else InsightSeverity.WARNING,
            metric_keys=[metric_number],
            evidence=InsightEvidence(
                values=to_evidence(series[-length:]),
                notes=[f"{length} consecutive months"],
            ),
        )

    def _zone_crossings(
        self,
        metric_number: int,
        name: str,
        series: list[MetricPoint],
        tolerance: ToleranceBand,
    ) -> list[Insight]:
        """Entry into the green or red zone between the last two points."""
        insights = []
        recent, previous = series[-1], series[-2]
        period = InsightPeriod(start=previous.month, end=recent.month)
        evidence = InsightEvidence(values=to_evidence([previous, recent]))

        if (
            tolerance.green_operator == "range"
            and tolerance.green_min is not None
            and tolerance.green_max is not None
        ):
            low, high = tolerance.green_min, tolerance.green_max
            if not _in_zone(previous.value, low, high) and _in_zone(recent.value, low, high):
                insights.append(Insight(
                    id=self.new_id(metric_number, "green-threshold"),
                    type=self.insight_type,
                    title=f"{name}: Entered Green Zone",
                    summary=(
                        f"Crossed into the green tolerance zone ({low:g}-{high:g}) "
                        f"for the first time in recent history."
                    ),
                    severity=InsightSeverity.INFO,
                    metric_keys=[metric_number],
                    period=period,
                    evidence=evidence,
                ))

        if (
            tolerance.red_operator == "range"
            and tolerance.red_min is not None
            and tolerance.red_max is not None
        ):
            low, high = tolerance.red_min, tolerance.red_max
            if not _in_zone(previous.value, low, high) and _in_zone(recent.value, low, high):
                insights.append(Insight(
                    id=self.new_id(metric_number, "red-threshold"),
                    type=self.insight_type,
                    title=f"{name}: Entered Red Zone",
                    summary=(
                        f"Crossed into the red tolerance zone ({low:g}-{high:g}), "
                        f"requiring immediate attention."
                    ),
                    severity=InsightSeverity.CRITICAL,
                    metric_keys=[metric_number],
                    period=period,
                    evidence=evidence,
                    recommendations=[
                        "Investigate root cause of the decline",
                        "Implement corrective actions immediately",
                        "Increase monitoring frequency",
                    ],
                ))

        return insights


# Global instance
milestone_generator = MilestoneInsightGenerator()
