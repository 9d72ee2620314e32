"""
Comparison Insights

Percentage change between the two most recent periods, and against the
same month one year earlier when that period exists.
"""

from datetime import date
from typing import Optional

from analysis.base import InsightGenerator
from analysis.statistical import percent_change
from analysis.time_series import sort_periods
from domain.metrics import get_metric_name
from schemas.insights import (
    Insight,
    InsightEvidence,
    InsightPeriod,
    InsightSeverity,
    InsightType,
)
from schemas.periods import ReportingPeriod, ToleranceBand


def _year_ago_period(
    periods: list[ReportingPeriod],
    current: ReportingPeriod,
) -> Optional[ReportingPeriod]:
    """Period starting in the same calendar month of the previous year."""
    target_year = current.start_date.year - 1
    target_month = current.start_date.month
    for period in periods:
        if period.start_date.year == target_year and period.start_date.month == target_month:
            return period
    return None


def _usable_value(period: ReportingPeriod, metric_number: int) -> Optional[float]:
    reading = period.reading(metric_number)
    if reading is None or not reading.is_usable:
        return None
    return reading.value


def _month(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


class ComparisonInsightGenerator(InsightGenerator):
    """Month-over-month and year-over-year period comparisons."""

    insight_type = InsightType.COMPARISON

    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        metric_numbers: list[int],
    ) -> list[Insight]:
        insights: list[Insight] = []

        ordered = sort_periods(periods, newest_first=True)
        if len(ordered) < 2:
            return insights

        current_period, last_period = ordered[0], ordered[1]
        year_ago_period = _year_ago_period(ordered, current_period)

        for metric_number in metric_numbers:
            current = _usable_value(current_period, metric_number)
            last = _usable_value(last_period, metric_number)
            if current is None or last is None:
                continue

            name = get_metric_name(metric_number)

            change = percent_change(current, last)
            if change is not None and abs(change) > self.settings.comparison_mom_threshold:
                insights.append(Insight(
                    id=self.new_id(metric_number, "mom"),
                    type=self.insight_type,
                    title=f"{name}: Month-over-Month Change",
                    summary=(
                        f"{'Increased' if change > 0 else 'Decreased'} by {abs(change):.1f}% "
                        f"compared to last month ({last:.1f} → {current:.1f})"
                    ),
                    severity=(
                        InsightSeverity.WARNING
                        if abs(change) > self.settings.comparison_mom_warning_threshold
                        else InsightSeverity.INFO
                    ),
                    metric_keys=[metric_number],
                    period=InsightPeriod(
                        start=_month(last_period.start_date),
                        end=_month(current_period.start_date),
                    ),
                    evidence=InsightEvidence(change_pct=change),
                ))

            if year_ago_period is None:
                continue
            year_ago = _usable_value(year_ago_period, metric_number)
            if year_ago is None:
                continue

            yoy = percent_change(current, year_ago)
            if yoy is None or abs(yoy) <= self.settings.comparison_yoy_threshold:
                continue

            insights.append(Insight(
                id=self.new_id(metric_number, "yoy"),
                type=self.insight_type,
                title=f"{name}: Year-over-Year Change",
                summary=(
                    f"{'Increased' if yoy > 0 else 'Decreased'} by {abs(yoy):.1f}% compared to "
                    f"the same month last year ({year_ago:.1f} → {current:.1f})"
                ),
                severity=(
                    InsightSeverity.WARNING
                    if abs(yoy) > self.settings.comparison_yoy_warning_threshold
                    else InsightSeverity.INFO
                ),
                metric_keys=[metric_number],
                period=InsightPeriod(
                    start=_month(year_ago_period.start_date),
                    end=_month(current_period.start_date),
                ),
                evidence=InsightEvidence(change_pct=yoy),
            ))

        return insights


# Global instance
comparison_generator = ComparisonInsightGenerator()
