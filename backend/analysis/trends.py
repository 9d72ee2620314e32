"""
Trend Insights

Month-over-month movement, deviation from rolling averages, and the
cross-metric leaderboard of biggest movers.

Direction words ("Improvement", "Decline") follow the raw sign of the
change; this generator does not consult metric polarity.
"""

from dataclasses import dataclass
from typing import Optional

from analysis.base import InsightGenerator
from analysis.statistical import mean, percent_change
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


@dataclass
class MetricMove:
    """Latest month-over-month change of one metric."""

    metric_number: int
    name: str
    change_pct: float


class TrendInsightGenerator(InsightGenerator):
    """Trend detection over monthly metric series."""

    insight_type = InsightType.TREND

    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        metric_numbers: list[int],
    ) -> list[Insight]:
        insights: list[Insight] = []
        moves: list[MetricMove] = []

        for metric_number in metric_numbers:
            series = prepare_metric_time_series(periods, metric_number)
            if len(series) < 2:
                continue

            name = get_metric_name(metric_number)

            mom = self._month_over_month(metric_number, name, series)
            if mom is not None:
                insights.append(mom)

            if len(series) >= 3:
                insights.extend(self._rolling_averages(metric_number, name, series))

            change = percent_change(series[-1].value, series[-2].value)
            if change is not None:
                moves.append(MetricMove(metric_number, name, change))

        if len(periods) >= 2 and len(metric_numbers) > 1 and moves:
            insights.extend(self._leaderboard(moves))

        return insights

    def _month_over_month(
        self,
        metric_number: int,
        name: str,
        series: list[MetricPoint],
    ) -> Optional[Insight]:
        recent, previous = series[-1], series[-2]
        change = percent_change(recent.value, previous.value)
        if change is None or abs(change) <= self.settings.mom_change_threshold:
            return None

        return Insight(
            id=self.new_id(metric_number, "mom"),
            type=self.insight_type,
            title=f"{name}: {'Improvement' if change > 0 else 'Decline'} This Month",
            summary=(
                f"{'Increased' if change > 0 else 'Decreased'} by {abs(change):.1f}% "
                f"compared to last month ({previous.value:.1f} → {recent.value:.1f})"
            ),
            severity=(
                InsightSeverity.WARNING
                if abs(change) > self.settings.mom_warning_threshold
                else InsightSeverity.INFO
            ),
            metric_keys=[metric_number],
            period=InsightPeriod(start=previous.month, end=recent.month),
            evidence=InsightEvidence(
                values=to_evidence([previous, recent]),
                change_pct=change,
            ),
        )

    def _rolling_averages(
        self,
        metric_number: int,
        name: str,
        series: list[MetricPoint],
    ) -> list[Insight]:
        insights = []
        current = series[-1].value

        windows = [(3, self.settings.rolling_3_threshold)]
        if len(series) >= 6:
            windows.append((6, self.settings.rolling_6_threshold))

        for window, threshold in windows:
            points = series[-window:]
            average = mean([p.value for p in points])
            deviation = percent_change(current, average)
            if deviation is None or abs(deviation) <= threshold:
                continue

            if window == 3 and abs(deviation) > self.settings.rolling_3_warning_threshold:
                severity = InsightSeverity.WARNING
            else:
                severity = InsightSeverity.INFO

            side = "above" if deviation > 0 else "below"
            insights.append(Insight(
                id=self.new_id(metric_number, f"avg{window}"),
                type=self.insight_type,
                title=f"{name}: {side.capitalize()} {window}-Month Average",
                summary=(
                    f"Current value ({current:.1f}) is {abs(deviation):.1f}% {side} "
                    f"the {window}-month average ({average:.1f})"
                ),
                severity=severity,
                metric_keys=[metric_number],
                evidence=InsightEvidence(
                    values=to_evidence(points),
                    change_pct=deviation,
                ),
            ))

        return insights

    def _leaderboard(self, moves: list[MetricMove]) -> list[Insight]:
        insights = []
        size = self.settings.leaderboard_size
        ranked = sorted(moves, key=lambda m: m.change_pct, reverse=True)

        improving = [m for m in ranked if m.change_pct > 0][:size]
        if improving:
            listing = ", ".join(f"{m.name} (+{m.change_pct:.1f}%)" for m in improving)
            insights.append(Insight(
                id=self.new_id(0, "top-improving"),
                type=self.insight_type,
                title="Top Improving Metrics This Month",
                summary=f"The following metrics showed the largest improvements: {listing}",
                severity=InsightSeverity.INFO,
                metric_keys=[m.metric_number for m in improving],
            ))

        declining = sorted(
            (m for m in ranked if m.change_pct < 0),
            key=lambda m: m.change_pct,
        )[:size]
        if declining:
            listing = ", ".join(f"{m.name} ({m.change_pct:.1f}%)" for m in declining)
            worst = abs(declining[0].change_pct)
            insights.append(Insight(
                id=self.new_id(0, "top-degrading"),
                type=self.insight_type,
                title="Metrics Requiring Attention",
                summary=f"The following metrics declined this month: {listing}",
                severity=(
                    InsightSeverity.WARNING
                    if worst > self.settings.leaderboard_warning_threshold
                    else InsightSeverity.INFO
                ),
                metric_keys=[m.metric_number for m in declining],
            ))

        return insights


# Global instance
trend_generator = TrendInsightGenerator()
