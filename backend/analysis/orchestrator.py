"""
Insights Orchestrator

Filters the supplied periods, then runs the requested insight generators
in a fixed order and concatenates their output.
"""

from datetime import date
from typing import Optional

from analysis.anomalies import AnomalyInsightGenerator
from analysis.base import InsightGenerator
from analysis.comparisons import ComparisonInsightGenerator
from analysis.correlations import CorrelationInsightGenerator
from analysis.forecasts import ForecastInsightGenerator
from analysis.milestones import MilestoneInsightGenerator
from analysis.trends import TrendInsightGenerator
from config import InsightsSettings, get_settings
from core.logging_config import insights_logger as logger
from schemas.insights import Insight, InsightSeverity, InsightType
from schemas.periods import InsightsOptions, ReportingPeriod, ToleranceBand


def months_before(d: date, months: int) -> date:
    """First day of the month lying `months` calendar months before d."""
    index = d.year * 12 + (d.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def filter_periods_by_time_range(
    periods: list[ReportingPeriod],
    months: Optional[int],
) -> list[ReportingPeriod]:
    """
    Keep periods starting on or after the trailing-window cutoff.

    The window is anchored on the most recent start date among all
    supplied periods, finalised or not. 0 or None keeps everything.
    """
    if not months or months <= 0 or not periods:
        return list(periods)

    most_recent = max(p.start_date for p in periods)
    cutoff = months_before(most_recent, months)
    return [p for p in periods if p.start_date >= cutoff]


def insufficient_data_insight() -> Insight:
    return Insight(
        id="no-data",
        type=InsightType.TREND,
        title="Insufficient Data",
        summary=(
            "Not enough historical data available to generate insights. "
            "At least 1 finalised period is required."
        ),
        severity=InsightSeverity.INFO,
    )


class InsightsOrchestrator:
    """
    Runs the insight generators over finalised periods.

    Flow:
    1. Apply the trailing time window
    2. Keep finalised periods only
    3. Dispatch to each requested generator in declaration order
    """

    def __init__(self, settings: Optional[InsightsSettings] = None):
        self.settings = settings or get_settings().insights
        self.logger = logger
        self.generators: dict[InsightType, InsightGenerator] = {
            InsightType.TREND: TrendInsightGenerator(self.settings),
            InsightType.ANOMALY: AnomalyInsightGenerator(self.settings),
            InsightType.MILESTONE: MilestoneInsightGenerator(self.settings),
            InsightType.COMPARISON: ComparisonInsightGenerator(self.settings),
            InsightType.FORECAST: ForecastInsightGenerator(self.settings),
            InsightType.CORRELATION: CorrelationInsightGenerator(self.settings),
        }
        missing = set(InsightType) - set(self.generators)
        if missing:
            raise RuntimeError(f"No generator registered for: {sorted(t.value for t in missing)}")

    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        options: Optional[InsightsOptions] = None,
    ) -> list[Insight]:
        """
        Generate insights for the given periods.

        Never raises for empty or partial input; with no finalised period
        left after filtering, a single "Insufficient Data" insight is returned.
        """
        options = options or InsightsOptions()

        filtered = filter_periods_by_time_range(periods, options.time_range)
        filtered = [p for p in filtered if p.is_finalised]

        if not filtered:
            self.logger.info(
                f"No finalised periods in range ({len(periods)} supplied, "
                f"time_range={options.time_range})"
            )
            return [insufficient_data_insight()]

        metric_numbers = (
            list(options.metric_numbers)
            if options.metric_numbers is not None
            else list(self.settings.default_metric_numbers)
        )
        requested = set(options.types) if options.types is not None else set(InsightType)

        self.logger.info(
            f"Generating insights: {len(filtered)} periods, "
            f"{len(metric_numbers)} metrics, types={sorted(t.value for t in requested)}"
        )

        insights: list[Insight] = []
        for insight_type, generator in self.generators.items():
            if insight_type not in requested:
                continue
            produced = generator.generate(filtered, tolerances, metric_numbers)
            self.logger.debug(f"{insight_type.value}: {len(produced)} insights")
            insights.extend(produced)

        self.logger.success(f"Generated {len(insights)} insights")
        return insights


# Global instance
insights_orchestrator = InsightsOrchestrator()


def generate_insights(
    periods: list[ReportingPeriod],
    tolerances: list[ToleranceBand],
    options: Optional[InsightsOptions] = None,
) -> list[Insight]:
    """Module-level entry point using the default orchestrator."""
    return insights_orchestrator.generate(periods, tolerances, options)
