"""
Forecast Insights

Naive next-month projections: a 3-month moving average for every metric
with enough history, and a least-squares line when it disagrees
materially with the average. Both are explicitly low confidence.
"""

from analysis.base import InsightGenerator
from analysis.statistical import linear_regression, mean
from analysis.time_series import MetricPoint, prepare_metric_time_series, to_evidence
from domain.metrics import get_metric_name
from schemas.insights import Insight, InsightEvidence, InsightSeverity, InsightType
from schemas.periods import ReportingPeriod, ToleranceBand


def _local_direction(series: list[MetricPoint]) -> str:
    latest, previous = series[-1].value, series[-2].value
    if latest > previous:
        return "increasing"
    if latest < previous:
        return "decreasing"
    return "flat"


class ForecastInsightGenerator(InsightGenerator):
    """Moving-average and linear-trend projections."""

    insight_type = InsightType.FORECAST

    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        metric_numbers: list[int],
    ) -> list[Insight]:
        insights: list[Insight] = []
        window = self.settings.forecast_window

        for metric_number in metric_numbers:
            series = prepare_metric_time_series(periods, metric_number)
            if len(series) < 3:
                continue

            name = get_metric_name(metric_number)
            values = [p.value for p in series]
            recent = series[-window:]
            forecast = mean([p.value for p in recent])

            insights.append(Insight(
                id=self.new_id(metric_number, "ma"),
                type=self.insight_type,
                title=f"{name}: Next Month Forecast",
                summary=(
                    f"Based on a {window}-month moving average, the forecasted value for next "
                    f"month is {forecast:.1f}. Note: This is a simple forecast with low confidence."
                ),
                severity=InsightSeverity.INFO,
                metric_keys=[metric_number],
                evidence=InsightEvidence(
                    values=to_evidence(recent),
                    notes=[
                        "Low confidence forecast based on moving average",
                        f"Current trend: {_local_direction(series)}",
                    ],
                ),
            ))

            if len(series) < self.settings.linear_forecast_min_points:
                continue

            fit = linear_regression(values)
            linear_forecast = fit.predict(len(values))
            if abs(linear_forecast - forecast) <= self.settings.linear_forecast_divergence:
                continue

            insights.append(Insight(
                id=self.new_id(metric_number, "linear"),
                type=self.insight_type,
                title=f"{name}: Linear Trend Forecast",
                summary=(
                    f"Based on linear regression, the forecasted value is {linear_forecast:.1f} "
                    f"(trend: {'increasing' if fit.slope > 0 else 'decreasing'} at "
                    f"{abs(fit.slope):.2f} per month). Low confidence."
                ),
                severity=InsightSeverity.INFO,
                metric_keys=[metric_number],
                evidence=InsightEvidence(
                    values=to_evidence(series),
                    notes=[
                        f"Slope: {fit.slope:.2f}, Intercept: {fit.intercept:.1f}",
                        "Low confidence forecast",
                    ],
                ),
            ))

        return insights


# Global instance
forecast_generator = ForecastInsightGenerator()
