"""
Anomaly Insights

Flags the latest value of a metric when it is a statistical outlier
against its own history. Polarity-aware: only deviations in the "bad"
direction are reported, so an unusually good month never raises an alert.
"""

from typing import Optional

from analysis.base import InsightGenerator, insight_id_prefix, is_lower_better
from analysis.statistical import mean, quartiles, stddev, zscore
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


GENERIC_RECOMMENDATIONS = [
    "Review recent changes or events that may have caused this deviation",
    "Verify data accuracy for this period",
]


def _polarity_context(lower_is_better: bool) -> str:
    if lower_is_better:
        return "This is concerning as lower values are preferred for this metric."
    return "This is concerning as higher values are preferred for this metric."


def _polarity_note(lower_is_better: bool) -> str:
    return "Lower values are better" if lower_is_better else "Higher values are better"


def _polarity_recommendation(lower_is_better: bool) -> str:
    if lower_is_better:
        return "Investigate why the value increased unexpectedly"
    return "Investigate why the value decreased unexpectedly"


class AnomalyInsightGenerator(InsightGenerator):
    """Z-score and IQR outlier detection on the most recent value."""

    insight_type = InsightType.ANOMALY

    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        metric_numbers: list[int],
    ) -> list[Insight]:
        insights: list[Insight] = []

        for metric_number in metric_numbers:
            series = prepare_metric_time_series(periods, metric_number)
            if len(series) < 3:
                continue

            lower_is_better = is_lower_better(tolerances, metric_number)

            if len(series) >= self.settings.zscore_min_points:
                flagged = self._detect_zscore(metric_number, series, lower_is_better)
                if flagged is not None:
                    insights.append(flagged)

            if len(series) >= self.settings.iqr_min_points:
                zscore_prefix = insight_id_prefix(self.insight_type, metric_number, "zscore") + "-"
                already_flagged = any(i.id.startswith(zscore_prefix) for i in insights)
                flagged = self._detect_iqr(metric_number, series, lower_is_better)
                if flagged is not None and not already_flagged:
                    insights.append(flagged)

        return insights

    def _detect_zscore(
        self,
        metric_number: int,
        series: list[MetricPoint],
        lower_is_better: bool,
    ) -> Optional[Insight]:
        """
        Score the latest value against all prior points.

        Lower-is-better metrics are flagged only when abnormally high,
        higher-is-better metrics only when abnormally low.
        """
        threshold = self.settings.zscore_threshold
        recent = series[-1]
        history = [p.value for p in series[:-1]]
        z = zscore(recent.value, history)

        is_bad = z > threshold if lower_is_better else z < -threshold
        if not is_bad or abs(z) <= threshold:
            return None

        name = get_metric_name(metric_number)
        severity = (
            InsightSeverity.CRITICAL
            if abs(z) > self.settings.zscore_critical_threshold
            else InsightSeverity.WARNING
        )
        direction = "above" if lower_is_better else "below"

        return Insight(
            id=self.new_id(metric_number, "zscore"),
            type=self.insight_type,
            title=f"{name}: Unusual {'High' if lower_is_better else 'Low'} Value Detected",
            summary=(
                f"Current value ({recent.value:.1f}) is {abs(z):.2f} standard deviations "
                f"{direction} the historical average. {_polarity_context(lower_is_better)}"
            ),
            severity=severity,
            metric_keys=[metric_number],
            period=InsightPeriod(start=series[0].month, end=recent.month),
            evidence=InsightEvidence(
                values=to_evidence(series),
                z_score=z,
                notes=[
                    f"Mean: {mean(history):.1f}, StdDev: {stddev(history):.1f}",
                    _polarity_note(lower_is_better),
                ],
            ),
            recommendations=[
                *GENERIC_RECOMMENDATIONS,
                "Monitor closely in the next reporting period",
                _polarity_recommendation(lower_is_better),
            ],
        )

    def _detect_iqr(
        self,
        metric_number: int,
        series: list[MetricPoint],
        lower_is_better: bool,
    ) -> Optional[Insight]:
        """Tukey fences over prior points; only the bad side is checked."""
        recent = series[-1]
        q = quartiles([p.value for p in series[:-1]])
        lower_bound, upper_bound = q.bounds(self.settings.iqr_multiplier)

        is_bad = recent.value > upper_bound if lower_is_better else recent.value < lower_bound
        if not is_bad:
            return None

        name = get_metric_name(metric_number)

        return Insight(
            id=self.new_id(metric_number, "iqr"),
            type=self.insight_type,
            title=f"{name}: Outlier Detected",
            summary=(
                f"Current value ({recent.value:.1f}) falls outside the expected range "
                f"[{lower_bound:.1f}, {upper_bound:.1f}] based on interquartile range analysis. "
                f"{_polarity_context(lower_is_better)}"
            ),
            severity=InsightSeverity.WARNING,
            metric_keys=[metric_number],
            period=InsightPeriod(start=series[0].month, end=recent.month),
            evidence=InsightEvidence(
                values=to_evidence(series),
                notes=[
                    f"Q1: {q.q1:.1f}, Q3: {q.q3:.1f}, IQR: {q.iqr:.1f}",
                    _polarity_note(lower_is_better),
                ],
            ),
            recommendations=[
                *GENERIC_RECOMMENDATIONS,
                _polarity_recommendation(lower_is_better),
            ],
        )


# Global instance
anomaly_generator = AnomalyInsightGenerator()
