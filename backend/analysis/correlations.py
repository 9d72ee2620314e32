"""
Correlation Insights

Pairwise Pearson correlation between metrics over the months every
analysed metric has in common. Strong relationships are surfaced with a
correlation-is-not-causation caveat.
"""

from itertools import combinations

import polars as pl

from analysis.base import InsightGenerator
from analysis.statistical import pearson
from analysis.time_series import MetricPoint, prepare_metric_time_series
from domain.metrics import get_metric_name
from schemas.insights import (
    EvidencePoint,
    Insight,
    InsightEvidence,
    InsightSeverity,
    InsightType,
)
from schemas.periods import ReportingPeriod, ToleranceBand


def _column(metric_number: int) -> str:
    return f"m{metric_number}"


def align_series(series_by_metric: dict[int, list[MetricPoint]]) -> pl.DataFrame:
    """
    Inner-join metric series on month.

    Returns one row per month present in every series, oldest first, with
    a ``month`` column and one value column per metric. When a metric has
    two points in the same month the later one wins.
    """
    aligned = None
    for metric_number, series in series_by_metric.items():
        frame = pl.DataFrame(
            {
                "month": [p.month for p in series],
                _column(metric_number): [p.value for p in series],
            },
            schema={"month": pl.Utf8, _column(metric_number): pl.Float64},
        ).unique(subset=["month"], keep="last", maintain_order=True)

        aligned = frame if aligned is None else aligned.join(frame, on="month", how="inner")

    if aligned is None:
        return pl.DataFrame(schema={"month": pl.Utf8})
    return aligned.sort("month")


class CorrelationInsightGenerator(InsightGenerator):
    """Cross-metric Pearson correlation on aligned months."""

    insight_type = InsightType.CORRELATION

    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        metric_numbers: list[int],
    ) -> list[Insight]:
        insights: list[Insight] = []
        min_points = self.settings.correlation_min_points

        if len(metric_numbers) < 2:
            return insights

        series_by_metric: dict[int, list[MetricPoint]] = {}
        for metric_number in sorted(set(metric_numbers)):
            series = prepare_metric_time_series(periods, metric_number)
            if len(series) >= min_points:
                series_by_metric[metric_number] = series

        if len(series_by_metric) < 2:
            return insights

        aligned = align_series(series_by_metric)
        if aligned.height < min_points:
            return insights

        months = aligned["month"].to_list()
        evidence_count = self.settings.correlation_evidence_points

        for m1, m2 in combinations(series_by_metric.keys(), 2):
            values1 = aligned[_column(m1)].to_list()
            values2 = aligned[_column(m2)].to_list()
            r = pearson(values1, values2)

            if abs(r) <= self.settings.correlation_threshold:
                continue

            name1 = get_metric_name(m1)
            name2 = get_metric_name(m2)
            direction = "positive" if r > 0 else "negative"

            insights.append(Insight(
                id=self.new_id(m1, f"with-{m2}"),
                type=self.insight_type,
                title=f"Strong {direction} correlation: {name1} and {name2}",
                summary=(
                    f"These metrics show a strong {direction} correlation (r={r:.2f}) over the "
                    f"last {len(months)} months. Note: Correlation does not imply causation."
                ),
                severity=InsightSeverity.INFO,
                metric_keys=[m1, m2],
                evidence=InsightEvidence(
                    values=[
                        EvidencePoint(month=month, value=value)
                        for month, value in zip(months[-evidence_count:], values1[-evidence_count:])
                    ],
                    notes=[
                        f"Correlation coefficient: {r:.3f}",
                        f"Based on {len(months)} months of aligned data",
                        "Correlation ≠ causation",
                    ],
                ),
            ))

        return insights


# Global instance
correlation_generator = CorrelationInsightGenerator()
