"""
Insight Ranker

Ranks and prioritizes insights by severity and the size of the effect
they describe, and picks which ones are worth sending for AI enrichment.
"""

from dataclasses import dataclass
from typing import Optional

from schemas.insights import Insight, InsightSeverity


@dataclass
class RankingCriteria:
    """Criteria weights for ranking insights."""

    severity_weight: float = 0.7
    magnitude_weight: float = 0.3


SEVERITY_SCORES = {
    InsightSeverity.CRITICAL: 1.0,
    InsightSeverity.WARNING: 0.6,
    InsightSeverity.INFO: 0.2,
}
NO_SEVERITY_SCORE = 0.1

PRIORITY_SEVERITIES = (InsightSeverity.CRITICAL, InsightSeverity.WARNING)


def is_priority(insight: Insight) -> bool:
    return insight.severity in PRIORITY_SEVERITIES


class InsightRanker:
    """
    Ranks insights by importance.

    Never mutates the insights it is given.
    """

    def __init__(self, criteria: Optional[RankingCriteria] = None):
        self.criteria = criteria or RankingCriteria()

    def score(self, insight: Insight) -> float:
        """Composite score in 0..1."""
        severity = SEVERITY_SCORES.get(insight.severity, NO_SEVERITY_SCORE)
        magnitude = self._score_magnitude(insight)

        score = (
            self.criteria.severity_weight * severity
            + self.criteria.magnitude_weight * magnitude
        )
        return min(1.0, max(0.0, score))

    def _score_magnitude(self, insight: Insight) -> float:
        """Score based on size of effect."""
        evidence = insight.evidence
        if evidence is None:
            return 0.0

        if evidence.change_pct is not None:
            abs_pct = abs(evidence.change_pct)
            if abs_pct > 100:
                return 1.0
            elif abs_pct > 50:
                return 0.8
            elif abs_pct > 20:
                return 0.6
            elif abs_pct > 10:
                return 0.4
            else:
                return 0.2

        if evidence.z_score is not None:
            # |z| of 4 or more saturates
            return min(1.0, abs(evidence.z_score) / 4)

        return 0.0

    def rank_insights(
        self,
        insights: list[Insight],
        top_n: int = 10,
    ) -> list[Insight]:
        """
        Rank and return top N insights.

        Args:
            insights: List of insights to rank
            top_n: Number of top insights to return

        Returns:
            New list sorted by score, ties kept in input order
        """
        if not insights:
            return []

        ranked = sorted(insights, key=self.score, reverse=True)
        return ranked[:top_n]

    def diversify_insights(
        self,
        insights: list[Insight],
        max_per_type: int = 3,
        max_per_metric: int = 2,
    ) -> list[Insight]:
        """
        Diversify insights to avoid redundancy.

        Limits insights per type and per referenced metric.
        """
        result = []
        type_counts: dict[str, int] = {}
        metric_counts: dict[int, int] = {}

        for insight in insights:
            type_count = type_counts.get(insight.type, 0)
            if type_count >= max_per_type:
                continue

            metrics = insight.metric_keys or []
            if any(metric_counts.get(m, 0) >= max_per_metric for m in metrics):
                continue

            result.append(insight)
            type_counts[insight.type] = type_count + 1
            for m in metrics:
                metric_counts[m] = metric_counts.get(m, 0) + 1

        return result

    def select_for_enhancement(
        self,
        insights: list[Insight],
        max_priority: int = 3,
        max_other: int = 2,
        limit: int = 5,
    ) -> list[Insight]:
        """
        Pick insights to enrich: critical and warning first, then the rest,
        each group in input order.
        """
        priority = [i for i in insights if is_priority(i)]
        other = [i for i in insights if not is_priority(i)]
        return (priority[:max_priority] + other[:max_other])[:limit]


# Global instance
insight_ranker = InsightRanker()
