"""
Insight Generator Base

Common contract for the six insight generators.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

from config import InsightsSettings, get_settings
from schemas.insights import Insight, InsightType
from schemas.periods import ReportingPeriod, ToleranceBand


def insight_id_prefix(insight_type: InsightType, metric_number: int, suffix: Optional[str] = None) -> str:
    """Deterministic part of an insight id: type, metric and variant."""
    prefix = f"{insight_type.value}-m{metric_number}"
    if suffix:
        prefix = f"{prefix}-{suffix}"
    return prefix


def make_insight_id(insight_type: InsightType, metric_number: int, suffix: Optional[str] = None) -> str:
    """Unique insight id; the random tail keeps repeated runs distinct."""
    return f"{insight_id_prefix(insight_type, metric_number, suffix)}-{uuid4().hex[:12]}"


def find_tolerance(tolerances: list[ToleranceBand], metric_number: int) -> Optional[ToleranceBand]:
    for tolerance in tolerances:
        if tolerance.metric_number == metric_number:
            return tolerance
    return None


def is_lower_better(tolerances: list[ToleranceBand], metric_number: int) -> bool:
    """Polarity of a metric; higher-is-better when no tolerance exists."""
    tolerance = find_tolerance(tolerances, metric_number)
    return tolerance.is_lower_better if tolerance is not None else False


class InsightGenerator(ABC):
    """
    Produces one kind of insight from finalised periods.

    Generators are pure: no I/O, no logging, no shared state. Metrics
    without enough data are skipped silently.
    """

    insight_type: InsightType

    def __init__(self, settings: Optional[InsightsSettings] = None):
        self.settings = settings or get_settings().insights

    @abstractmethod
    def generate(
        self,
        periods: list[ReportingPeriod],
        tolerances: list[ToleranceBand],
        metric_numbers: list[int],
    ) -> list[Insight]:
        """Return the insights of this generator's type."""

    def new_id(self, metric_number: int, suffix: Optional[str] = None) -> str:
        return make_insight_id(self.insight_type, metric_number, suffix)
