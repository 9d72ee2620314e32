"""
RAG Status

Classifies a metric value against its red/amber/green tolerance bands.
"""

from enum import Enum
from typing import Optional

from schemas.periods import ToleranceBand


class RAGStatus(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    NA = "na"


def check_band(
    value: float,
    minimum: Optional[float],
    maximum: Optional[float],
    operator: str,
) -> bool:
    """Whether a value satisfies one band's operator and bounds."""
    if minimum is None and maximum is None:
        return False

    if operator == ">=":
        return minimum is not None and value >= minimum
    if operator == "<=":
        return maximum is not None and value <= maximum
    if operator == "==":
        return minimum is not None and value == minimum
    if operator == "range":
        min_ok = minimum is None or value >= minimum
        max_ok = maximum is None or value <= maximum
        return min_ok and max_ok
    return False


def calculate_rag(
    value: Optional[float],
    band: Optional[ToleranceBand],
) -> RAGStatus:
    """
    Evaluate green, amber then red; a value matching no band is red.

    Missing values or tolerances are reported as NA.
    """
    if value is None or band is None:
        return RAGStatus.NA

    if check_band(value, band.green_min, band.green_max, band.green_operator):
        return RAGStatus.GREEN
    if check_band(value, band.amber_min, band.amber_max, band.amber_operator):
        return RAGStatus.AMBER
    if check_band(value, band.red_min, band.red_max, band.red_operator):
        return RAGStatus.RED

    return RAGStatus.RED
