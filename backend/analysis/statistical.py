"""
Statistics Toolkit

Pure numeric helpers shared by the insight generators.
Vectorized with NumPy; regression through SciPy.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy import stats as scipy_stats


@dataclass
class Quartiles:
    """Median-of-halves quartiles."""

    q1: float
    q2: float
    q3: float

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1

    def bounds(self, multiplier: float) -> tuple[float, float]:
        """Tukey fences: (Q1 - k*IQR, Q3 + k*IQR)."""
        return self.q1 - multiplier * self.iqr, self.q3 + multiplier * self.iqr


@dataclass
class LinearFit:
    """Least-squares line over index-encoded x."""

    slope: float
    intercept: float
    r_squared: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(_as_array(values)))


def stddev(values: Sequence[float]) -> float:
    """Population standard deviation; 0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    arr = _as_array(values)
    # Identical values must give exactly 0, not rounding noise
    if np.ptp(arr) == 0:
        return 0.0
    return float(np.std(arr))


def zscore(value: float, history: Sequence[float]) -> float:
    """Standardised distance of value from history; 0 for a flat history."""
    sd = stddev(history)
    if sd == 0:
        return 0.0
    return (value - mean(history)) / sd


def _median_sorted(arr: np.ndarray) -> float:
    n = len(arr)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 0:
        return float((arr[mid - 1] + arr[mid]) / 2)
    return float(arr[mid])


def quartiles(values: Sequence[float]) -> Quartiles:
    """
    Quartiles by the exclusive median-of-halves method.

    The lower and upper halves exclude the overall median when the
    length is odd; Q1/Q3 are the medians of those halves.
    """
    arr = np.sort(_as_array(values))
    n = len(arr)
    q2 = _median_sorted(arr)

    if n < 2:
        return Quartiles(q1=q2, q2=q2, q3=q2)

    lower = arr[: n // 2]
    upper = arr[(n + 1) // 2:]

    return Quartiles(
        q1=_median_sorted(lower),
        q2=q2,
        q3=_median_sorted(upper),
    )


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient.

    Returns 0 for unequal lengths, fewer than 2 points, or a zero-variance
    input. A 0 here is a convention, not a failure signal.
    """
    if len(x) != len(y) or len(x) < 2:
        return 0.0

    ax = _as_array(x)
    ay = _as_array(y)
    if np.ptp(ax) == 0 or np.ptp(ay) == 0:
        return 0.0

    dx = ax - ax.mean()
    dy = ay - ay.mean()
    denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator == 0:
        return 0.0

    return float(np.sum(dx * dy) / denominator)


def linear_regression(values: Sequence[float]) -> Optional[LinearFit]:
    """Fit y = slope*x + intercept with x = 0..n-1; None below 2 points."""
    if len(values) < 2:
        return None

    y = _as_array(values)
    x = np.arange(len(y), dtype=np.float64)
    result = scipy_stats.linregress(x, y)

    return LinearFit(
        slope=float(result.slope),
        intercept=float(result.intercept),
        r_squared=float(result.rvalue ** 2),
    )


def percent_change(current: float, previous: float) -> Optional[float]:
    """Relative change in percent; None when the base is 0."""
    if previous == 0:
        return None
    return (current - previous) / previous * 100
