"""
Descriptive statistics for Microplate.

Each class exposes ``calculate(values, **params)`` over a flat list of numbers
and can be handed to ``StatisticsDispatcher``. Inputs are copied into numpy
arrays, so callers' lists are never reordered. Empty input yields ``nan``
(``Count`` yields 0).

Quantiles use the (n + 1) interpolation rule: with sorted data ``x`` and
``pos = q * (n + 1)``, positions below 1 clamp to the first value, positions
at or past n clamp to the last, integral positions pick ``x[pos - 1]`` and
anything else interpolates linearly between the neighbours.
"""

import math
from typing import Sequence

import numpy as np

from microplate.exceptions import RangeError


def _array(values: Sequence[float]) -> np.ndarray:
    return np.array(values, dtype=float)


def _quantile(ordered: np.ndarray, q: float) -> float:
    """Interpolated quantile of already-sorted data, q in [0, 1]."""
    n = len(ordered)
    if n == 0 or math.isnan(q) or q < 0 or q > 1:
        return float("nan")
    if n == 1:
        return float(ordered[0])

    pos = q * (n + 1)
    if pos < 1:
        return float(ordered[0])
    if pos >= n:
        return float(ordered[-1])
    if pos == math.floor(pos):
        return float(ordered[int(pos) - 1])

    lower_index = math.floor(pos) - 1
    lower = ordered[lower_index]
    upper = ordered[lower_index + 1]
    fraction = pos - 1 - lower_index
    return float((upper - lower) * fraction + lower)


# ============================================================================
# Location
# ============================================================================


class Mean:
    """Arithmetic mean."""

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.mean(data)) if data.size else float("nan")


class GeometricMean:
    """Geometric mean; ``nan`` if any value is negative."""

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        if data.size == 0 or np.any(data < 0):
            return float("nan")
        if np.any(data == 0):
            return 0.0
        return float(np.exp(np.mean(np.log(data))))


class Median:
    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.median(data)) if data.size else float("nan")


class Sum:
    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.sum(data)) if data.size else float("nan")


class Count:
    """Number of values."""

    def calculate(self, values: Sequence[float]) -> int:
        return len(values)


class Minimum:
    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.min(data)) if data.size else float("nan")


class Maximum:
    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.max(data)) if data.size else float("nan")


class Range:
    """Maximum minus minimum."""

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.ptp(data)) if data.size else float("nan")


# ============================================================================
# Spread
# ============================================================================


class SampleVariance:
    """Variance with n - 1 in the denominator; ``nan`` for fewer than two values."""

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.var(data, ddof=1)) if data.size > 1 else float("nan")


class PopulationVariance:
    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.var(data)) if data.size else float("nan")


class SampleStandardDeviation:
    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.std(data, ddof=1)) if data.size > 1 else float("nan")


class PopulationStandardDeviation:
    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        return float(np.std(data)) if data.size else float("nan")


class StandardError:
    """Sample standard deviation divided by sqrt(n)."""

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        if data.size < 2:
            return float("nan")
        return float(np.std(data, ddof=1) / math.sqrt(data.size))


class CoefficientOfVariation:
    """Sample standard deviation divided by the mean."""

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        if data.size < 2:
            return float("nan")
        mean = np.mean(data)
        if mean == 0:
            return float("nan")
        return float(np.std(data, ddof=1) / mean)


# ============================================================================
# Shape
# ============================================================================


class Skewness:
    """Adjusted Fisher-Pearson sample skewness; ``nan`` for fewer than three values."""

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        n = data.size
        if n < 3:
            return float("nan")
        deviation = np.std(data, ddof=1)
        if deviation == 0:
            return float("nan")
        standardized = (data - np.mean(data)) / deviation
        return float(n / ((n - 1) * (n - 2)) * np.sum(standardized ** 3))


class Kurtosis:
    """
    Excess sample kurtosis.

    Formula:
        sum((x - mean)^4) / s^4 * n(n+1) / ((n-1)(n-2)(n-3)) - 3(n-1)^2 / ((n-2)(n-3))

    where s^2 is the sample variance.

    Raises:
        RangeError: If there are three or fewer values
    """

    def calculate(self, values: Sequence[float]) -> float:
        data = _array(values)
        n = data.size
        if n <= 3:
            raise RangeError(f"The data set must contain more than three values to calculate kurtosis: {n}")

        deviations = data - np.mean(data)
        second_moment = (np.sum(deviations ** 2) / (n - 1)) ** 2
        if second_moment == 0:
            return float("nan")
        fourth_moment = np.sum(deviations ** 4) / second_moment

        coefficient = (n * (n + 1)) / ((n - 1) * (n - 2) * (n - 3))
        subtrahend = (3 * (n - 1) ** 2) / ((n - 2) * (n - 3))
        return float(fourth_moment * coefficient - subtrahend)


# ============================================================================
# Quantiles
# ============================================================================


class Percentile:
    """
    The p-th percentile, p in [0, 100].

    Examples:
        >>> Percentile().calculate([1, 2, 3, 4, 5, 6, 7, 8, 9, 10], p=25)
        2.75
    """

    def calculate(self, values: Sequence[float], p: float) -> float:
        if p < 0 or p > 100:
            return float("nan")
        return _quantile(np.sort(_array(values)), p / 100.0)


class Quantile:
    """The q-th quantile, q in [0, 1]."""

    def calculate(self, values: Sequence[float], q: float) -> float:
        return _quantile(np.sort(_array(values)), q)


class Quartiles:
    """First, second and third quartiles as ``[Q1, Q2, Q3]``."""

    def calculate(self, values: Sequence[float]) -> list[float]:
        ordered = np.sort(_array(values))
        return [_quantile(ordered, q) for q in (0.25, 0.5, 0.75)]


class InterquartileRange:
    """Q3 minus Q1."""

    def calculate(self, values: Sequence[float]) -> float:
        ordered = np.sort(_array(values))
        return _quantile(ordered, 0.75) - _quantile(ordered, 0.25)
