"""
Descriptive Statistics.

Reductions over a single vector. Empty input yields NaN for location
statistics and 0 for spread; NaN values propagate per IEEE-754.

Implemented Operations:
    - mean, median, mode
    - variance (sample, n - 1), standard_deviation
    - skewness, kurtosis (population moments, excess kurtosis)
"""

from __future__ import annotations

import math

from ._dispatch import dispatch
from ._typing import VectorInput, ensure_vector


def mean(data: VectorInput) -> float:
    """Arithmetic mean.

    Args:
        data: Input values.

    Returns:
        The mean, or NaN for empty input.

    Examples:
        >>> mean([1.0, 2.0, 3.0, 4.0])
        2.5
    """
    x = ensure_vector(data, name="data")
    return float(dispatch("mean", x.size, x))


def variance(data: VectorInput) -> float:
    """Sample variance with an n - 1 denominator (0 for fewer than 2 values)."""
    x = ensure_vector(data, name="data")
    return float(dispatch("variance", x.size, x))


def standard_deviation(data: VectorInput) -> float:
    """Square root of the sample variance."""
    return math.sqrt(variance(data))


def median(data: VectorInput) -> float:
    """Middle value; the mean of the two middle values for even lengths."""
    x = ensure_vector(data, name="data")
    return float(dispatch("median", x.size, x))


def mode(data: VectorInput) -> float:
    """Most frequent value. Ties resolve to the smallest value."""
    x = ensure_vector(data, name="data")
    return float(dispatch("mode", x.size, x))


def skewness(data: VectorInput) -> float:
    """Population skewness m3 / m2^1.5 (0 for constant data)."""
    x = ensure_vector(data, name="data")
    return float(dispatch("skewness", x.size, x))


def kurtosis(data: VectorInput) -> float:
    """Excess kurtosis m4 / m2^2 - 3 (0 for constant data)."""
    x = ensure_vector(data, name="data")
    return float(dispatch("kurtosis", x.size, x))


__all__ = [
    "mean",
    "variance",
    "standard_deviation",
    "median",
    "mode",
    "skewness",
    "kurtosis",
]
