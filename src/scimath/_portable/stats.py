"""Portable descriptive statistics."""

import math
from typing import Sequence

from .._dispatch import register_portable
from ._common import as_floats


@register_portable("mean")
def mean(data: Sequence[float]) -> float:
    values = as_floats(data)
    if not values:
        return math.nan
    total = 0.0
    for v in values:
        total += v
    return total / len(values)


@register_portable("variance")
def variance(data: Sequence[float]) -> float:
    """Sample variance (n - 1 denominator); 0 for fewer than two values."""
    values = as_floats(data)
    n = len(values)
    if n < 2:
        return 0.0
    m = mean(values)
    ss = 0.0
    for v in values:
        ss += (v - m) * (v - m)
    return ss / (n - 1)


@register_portable("median")
def median(data: Sequence[float]) -> float:
    values = sorted(as_floats(data))
    n = len(values)
    if n == 0:
        return math.nan
    mid = n // 2
    if n % 2 == 0:
        return (values[mid - 1] + values[mid]) / 2.0
    return values[mid]


@register_portable("mode")
def mode(data: Sequence[float]) -> float:
    """Most frequent value; ties resolve to the smallest value."""
    values = sorted(as_floats(data))
    if not values:
        return math.nan
    best, best_count = values[0], 0
    run_value, run_count = values[0], 0
    for v in values:
        if v == run_value:
            run_count += 1
        else:
            run_value, run_count = v, 1
        if run_count > best_count:
            best, best_count = run_value, run_count
    return best


def _central_moments(values):
    n = len(values)
    m = sum(values) / n
    m2 = m3 = m4 = 0.0
    for v in values:
        d = v - m
        d2 = d * d
        m2 += d2
        m3 += d2 * d
        m4 += d2 * d2
    return m2 / n, m3 / n, m4 / n


@register_portable("skewness")
def skewness(data: Sequence[float]) -> float:
    values = as_floats(data)
    if not values:
        return math.nan
    m2, m3, _ = _central_moments(values)
    if m2 == 0.0:
        return 0.0
    return m3 / m2 ** 1.5


@register_portable("kurtosis")
def kurtosis(data: Sequence[float]) -> float:
    """Excess kurtosis from population moments."""
    values = as_floats(data)
    if not values:
        return math.nan
    m2, _, m4 = _central_moments(values)
    if m2 == 0.0:
        return 0.0
    return m4 / (m2 * m2) - 3.0


@register_portable("snr")
def snr(data: Sequence[float]) -> float:
    values = as_floats(data)
    n = len(values)
    if n < 2:
        return 0.0
    m = sum(values) / n
    signal_var = sum((v - m) * (v - m) for v in values) / n
    diffs = sorted(abs(values[i + 1] - values[i]) for i in range(n - 1))
    noise_sigma = diffs[len(diffs) // 2] / 0.6745
    noise_var = noise_sigma * noise_sigma
    if noise_var < 1e-18:
        return 100.0
    return 10.0 * math.log10(signal_var / noise_var)
