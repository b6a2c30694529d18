"""Accelerated descriptive statistics."""

import numpy as np

from .._dispatch import register_kernel
from ._pool import chunk_bounds, parallel_map


def chunked_sum(x: np.ndarray) -> float:
    """Sum with one partial per worker chunk."""
    bounds = chunk_bounds(x.size)
    if len(bounds) == 1:
        return float(np.sum(x))
    partials = parallel_map(lambda lo, hi: float(np.sum(x[lo:hi])), bounds)
    return float(sum(partials))


@register_kernel("mean")
def mean(data: np.ndarray) -> float:
    if data.size == 0:
        return float("nan")
    return chunked_sum(data) / data.size


@register_kernel("variance")
def variance(data: np.ndarray) -> float:
    if data.size < 2:
        return 0.0
    return float(np.var(data, ddof=1))


@register_kernel("median")
def median(data: np.ndarray) -> float:
    if data.size == 0:
        return float("nan")
    return float(np.median(data))


@register_kernel("mode")
def mode(data: np.ndarray) -> float:
    """Most frequent value; ties resolve to the smallest value."""
    if data.size == 0:
        return float("nan")
    values, counts = np.unique(data, return_counts=True)
    return float(values[np.argmax(counts)])


def _central_moments(data: np.ndarray):
    d = data - data.mean()
    d2 = d * d
    return d2.mean(), (d2 * d).mean(), (d2 * d2).mean()


@register_kernel("skewness")
def skewness(data: np.ndarray) -> float:
    if data.size == 0:
        return float("nan")
    m2, m3, _ = _central_moments(data)
    if m2 == 0.0:
        return 0.0
    return float(m3 / m2 ** 1.5)


@register_kernel("kurtosis")
def kurtosis(data: np.ndarray) -> float:
    if data.size == 0:
        return float("nan")
    m2, _, m4 = _central_moments(data)
    if m2 == 0.0:
        return 0.0
    return float(m4 / (m2 * m2) - 3.0)


@register_kernel("snr")
def snr(data: np.ndarray) -> float:
    n = data.size
    if n < 2:
        return 0.0
    signal_var = float(np.var(data))
    diffs = np.sort(np.abs(np.diff(data)))
    noise_sigma = diffs[diffs.size // 2] / 0.6745
    noise_var = noise_sigma * noise_sigma
    if noise_var < 1e-18:
        return 100.0
    return float(10.0 * np.log10(signal_var / noise_var))
