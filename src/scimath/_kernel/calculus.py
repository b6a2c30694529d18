"""Accelerated numerical differentiation and integration."""

import numpy as np

from .._dispatch import register_kernel


@register_kernel("derivative")
def derivative(y: np.ndarray, h: float) -> np.ndarray:
    n = y.size
    out = np.zeros(n)
    if n < 5:
        return out
    out[2:n - 2] = (y[:n - 4] - 8.0 * y[1:n - 3] + 8.0 * y[3:n - 1] - y[4:]) * (1.0 / (12.0 * h))
    out[0] = (y[1] - y[0]) / h
    out[1] = (y[2] - y[0]) / (2.0 * h)
    out[n - 2] = (y[n - 1] - y[n - 3]) / (2.0 * h)
    out[n - 1] = (y[n - 1] - y[n - 2]) / h
    return out


@register_kernel("integrate_simpson")
def integrate_simpson(y: np.ndarray, h: float) -> float:
    n = y.size
    if n < 3:
        return 0.0
    inner = y[1:n - 1]
    weights = np.where(np.arange(1, n - 1) % 2 == 0, 2.0, 4.0)
    return float(h / 3.0 * (y[0] + y[n - 1] + np.dot(weights, inner)))


@register_kernel("integrate_trapezoid")
def integrate_trapezoid(y: np.ndarray, h: float) -> float:
    if y.size < 2:
        return 0.0
    return float(h / 2.0 * np.sum(y[:-1] + y[1:]))


@register_kernel("cumulative_integrate")
def cumulative_integrate(y: np.ndarray, h: float) -> np.ndarray:
    if y.size == 0:
        return np.empty(0)
    return np.concatenate(([0.0], np.cumsum(h / 2.0 * (y[:-1] + y[1:]))))
