"""Portable numerical differentiation and integration."""

from typing import List, Sequence

from .._dispatch import register_portable
from ._common import as_floats


@register_portable("derivative")
def derivative(y: Sequence[float], h: float) -> List[float]:
    """Five-point stencil inside, lower-order differences at the edges."""
    d = as_floats(y)
    n = len(d)
    out = [0.0] * n
    if n < 5:
        return out
    inv12h = 1.0 / (12.0 * h)
    for i in range(2, n - 2):
        out[i] = (d[i - 2] - 8.0 * d[i - 1] + 8.0 * d[i + 1] - d[i + 2]) * inv12h
    out[0] = (d[1] - d[0]) / h
    out[1] = (d[2] - d[0]) / (2.0 * h)
    out[n - 2] = (d[n - 1] - d[n - 3]) / (2.0 * h)
    out[n - 1] = (d[n - 1] - d[n - 2]) / h
    return out


@register_portable("integrate_simpson")
def integrate_simpson(y: Sequence[float], h: float) -> float:
    d = as_floats(y)
    n = len(d)
    if n < 3:
        return 0.0
    total = d[0] + d[n - 1]
    for i in range(1, n - 1):
        total += (2.0 if i % 2 == 0 else 4.0) * d[i]
    return h / 3.0 * total


@register_portable("integrate_trapezoid")
def integrate_trapezoid(y: Sequence[float], h: float) -> float:
    d = as_floats(y)
    if len(d) < 2:
        return 0.0
    total = 0.0
    for i in range(len(d) - 1):
        total += d[i] + d[i + 1]
    return h / 2.0 * total


@register_portable("cumulative_integrate")
def cumulative_integrate(y: Sequence[float], h: float) -> List[float]:
    d = as_floats(y)
    if not d:
        return []
    out = [0.0]
    acc = 0.0
    for i in range(len(d) - 1):
        acc += h / 2.0 * (d[i] + d[i + 1])
        out.append(acc)
    return out
