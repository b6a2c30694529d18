"""
Numerical Calculus on uniformly spaced samples.

Implemented Operations:
    - derivative: five-point central stencil, lower-order at the edges
    - integrate_simpson, integrate_trapezoid
    - cumulative_integrate: running trapezoid integral
"""

from __future__ import annotations

import numpy as np

from ._dispatch import dispatch
from ._typing import VectorInput, ensure_vector
from .errors import InvalidArgument


def _check_step(h: float) -> float:
    h = float(h)
    if h == 0.0:
        raise InvalidArgument("Sample spacing h must be non-zero")
    return h


def derivative(y: VectorInput, h: float = 1.0) -> np.ndarray:
    """First derivative of uniformly sampled data.

    Interior points use ``(y[i-2] - 8 y[i-1] + 8 y[i+1] - y[i+2]) / 12h``;
    points 1 and n-2 use central differences and the end points one-sided
    differences. Inputs shorter than 5 samples give zeros.
    """
    d = ensure_vector(y, name="y")
    h = _check_step(h)
    return np.asarray(dispatch("derivative", d.size, d, h), dtype=np.float64)


def integrate_simpson(y: VectorInput, h: float = 1.0) -> float:
    """Composite Simpson's rule (0 for fewer than 3 samples)."""
    d = ensure_vector(y, name="y")
    return float(dispatch("integrate_simpson", d.size, d, float(h)))


def integrate_trapezoid(y: VectorInput, h: float = 1.0) -> float:
    """Composite trapezoid rule (0 for fewer than 2 samples)."""
    d = ensure_vector(y, name="y")
    return float(dispatch("integrate_trapezoid", d.size, d, float(h)))


def cumulative_integrate(y: VectorInput, h: float = 1.0) -> np.ndarray:
    """Running trapezoid integral; element i integrates samples 0..i."""
    d = ensure_vector(y, name="y")
    return np.asarray(dispatch("cumulative_integrate", d.size, d, float(h)), dtype=np.float64)


__all__ = [
    "derivative",
    "integrate_simpson",
    "integrate_trapezoid",
    "cumulative_integrate",
]
