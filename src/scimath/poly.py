"""
Polynomials.

Coefficients are ascending-degree: ``[c0, c1, c2]`` is ``c0 + c1 x + c2 x^2``.
"""

from __future__ import annotations

from typing import Union

import numpy as np

from ._dispatch import dispatch
from ._typing import VectorInput, ensure_vector


def poly_eval(coeffs: VectorInput, x: Union[float, VectorInput]) -> Union[float, np.ndarray]:
    """Evaluate by Horner's rule.

    Args:
        coeffs: Ascending-degree coefficients.
        x: Scalar or array of evaluation points.

    Returns:
        A float for scalar ``x``, otherwise an array of the same length.

    Examples:
        >>> poly_eval([1.0, 0.0, 2.0], 3.0)
        19.0
    """
    c = ensure_vector(coeffs, name="coeffs")
    scalar = np.ndim(x) == 0 and not hasattr(x, 'to_numpy')
    xs = ensure_vector([x] if scalar else x, name="x")
    out = np.asarray(dispatch("poly_eval", xs.size, c, xs), dtype=np.float64)
    return float(out[0]) if scalar else out


def poly_derive(coeffs: VectorInput) -> np.ndarray:
    """Coefficients of the derivative (``[0.]`` for constants)."""
    c = ensure_vector(coeffs, name="coeffs")
    if c.size <= 1:
        return np.zeros(1)
    return c[1:] * np.arange(1, c.size)


def poly_integrate(coeffs: VectorInput, constant: float = 0.0) -> np.ndarray:
    """Coefficients of the antiderivative with integration constant ``constant``."""
    c = ensure_vector(coeffs, name="coeffs")
    out = np.empty(c.size + 1)
    out[0] = constant
    out[1:] = c / np.arange(1, c.size + 1)
    return out


__all__ = [
    "poly_eval",
    "poly_derive",
    "poly_integrate",
]
