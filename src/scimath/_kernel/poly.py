"""Accelerated polynomial evaluation."""

import numpy as np

from .._dispatch import register_kernel
from ._pool import chunk_bounds, parallel_map


def _horner(coeffs: np.ndarray, x: np.ndarray) -> np.ndarray:
    acc = np.zeros_like(x)
    for c in coeffs[::-1]:
        acc = acc * x + c
    return acc


@register_kernel("poly_eval")
def poly_eval(coeffs: np.ndarray, x: np.ndarray) -> np.ndarray:
    bounds = chunk_bounds(x.size)
    if len(bounds) == 1:
        return _horner(coeffs, x)
    parts = parallel_map(lambda lo, hi: _horner(coeffs, x[lo:hi]), bounds)
    return np.concatenate(parts)
