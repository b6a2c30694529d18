"""Accelerated dense linear algebra (BLAS/LAPACK through numpy and scipy)."""

import warnings

import numpy as np
import scipy.linalg

from .._dispatch import register_kernel
from ..errors import SingularMatrix
from ._pool import chunk_bounds, parallel_map


@register_kernel("dot")
def dot(a: np.ndarray, b: np.ndarray) -> float:
    bounds = chunk_bounds(a.size)
    if len(bounds) == 1:
        return float(np.dot(a, b))
    partials = parallel_map(lambda lo, hi: float(np.dot(a[lo:hi], b[lo:hi])), bounds)
    return float(sum(partials))


@register_kernel("normalize")
def normalize(v: np.ndarray) -> np.ndarray:
    length = float(np.sqrt(dot(v, v)))
    if length == 0.0:
        return v.copy()
    return v / length


@register_kernel("matrix_multiply")
def matrix_multiply(a: np.ndarray, rows_a: int, cols_a: int,
                    b: np.ndarray, cols_b: int) -> np.ndarray:
    return (a.reshape(rows_a, cols_a) @ b.reshape(cols_a, cols_b)).ravel()


@register_kernel("transpose")
def transpose(a: np.ndarray, rows: int, cols: int) -> np.ndarray:
    return np.ascontiguousarray(a.reshape(rows, cols).T).ravel()


def _lu(a: np.ndarray, n: int):
    with warnings.catch_warnings():
        # exact zero pivots are reported through the diagonal check instead
        warnings.simplefilter("ignore", scipy.linalg.LinAlgWarning)
        return scipy.linalg.lu_factor(a.reshape(n, n), check_finite=False)


@register_kernel("solve")
def solve(a: np.ndarray, b: np.ndarray, n: int, eps: float = 1e-12) -> np.ndarray:
    """LU with partial pivoting (LAPACK getrf/getrs).

    Raises:
        SingularMatrix: If any pivot magnitude is below ``eps``.
    """
    lu, piv = _lu(a, n)
    pivots = np.abs(np.diag(lu))
    if n and pivots.min() < eps:
        col = int(np.argmax(pivots < eps))
        raise SingularMatrix(f"Pivot {pivots[col]:.3e} below {eps:g} in column {col}")
    return scipy.linalg.lu_solve((lu, piv), b, check_finite=False)


@register_kernel("determinant")
def determinant(a: np.ndarray, n: int, eps: float = 1e-12) -> float:
    if n == 0:
        return 1.0
    lu, piv = _lu(a, n)
    diag = np.diag(lu)
    if np.abs(diag).min() < eps:
        return 0.0
    swaps = int(np.count_nonzero(piv != np.arange(n)))
    sign = -1.0 if swaps % 2 else 1.0
    return float(sign * np.prod(diag))


@register_kernel("least_squares")
def least_squares(a: np.ndarray, b: np.ndarray, rows: int, cols: int,
                  eps: float = 1e-12) -> np.ndarray:
    """Economic QR then back substitution.

    Raises:
        SingularMatrix: If A is rank deficient (|R[k, k]| < eps).
    """
    q, r = scipy.linalg.qr(a.reshape(rows, cols), mode='economic', check_finite=False)
    if cols and np.abs(np.diag(r)).min() < eps:
        raise SingularMatrix("Matrix columns are linearly dependent")
    return scipy.linalg.solve_triangular(r, q.T @ b, check_finite=False)
