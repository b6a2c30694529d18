"""
Dense Linear Algebra.

Matrices are flat row-major sequences with explicit dimensions. Every
function validates that the element counts agree with the stated shape and
returns freshly allocated float64 arrays; inputs are never mutated.

Implemented Operations:
    - dot, norm, normalize
    - matrix_multiply, transpose, trace
    - solve_linear_system (Gaussian elimination, partial pivoting)
    - determinant (LU), invert_2x2, invert_3x3
    - least_squares (QR)
"""

from __future__ import annotations

import math

import numpy as np

from ._config import config
from ._dispatch import dispatch
from ._typing import (
    MatrixInput,
    VectorInput,
    ensure_dimension,
    ensure_matrix,
    ensure_same_length,
    ensure_vector,
)
from .errors import DimensionMismatch, SingularMatrix


# =============================================================================
# Vector Operations
# =============================================================================

def dot(a: VectorInput, b: VectorInput) -> float:
    """Inner product of two equal-length vectors.

    Raises:
        DimensionMismatch: If the lengths differ.
    """
    x = ensure_vector(a, name="a")
    y = ensure_vector(b, name="b")
    ensure_same_length(x, y, "dot operands")
    return float(dispatch("dot", x.size, x, y))


def norm(v: VectorInput) -> float:
    """Euclidean (L2) norm."""
    return math.sqrt(dot(v, v))


def normalize(v: VectorInput) -> np.ndarray:
    """Scale to unit L2 norm. The zero vector maps to the zero vector."""
    x = ensure_vector(v, name="v")
    return np.asarray(dispatch("normalize", x.size, x), dtype=np.float64)


# =============================================================================
# Matrix Operations
# =============================================================================

def matrix_multiply(
    a: MatrixInput,
    rows_a: int,
    cols_a: int,
    b: MatrixInput,
    rows_b: int,
    cols_b: int,
) -> np.ndarray:
    """Product of an (rows_a x cols_a) and an (rows_b x cols_b) matrix.

    Args:
        a: Left operand, flat row-major.
        rows_a, cols_a: Shape of ``a``.
        b: Right operand, flat row-major.
        rows_b, cols_b: Shape of ``b``.

    Returns:
        Flat row-major (rows_a x cols_b) product.

    Raises:
        DimensionMismatch: If ``cols_a != rows_b`` or a data length
            disagrees with its shape.

    Examples:
        >>> matrix_multiply([1, 2, 3, 4], 2, 2, [1, 0, 0, 1], 2, 2)
        array([1., 2., 3., 4.])
    """
    if cols_a != rows_b:
        raise DimensionMismatch(
            f"Cannot multiply ({rows_a} x {cols_a}) by ({rows_b} x {cols_b})"
        )
    x = ensure_matrix(a, rows_a, cols_a, "a")
    y = ensure_matrix(b, rows_b, cols_b, "b")
    out = dispatch("matrix_multiply", rows_a * cols_b, x, rows_a, cols_a, y, cols_b)
    return np.asarray(out, dtype=np.float64)


def transpose(a: MatrixInput, rows: int, cols: int) -> np.ndarray:
    """New (cols x rows) matrix holding the transpose of ``a``."""
    x = ensure_matrix(a, rows, cols, "a")
    return np.asarray(dispatch("transpose", x.size, x, rows, cols), dtype=np.float64)


def trace(a: MatrixInput, n: int) -> float:
    """Sum of the diagonal of an (n x n) matrix."""
    x = ensure_matrix(a, n, n, "a")
    return float(sum(x[i * n + i] for i in range(n)))


def solve_linear_system(a: MatrixInput, b: VectorInput, n: int) -> np.ndarray:
    """Solve ``A x = b`` for a square system.

    Gaussian elimination with partial pivoting: at each column the row with
    the largest absolute entry is swapped in as pivot.

    Args:
        a: (n x n) coefficient matrix, flat row-major.
        b: Right-hand side of length n.
        n: System order.

    Returns:
        Solution vector of length n.

    Raises:
        SingularMatrix: If the best pivot is below ``config.numeric.singular_epsilon``.
        DimensionMismatch: If ``a`` or ``b`` disagree with ``n``.

    Examples:
        >>> solve_linear_system([2, 1, 1, 3], [5, 10], 2)
        array([1., 3.])
    """
    n = ensure_dimension(n, "n")
    m = ensure_matrix(a, n, n, "a")
    rhs = ensure_vector(b, size=n, name="b")
    eps = config.numeric.singular_epsilon
    return np.asarray(dispatch("solve", n, m, rhs, n, eps), dtype=np.float64)


def determinant(a: MatrixInput, n: int) -> float:
    """Determinant via LU decomposition.

    The signed product of U's diagonal; the sign flips once per row swap.
    Returns 0.0 when a pivot falls below the singular epsilon.
    """
    n = ensure_dimension(n, "n", minimum=0)
    m = ensure_matrix(a, n, n, "a")
    eps = config.numeric.singular_epsilon
    return float(dispatch("determinant", n, m, n, eps))


def invert_2x2(m: MatrixInput) -> np.ndarray:
    """Closed-form inverse of a 2x2 matrix.

    Raises:
        SingularMatrix: If ``|det| < config.numeric.singular_epsilon``.
    """
    a, b, c, d = ensure_matrix(m, 2, 2, "m").tolist()
    det = a * d - b * c
    if abs(det) < config.numeric.singular_epsilon:
        raise SingularMatrix(f"2x2 determinant {det:.3e} is too small to invert")
    inv = 1.0 / det
    return np.array([d * inv, -b * inv, -c * inv, a * inv])


def invert_3x3(m: MatrixInput) -> np.ndarray:
    """Inverse of a 3x3 matrix from its cofactors (adjugate / det).

    Raises:
        SingularMatrix: If ``|det| < config.numeric.singular_epsilon``.
    """
    a, b, c, d, e, f, g, h, i = ensure_matrix(m, 3, 3, "m").tolist()
    c00 = e * i - f * h
    c01 = -(d * i - f * g)
    c02 = d * h - e * g
    det = a * c00 + b * c01 + c * c02
    if abs(det) < config.numeric.singular_epsilon:
        raise SingularMatrix(f"3x3 determinant {det:.3e} is too small to invert")
    inv = 1.0 / det
    adjugate = [
        c00, -(b * i - c * h), b * f - c * e,
        c01, a * i - c * g, -(a * f - c * d),
        c02, -(a * h - b * g), a * e - b * d,
    ]
    return np.array(adjugate) * inv


def least_squares(a: MatrixInput, b: VectorInput, rows: int, cols: int) -> np.ndarray:
    """Minimum-residual solution of an over-determined system.

    Args:
        a: (rows x cols) design matrix with rows >= cols.
        b: Observations of length rows.

    Raises:
        DimensionMismatch: If ``rows < cols`` or sizes disagree.
        SingularMatrix: If the columns of ``a`` are linearly dependent.
    """
    rows = ensure_dimension(rows, "rows")
    cols = ensure_dimension(cols, "cols")
    if rows < cols:
        raise DimensionMismatch(f"Need rows >= cols, got {rows} x {cols}")
    m = ensure_matrix(a, rows, cols, "a")
    rhs = ensure_vector(b, size=rows, name="b")
    eps = config.numeric.singular_epsilon
    return np.asarray(dispatch("least_squares", m.size, m, rhs, rows, cols, eps),
                      dtype=np.float64)


__all__ = [
    "dot",
    "norm",
    "normalize",
    "matrix_multiply",
    "transpose",
    "trace",
    "solve_linear_system",
    "determinant",
    "invert_2x2",
    "invert_3x3",
    "least_squares",
]
