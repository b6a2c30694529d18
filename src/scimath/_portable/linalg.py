"""Portable dense linear algebra on flat row-major lists."""

import math
from typing import List, Sequence

from .._dispatch import register_portable
from ..errors import SingularMatrix
from ._common import as_floats

_BLOCK = 64


@register_portable("dot")
def dot(a: Sequence[float], b: Sequence[float]) -> float:
    total = 0.0
    for x, y in zip(as_floats(a), as_floats(b)):
        total += x * y
    return total


@register_portable("normalize")
def normalize(v: Sequence[float]) -> List[float]:
    values = as_floats(v)
    length = math.sqrt(dot(values, values))
    if length == 0.0:
        return values
    return [x / length for x in values]


@register_portable("matrix_multiply")
def matrix_multiply(a: Sequence[float], rows_a: int, cols_a: int,
                    b: Sequence[float], cols_b: int) -> List[float]:
    """Blocked i-k-j product of (rows_a x cols_a) by (cols_a x cols_b)."""
    a = as_floats(a)
    b = as_floats(b)
    out = [0.0] * (rows_a * cols_b)
    for i0 in range(0, rows_a, _BLOCK):
        i1 = min(i0 + _BLOCK, rows_a)
        for k0 in range(0, cols_a, _BLOCK):
            k1 = min(k0 + _BLOCK, cols_a)
            for j0 in range(0, cols_b, _BLOCK):
                j1 = min(j0 + _BLOCK, cols_b)
                for i in range(i0, i1):
                    row = i * cols_b
                    for k in range(k0, k1):
                        aik = a[i * cols_a + k]
                        if aik == 0.0:
                            continue
                        brow = k * cols_b
                        for j in range(j0, j1):
                            out[row + j] += aik * b[brow + j]
    return out


@register_portable("transpose")
def transpose(a: Sequence[float], rows: int, cols: int) -> List[float]:
    a = as_floats(a)
    out = [0.0] * (rows * cols)
    for i in range(rows):
        for j in range(cols):
            out[j * rows + i] = a[i * cols + j]
    return out


def _pivot_row(m: List[List[float]], col: int, start: int) -> int:
    best, best_val = start, abs(m[start][col])
    for r in range(start + 1, len(m)):
        val = abs(m[r][col])
        if val > best_val:
            best, best_val = r, val
    return best


@register_portable("solve")
def solve(a: Sequence[float], b: Sequence[float], n: int,
          eps: float = 1e-12) -> List[float]:
    """Gaussian elimination with partial pivoting and back substitution.

    Raises:
        SingularMatrix: If the best available pivot is below ``eps``.
    """
    flat = as_floats(a)
    rhs = as_floats(b)
    m = [flat[i * n:(i + 1) * n] + [rhs[i]] for i in range(n)]

    for col in range(n):
        p = _pivot_row(m, col, col)
        if abs(m[p][col]) < eps:
            raise SingularMatrix(f"Pivot {abs(m[p][col]):.3e} below {eps:g} in column {col}")
        if p != col:
            m[col], m[p] = m[p], m[col]
        pivot = m[col]
        for r in range(col + 1, n):
            row = m[r]
            factor = row[col] / pivot[col]
            if factor == 0.0:
                continue
            for c in range(col, n + 1):
                row[c] -= factor * pivot[c]

    x = [0.0] * n
    for i in range(n - 1, -1, -1):
        acc = m[i][n]
        row = m[i]
        for j in range(i + 1, n):
            acc -= row[j] * x[j]
        x[i] = acc / row[i]
    return x


@register_portable("determinant")
def determinant(a: Sequence[float], n: int, eps: float = 1e-12) -> float:
    """Signed product of U's diagonal from LU with partial pivoting."""
    flat = as_floats(a)
    m = [flat[i * n:(i + 1) * n] for i in range(n)]
    det = 1.0
    for col in range(n):
        p = _pivot_row(m, col, col)
        if abs(m[p][col]) < eps:
            return 0.0
        if p != col:
            m[col], m[p] = m[p], m[col]
            det = -det
        pivot = m[col]
        det *= pivot[col]
        for r in range(col + 1, n):
            row = m[r]
            factor = row[col] / pivot[col]
            for c in range(col + 1, n):
                row[c] -= factor * pivot[c]
    return det


@register_portable("least_squares")
def least_squares(a: Sequence[float], b: Sequence[float], rows: int, cols: int,
                  eps: float = 1e-12) -> List[float]:
    """Householder QR solution of min ||Ax - b|| for rows >= cols.

    Raises:
        SingularMatrix: If A is rank deficient (|R[k, k]| < eps).
    """
    flat = as_floats(a)
    m = [flat[i * cols:(i + 1) * cols] for i in range(rows)]
    rhs = as_floats(b)

    for k in range(cols):
        col_norm = math.sqrt(sum(m[i][k] * m[i][k] for i in range(k, rows)))
        if col_norm < eps:
            raise SingularMatrix(f"Column {k} is linearly dependent")
        alpha = -col_norm if m[k][k] >= 0.0 else col_norm
        v = [m[i][k] for i in range(k, rows)]
        v[0] -= alpha
        vv = sum(x * x for x in v)
        if vv > 0.0:
            for j in range(k, cols):
                s = sum(v[i - k] * m[i][j] for i in range(k, rows))
                f = 2.0 * s / vv
                for i in range(k, rows):
                    m[i][j] -= f * v[i - k]
            s = sum(v[i - k] * rhs[i] for i in range(k, rows))
            f = 2.0 * s / vv
            for i in range(k, rows):
                rhs[i] -= f * v[i - k]
    x = [0.0] * cols
    for i in range(cols - 1, -1, -1):
        acc = rhs[i]
        for j in range(i + 1, cols):
            acc -= m[i][j] * x[j]
        x[i] = acc / m[i][i]
    return x
