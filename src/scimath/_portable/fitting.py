"""Portable least-squares fitting."""

import math
from typing import List, Sequence, Tuple

from .._dispatch import register_portable
from ..errors import SingularMatrix
from ._common import as_floats
from .linalg import solve


@register_portable("fit_linear")
def fit_linear(x: Sequence[float], y: Sequence[float],
               eps: float = 1e-12) -> Tuple[float, float, float]:
    """Closed-form OLS line. Returns (slope, intercept, r_squared)."""
    xs = as_floats(x)
    ys = as_floats(y)
    n = len(xs)
    x_mean = math.fsum(xs) / n
    y_mean = math.fsum(ys) / n
    sxx = sxy = 0.0
    scale = 0.0
    for xi, yi in zip(xs, ys):
        dx = xi - x_mean
        sxx += dx * dx
        sxy += dx * (yi - y_mean)
        scale = max(scale, abs(xi))
    # Spread below the rounding level of x means every x is the same value
    if sxx <= n * (eps * scale) ** 2:
        raise SingularMatrix("x values have no spread; slope is undefined")
    slope = sxy / sxx
    intercept = y_mean - slope * x_mean

    ss_tot = ss_res = 0.0
    for xi, yi in zip(xs, ys):
        ss_tot += (yi - y_mean) ** 2
        ss_res += (yi - (slope * xi + intercept)) ** 2
    r2 = 1.0 - ss_res / ss_tot if ss_tot > 0.0 else 0.0
    return slope, intercept, r2


@register_portable("fit_polynomial")
def fit_polynomial(x: Sequence[float], y: Sequence[float], degree: int,
                   eps: float = 1e-12) -> List[float]:
    """Normal equations from raw power sums; ascending coefficients."""
    xs = as_floats(x)
    ys = as_floats(y)
    size = degree + 1
    powers = [0.0] * (2 * degree + 1)
    rhs = [0.0] * size
    for xi, yi in zip(xs, ys):
        p = 1.0
        for k in range(2 * degree + 1):
            powers[k] += p
            if k < size:
                rhs[k] += p * yi
            p *= xi
    matrix = [powers[i + j] for i in range(size) for j in range(size)]
    return solve(matrix, rhs, size, eps)


def _gaussian(x: float, a: float, mu: float, sigma: float) -> float:
    if abs(sigma) < 1e-12:
        return 0.0
    return a * math.exp(-((x - mu) ** 2) / (2.0 * sigma * sigma))


def _sq_error(xs, ys, p) -> float:
    return sum((yi - _gaussian(xi, p[0], p[1], p[2])) ** 2 for xi, yi in zip(xs, ys))


@register_portable("fit_gaussian")
def fit_gaussian(x: Sequence[float], y: Sequence[float], initial: Sequence[float],
                 max_iterations: int = 20, tolerance: float = 1e-6,
                 eps: float = 1e-12) -> List[float]:
    """Levenberg-Marquardt over (amplitude, mean, sigma)."""
    xs = as_floats(x)
    ys = as_floats(y)
    p = as_floats(initial)
    lam = 1e-3

    for _ in range(max_iterations):
        amp, mu, sigma = p
        jtj = [0.0] * 9
        jtr = [0.0] * 3
        error = 0.0
        if abs(sigma) >= 1e-12:
            s2 = sigma * sigma
            s3 = s2 * sigma
            for xi, yi in zip(xs, ys):
                d = xi - mu
                e = math.exp(-(d * d) / (2.0 * s2))
                r = yi - amp * e
                error += r * r
                jac = (e, amp * e * d / s2, amp * e * d * d / s3)
                for row in range(3):
                    for col in range(3):
                        jtj[row * 3 + col] += jac[row] * jac[col]
                    jtr[row] += jac[row] * r
        for i in range(3):
            jtj[i * 3 + i] *= 1.0 + lam

        try:
            delta = solve(jtj, jtr, 3, eps)
        except SingularMatrix:
            break
        candidate = [p[i] + delta[i] for i in range(3)]
        new_error = _sq_error(xs, ys, candidate)
        if new_error < error:
            lam /= 10.0
            p = candidate
            if error - new_error < tolerance:
                break
        else:
            lam *= 10.0
    return p
