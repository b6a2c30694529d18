"""Accelerated least-squares fitting."""

import numpy as np

from .._dispatch import register_kernel
from ..errors import SingularMatrix
from .linalg import solve


@register_kernel("fit_linear")
def fit_linear(x: np.ndarray, y: np.ndarray, eps: float = 1e-12):
    """Closed-form OLS line. Returns (slope, intercept, r_squared)."""
    n = x.size
    x_mean = float(np.mean(x))
    y_mean = float(np.mean(y))
    dx = x - x_mean
    dy = y - y_mean
    sxx = float(np.dot(dx, dx))
    if sxx <= n * (eps * float(np.max(np.abs(x)))) ** 2:
        raise SingularMatrix("x values have no spread; slope is undefined")
    slope = float(np.dot(dx, dy)) / sxx
    intercept = y_mean - slope * x_mean

    ss_tot = float(np.dot(dy, dy))
    ss_res = float(np.sum((y - (slope * x + intercept)) ** 2))
    r2 = 1.0 - ss_res / ss_tot if ss_tot > 0.0 else 0.0
    return slope, intercept, r2


@register_kernel("fit_polynomial")
def fit_polynomial(x: np.ndarray, y: np.ndarray, degree: int,
                   eps: float = 1e-12) -> np.ndarray:
    """Normal equations (V^T V) c = V^T y on the raw Vandermonde matrix."""
    vander = np.vander(x, degree + 1, increasing=True)
    normal = vander.T @ vander
    rhs = vander.T @ y
    return solve(normal.ravel(), rhs, degree + 1, eps)


def _gaussian(x: np.ndarray, p: np.ndarray) -> np.ndarray:
    if abs(p[2]) < 1e-12:
        return np.zeros_like(x)
    return p[0] * np.exp(-((x - p[1]) ** 2) / (2.0 * p[2] * p[2]))


@register_kernel("fit_gaussian")
def fit_gaussian(x: np.ndarray, y: np.ndarray, initial: np.ndarray,
                 max_iterations: int = 20, tolerance: float = 1e-6,
                 eps: float = 1e-12) -> np.ndarray:
    """Levenberg-Marquardt over (amplitude, mean, sigma)."""
    p = np.array(initial, dtype=np.float64)
    lam = 1e-3

    for _ in range(max_iterations):
        amp, mu, sigma = p
        if abs(sigma) >= 1e-12:
            d = x - mu
            s2 = sigma * sigma
            e = np.exp(-(d * d) / (2.0 * s2))
            r = y - amp * e
            error = float(np.dot(r, r))
            jac = np.column_stack((e, amp * e * d / s2, amp * e * d * d / (s2 * sigma)))
            jtj = jac.T @ jac
            jtr = jac.T @ r
        else:
            error = 0.0
            jtj = np.zeros((3, 3))
            jtr = np.zeros(3)
        jtj[np.diag_indices(3)] *= 1.0 + lam

        try:
            delta = solve(jtj.ravel(), jtr, 3, eps)
        except SingularMatrix:
            break
        candidate = p + delta
        residual = y - _gaussian(x, candidate)
        new_error = float(np.dot(residual, residual))
        if new_error < error:
            lam /= 10.0
            p = candidate
            if error - new_error < tolerance:
                break
        else:
            lam *= 10.0
    return p
