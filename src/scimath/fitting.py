"""
Curve Fitting.

Least-squares models returning a ``FitResult``: parameter vector plus the
coefficient of determination computed on the original (untransformed) scale.

Implemented Operations:
    - fit_linear: closed-form OLS from accumulated sums
    - fit_polynomial: normal equations solved with partial pivoting
    - fit_exponential, fit_logarithmic, fit_power: linearised fits that
      drop points outside the transform's domain
    - fit_gaussian: Levenberg-Marquardt over (amplitude, mean, sigma)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ._config import config
from ._dispatch import dispatch
from ._typing import VectorInput, ensure_dimension, ensure_same_length, ensure_vector
from .errors import InsufficientData, InvalidArgument


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True, eq=False)
class FitResult:
    """Fitted model parameters and goodness of fit.

    Attributes:
        parameters: Read-only parameter vector; layout depends on the model.
        r_squared: 1 - SS_res / SS_tot (0 when the data has no variance).
    """
    parameters: np.ndarray
    r_squared: float

    def __post_init__(self):
        params = np.array(self.parameters, dtype=np.float64)
        params.setflags(write=False)
        object.__setattr__(self, "parameters", params)
        object.__setattr__(self, "r_squared", float(self.r_squared))

    def __iter__(self):
        return iter(self.parameters.tolist())


@dataclass(frozen=True, eq=False)
class LinearFit(FitResult):
    """Straight line ``y = slope * x + intercept``; parameters are (slope, intercept)."""

    @property
    def slope(self) -> float:
        return float(self.parameters[0])

    @property
    def intercept(self) -> float:
        return float(self.parameters[1])


def r_squared(y: np.ndarray, predicted: np.ndarray) -> float:
    """Coefficient of determination (0 when ``y`` is constant)."""
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    if ss_tot <= 0.0:
        return 0.0
    ss_res = float(np.sum((y - predicted) ** 2))
    return 1.0 - ss_res / ss_tot


def _pair(x: VectorInput, y: VectorInput) -> Tuple[np.ndarray, np.ndarray]:
    xs = ensure_vector(x, name="x")
    ys = ensure_vector(y, name="y")
    ensure_same_length(xs, ys, "x and y")
    return xs, ys


def _require_points(n: int, needed: int, model: str) -> None:
    if n < needed:
        raise InsufficientData(f"{model} fit needs at least {needed} valid points, got {n}")


# =============================================================================
# Linear and Polynomial
# =============================================================================

def fit_linear(x: VectorInput, y: VectorInput) -> LinearFit:
    """Ordinary least-squares line through (x, y).

    Closed form from the mean-centred sums of squares and cross products.

    Raises:
        InsufficientData: If fewer than 2 points are given.
        SingularMatrix: If all x values are identical.
        DimensionMismatch: If x and y differ in length.

    Examples:
        >>> fit = fit_linear([0, 1, 2, 3], [1, 3, 5, 7])
        >>> fit.slope, fit.intercept, fit.r_squared
        (2.0, 1.0, 1.0)
    """
    xs, ys = _pair(x, y)
    _require_points(xs.size, 2, "Linear")
    slope, intercept, r2 = dispatch("fit_linear", xs.size, xs, ys,
                                    config.numeric.singular_epsilon)
    return LinearFit((slope, intercept), r2)


def fit_polynomial(x: VectorInput, y: VectorInput, degree: int) -> FitResult:
    """Polynomial least squares via the normal equations.

    Builds the (degree+1) x (degree+1) matrix of power sums of x and solves
    it with the partial-pivoting solver.

    Args:
        x, y: Samples.
        degree: Polynomial degree (>= 0).

    Returns:
        FitResult with ascending-degree coefficients.

    Raises:
        InsufficientData: If there are not more points than the degree.
        SingularMatrix: If the normal equations are singular.
    """
    degree = ensure_dimension(degree, "degree", minimum=0)
    xs, ys = _pair(x, y)
    _require_points(xs.size, degree + 1, f"Degree-{degree} polynomial")
    coeffs = np.asarray(
        dispatch("fit_polynomial", xs.size, xs, ys, degree, config.numeric.singular_epsilon),
        dtype=np.float64,
    )
    predicted = np.polynomial.polynomial.polyval(xs, coeffs)
    return FitResult(coeffs, r_squared(ys, predicted))


# =============================================================================
# Linearised Models
# =============================================================================

def _linearised(xs: np.ndarray, ys: np.ndarray, model: str):
    _require_points(xs.size, 2, model)
    return dispatch("fit_linear", xs.size, xs, ys, config.numeric.singular_epsilon)


def fit_exponential(x: VectorInput, y: VectorInput) -> FitResult:
    """Fit ``y = a * exp(b * x)``; parameters are (a, b).

    Points with y <= 0 are dropped before regressing ln(y) on x.

    Raises:
        InsufficientData: If fewer than 2 points have y > 0.
    """
    xs, ys = _pair(x, y)
    keep = ys > 0.0
    xs, ys = xs[keep], ys[keep]
    b, ln_a, _ = _linearised(xs, np.log(ys), "Exponential")
    a = float(np.exp(ln_a))
    return FitResult((a, b), r_squared(ys, a * np.exp(b * xs)))


def fit_logarithmic(x: VectorInput, y: VectorInput) -> FitResult:
    """Fit ``y = a + b * ln(x)``; parameters are (a, b).

    Points with x <= 0 are dropped before regressing y on ln(x).

    Raises:
        InsufficientData: If fewer than 2 points have x > 0.
    """
    xs, ys = _pair(x, y)
    keep = xs > 0.0
    xs, ys = xs[keep], ys[keep]
    b, a, _ = _linearised(np.log(xs), ys, "Logarithmic")
    return FitResult((a, b), r_squared(ys, a + b * np.log(xs)))


def fit_power(x: VectorInput, y: VectorInput) -> FitResult:
    """Fit ``y = a * x**b``; parameters are (a, b).

    Only points with x > 0 and y > 0 are used.

    Raises:
        InsufficientData: If fewer than 2 such points remain.
    """
    xs, ys = _pair(x, y)
    keep = (xs > 0.0) & (ys > 0.0)
    xs, ys = xs[keep], ys[keep]
    b, ln_a, _ = _linearised(np.log(xs), np.log(ys), "Power")
    a = float(np.exp(ln_a))
    return FitResult((a, b), r_squared(ys, a * xs ** b))


# =============================================================================
# Gaussian (Levenberg-Marquardt)
# =============================================================================

def gaussian(x: VectorInput, amplitude: float, mean: float, sigma: float) -> np.ndarray:
    """Evaluate ``amplitude * exp(-(x - mean)^2 / (2 sigma^2))`` (0 for sigma ~ 0)."""
    xs = ensure_vector(x, name="x")
    if abs(sigma) < 1e-12:
        return np.zeros_like(xs)
    return amplitude * np.exp(-((xs - mean) ** 2) / (2.0 * sigma * sigma))


def fit_gaussian(
    x: VectorInput,
    y: VectorInput,
    initial: Sequence[float],
    max_iterations: int = 20,
    tolerance: float = 1e-6,
) -> FitResult:
    """Fit a Gaussian peak by damped least squares.

    Each iteration solves ``(J^T J + lambda * diag(J^T J)) delta = J^T r``.
    A step is accepted only if it lowers the squared error, in which case
    lambda shrinks tenfold; otherwise lambda grows tenfold and the step is
    retried. Stops after ``max_iterations``, when an accepted step improves
    the error by less than ``tolerance``, or when the damped system is
    singular. Never raises on non-convergence.

    Args:
        x, y: Samples.
        initial: Starting (amplitude, mean, sigma).
        max_iterations: Iteration budget.
        tolerance: Minimum error reduction to keep iterating.

    Returns:
        FitResult with parameters (amplitude, mean, sigma).

    Raises:
        InvalidArgument: If ``initial`` does not hold three values.
        InsufficientData: If x is empty.
    """
    xs, ys = _pair(x, y)
    _require_points(xs.size, 1, "Gaussian")
    start = ensure_vector(initial, name="initial")
    if start.size != 3:
        raise InvalidArgument(f"initial must be (amplitude, mean, sigma), got {start.size} values")
    max_iterations = ensure_dimension(max_iterations, "max_iterations", minimum=0)
    params = np.asarray(
        dispatch("fit_gaussian", xs.size, xs, ys, start, max_iterations, tolerance,
                 config.numeric.singular_epsilon),
        dtype=np.float64,
    )
    return FitResult(params, r_squared(ys, gaussian(xs, *params)))


__all__ = [
    "FitResult",
    "LinearFit",
    "r_squared",
    "fit_linear",
    "fit_polynomial",
    "fit_exponential",
    "fit_logarithmic",
    "fit_power",
    "gaussian",
    "fit_gaussian",
]
