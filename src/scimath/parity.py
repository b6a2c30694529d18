"""
Parity Harness.

Runs a public operation once on each implementation path and checks that
the two results agree within tolerance. This is the regression gate for the
dispatcher: any operation whose paths drift apart is a bug in one of them.

Example:
    >>> from scimath import parity, stats
    >>> parity.compare(stats.mean, [1.0, 2.0, 3.0]).passed
    True

Notes:
    Stochastic operations must receive an integer seed rather than a
    ``Generator``, so each path starts from the same random state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from ._dispatch import Path, forced
from .errors import SciMathError, SCIMATH_ERROR_INTERNAL
from .fitting import FitResult

logger = logging.getLogger("scimath.parity")


# Default (rtol, atol) per operation name; tighter for deterministic algorithms.
DEFAULT_TOLERANCES: Dict[str, Tuple[float, float]] = {
    "fit_gaussian": (1e-6, 1e-8),
    "nelder_mead": (1e-6, 1e-8),
    "deconvolve_richardson_lucy": (1e-7, 1e-9),
    "butterworth_lowpass": (1e-9, 1e-9),
    "least_squares": (1e-8, 1e-9),
}
_FALLBACK_TOLERANCE = (1e-9, 1e-9)


class ParityError(SciMathError, AssertionError):
    """Accelerated and portable results disagree."""

    code = SCIMATH_ERROR_INTERNAL


@dataclass
class ParityReport:
    """Outcome of running one call on both paths."""
    operation: str
    passed: bool
    max_abs_diff: float
    rtol: float
    atol: float
    accelerated: Any = field(default=None, repr=False)
    portable: Any = field(default=None, repr=False)
    error: Optional[str] = None


def _flatten(result: Any) -> np.ndarray:
    if isinstance(result, FitResult):
        return np.concatenate((result.parameters, [result.r_squared]))
    if isinstance(result, (tuple, list)):
        parts = [_flatten(r) for r in result]
        return np.concatenate(parts) if parts else np.empty(0)
    return np.atleast_1d(np.asarray(result, dtype=np.float64)).ravel()


def _run(path: Path, func: Callable, args: tuple, kwargs: dict):
    with forced(path):
        try:
            return func(*args, **kwargs), None
        except SciMathError as exc:
            return None, exc


def compare(func: Callable, *args, rtol: Optional[float] = None,
            atol: Optional[float] = None, **kwargs) -> ParityReport:
    """Run ``func(*args, **kwargs)`` on both paths and compare.

    Two runs that raise the same scimath error type count as agreeing.

    Args:
        func: Public scimath function.
        rtol, atol: Tolerances; defaults come from ``DEFAULT_TOLERANCES``.

    Returns:
        ParityReport
    """
    name = getattr(func, "__name__", repr(func))
    default_rtol, default_atol = DEFAULT_TOLERANCES.get(name, _FALLBACK_TOLERANCE)
    rtol = default_rtol if rtol is None else rtol
    atol = default_atol if atol is None else atol

    fast, fast_err = _run(Path.ACCELERATED, func, args, kwargs)
    slow, slow_err = _run(Path.PORTABLE, func, args, kwargs)

    if fast_err is not None or slow_err is not None:
        same = type(fast_err) is type(slow_err)
        detail = f"accelerated={fast_err!r}, portable={slow_err!r}"
        return ParityReport(name, same, 0.0 if same else float("inf"), rtol, atol,
                            fast, slow, error=detail)

    a = _flatten(fast)
    b = _flatten(slow)
    if a.shape != b.shape:
        return ParityReport(name, False, float("inf"), rtol, atol, fast, slow,
                            error=f"shape {a.shape} vs {b.shape}")
    passed = bool(np.allclose(a, b, rtol=rtol, atol=atol, equal_nan=True))
    if a.size:
        diff = np.abs(a - b)
        diff = diff[~np.isnan(diff)]
        max_diff = float(diff.max()) if diff.size else 0.0
    else:
        max_diff = 0.0
    return ParityReport(name, passed, max_diff, rtol, atol, fast, slow)


class ParityHarness:
    """
    Batch parity checks over random test vectors.

    Example:
        >>> harness = ParityHarness(seed=7)
        >>> reports = harness.run_random(stats.mean, count=50)
        >>> harness.failures()
        []
    """

    def __init__(self, seed: Optional[int] = None, rtol: Optional[float] = None,
                 atol: Optional[float] = None):
        self.rng = np.random.default_rng(seed)
        self.rtol = rtol
        self.atol = atol
        self.reports: List[ParityReport] = []

    def check(self, func: Callable, *args, **kwargs) -> ParityReport:
        report = compare(func, *args, rtol=self.rtol, atol=self.atol, **kwargs)
        self.reports.append(report)
        if not report.passed:
            logger.warning("Parity mismatch in %s: max diff %.3e (%s)",
                           report.operation, report.max_abs_diff, report.error or "values")
        return report

    def assert_parity(self, func: Callable, *args, **kwargs) -> ParityReport:
        """Like ``check`` but raises ParityError on mismatch."""
        report = self.check(func, *args, **kwargs)
        if not report.passed:
            raise ParityError(
                f"{report.operation}: paths disagree (max diff {report.max_abs_diff:.3e}, "
                f"rtol={report.rtol:g}, atol={report.atol:g})"
            )
        return report

    def run_random(self, func: Callable, count: int = 50, min_size: int = 2,
                   max_size: int = 2048,
                   make_args: Optional[Callable[[np.random.Generator, int], tuple]] = None
                   ) -> List[ParityReport]:
        """Check ``func`` on ``count`` random inputs of varying length.

        Args:
            func: Public scimath function.
            count: Number of random cases.
            min_size, max_size: Inclusive length range.
            make_args: ``(rng, n) -> args``; defaults to one standard normal
                vector of length n.
        """
        reports = []
        for _ in range(count):
            n = int(self.rng.integers(min_size, max_size + 1))
            args = make_args(self.rng, n) if make_args else (self.rng.standard_normal(n),)
            reports.append(self.check(func, *args))
        return reports

    def failures(self) -> List[ParityReport]:
        return [r for r in self.reports if not r.passed]

    def summary(self) -> Dict[str, int]:
        failed = len(self.failures())
        return {"checked": len(self.reports), "passed": len(self.reports) - failed,
                "failed": failed}


__all__ = [
    "DEFAULT_TOLERANCES",
    "ParityError",
    "ParityReport",
    "compare",
    "ParityHarness",
]
