"""Helpers shared by the portable implementations."""

from typing import List, Sequence


def as_floats(values: Sequence[float]) -> List[float]:
    """Plain list of Python floats."""
    if hasattr(values, 'tolist'):
        return [float(v) for v in values.tolist()]
    return [float(v) for v in values]


def horner(coeffs: Sequence[float], x: float) -> float:
    """Evaluate an ascending-degree polynomial at ``x``."""
    acc = 0.0
    for c in reversed(coeffs):
        acc = acc * x + c
    return acc
