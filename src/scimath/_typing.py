"""
scimath Type Definitions and Input Coercion.

Public functions accept any of:

    - numpy arrays (any real dtype, any shape, flattened row-major)
    - arena ``Buffer`` objects
    - Python sequences (list, tuple)

and coerce them once, at the API boundary, into contiguous float64 arrays
that both implementation paths understand.

Example:
    >>> from scimath._typing import VectorInput, ensure_vector
    >>>
    >>> def my_func(data: VectorInput) -> float:
    ...     x = ensure_vector(data)
    ...     return float(x.sum())
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union, TYPE_CHECKING

import numpy as np

from .errors import DimensionMismatch, InvalidArgument

if TYPE_CHECKING:
    from .memory import Buffer


# =============================================================================
# Type Aliases
# =============================================================================

VectorInput = Union["np.ndarray", "Buffer", Sequence[float]]
"""Any 1-D (or flattenable) real input."""

MatrixInput = Union["np.ndarray", "Buffer", Sequence[float], Sequence[Sequence[float]]]
"""Flat row-major data, or a nested/2-D array that is flattened."""


# =============================================================================
# Coercion
# =============================================================================

def ensure_vector(
    vec: VectorInput,
    size: Optional[int] = None,
    name: str = "vector",
) -> np.ndarray:
    """Convert any vector input to a contiguous float64 ndarray.

    Arrays that already qualify are returned without copying.

    Args:
        vec: Input vector in any supported format.
        size: Expected size (for validation).
        name: Argument name used in error messages.

    Returns:
        1-D float64 array.

    Raises:
        DimensionMismatch: If size doesn't match expected.
    """
    if hasattr(vec, 'to_numpy') and not isinstance(vec, np.ndarray):
        vec = vec.to_numpy()
    arr = np.ascontiguousarray(vec, dtype=np.float64)
    if arr.ndim != 1:
        arr = arr.reshape(-1)

    if size is not None and arr.size != size:
        raise DimensionMismatch(f"{name} has {arr.size} elements, expected {size}")
    return arr


def ensure_matrix(data: MatrixInput, rows: int, cols: int, name: str = "matrix") -> np.ndarray:
    """Flatten a matrix input and check it holds ``rows * cols`` values.

    Raises:
        InvalidArgument: If a dimension is negative.
        DimensionMismatch: If the element count disagrees with the shape.
    """
    ensure_dimension(rows, f"{name} rows", minimum=0)
    ensure_dimension(cols, f"{name} cols", minimum=0)
    arr = ensure_vector(data, name=name)
    if arr.size != rows * cols:
        raise DimensionMismatch(
            f"{name} has {arr.size} elements, expected {rows} x {cols} = {rows * cols}"
        )
    return arr


def ensure_same_length(a: np.ndarray, b: np.ndarray, names: str = "inputs") -> None:
    """Raise DimensionMismatch unless ``a`` and ``b`` have equal length."""
    if a.size != b.size:
        raise DimensionMismatch(f"{names} differ in length ({a.size} vs {b.size})")


def ensure_dimension(value: Any, name: str, minimum: int = 1) -> int:
    """Validate an integer size argument.

    Raises:
        InvalidArgument: If not an integer or below ``minimum``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidArgument(f"{name} must be >= {minimum}, got {value}")
    return int(value)


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


__all__ = [
    "VectorInput",
    "MatrixInput",
    "ensure_vector",
    "ensure_matrix",
    "ensure_same_length",
    "ensure_dimension",
    "is_power_of_two",
]
