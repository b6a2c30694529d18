"""
Error handling for scimath.

Every failure raised by the engine is a ``SciMathError`` carrying a numeric
code. The concrete subclasses also derive from the closest builtin exception
so callers can catch them either way.
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

# Success
SCIMATH_OK = 0

# General errors (1-9)
SCIMATH_ERROR_UNKNOWN = 1
SCIMATH_ERROR_INTERNAL = 2

# Argument errors (10-19)
SCIMATH_ERROR_INVALID_ARGUMENT = 10
SCIMATH_ERROR_DIMENSION_MISMATCH = 11
SCIMATH_ERROR_INVALID_LENGTH = 12

# Memory errors (30-39)
SCIMATH_ERROR_INVALID_HANDLE = 35

# Numerical errors (50-59)
SCIMATH_ERROR_SINGULAR_MATRIX = 50
SCIMATH_ERROR_INSUFFICIENT_DATA = 55


_ERROR_MESSAGES = {
    SCIMATH_OK: "Success",
    SCIMATH_ERROR_UNKNOWN: "Unknown error",
    SCIMATH_ERROR_INTERNAL: "Internal error",
    SCIMATH_ERROR_INVALID_ARGUMENT: "Invalid argument",
    SCIMATH_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    SCIMATH_ERROR_INVALID_LENGTH: "Invalid length",
    SCIMATH_ERROR_INVALID_HANDLE: "Invalid handle",
    SCIMATH_ERROR_SINGULAR_MATRIX: "Singular matrix",
    SCIMATH_ERROR_INSUFFICIENT_DATA: "Insufficient data",
}


# =============================================================================
# Exception Classes
# =============================================================================

class SciMathError(Exception):
    """
    Base exception for all scimath errors.

    Attributes:
        code: Numeric error code (one of the ``SCIMATH_ERROR_*`` constants).
        message: Human readable detail.
    """

    code = SCIMATH_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        if code is not None:
            self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(self.code, f"Unknown error (code={self.code})")
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"scimath error {self.code}: {self.message}"

    @classmethod
    def from_code(cls, code: int, context: Optional[str] = None) -> "SciMathError":
        """
        Build the matching exception for an error code.

        Args:
            code: Error code
            context: Optional text appended to the default message

        Returns:
            Instance of the most specific registered subclass
        """
        exc_cls = _CODE_TO_CLASS.get(code, SciMathError)
        message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        if context:
            message = f"{message}: {context}"
        if exc_cls is SciMathError:
            return SciMathError(message, code=code)
        return exc_cls(message)


class InvalidHandle(SciMathError, KeyError):
    """Handle is unknown to the arena or was already released."""

    code = SCIMATH_ERROR_INVALID_HANDLE


class DimensionMismatch(SciMathError, ValueError):
    """Operand sizes are incompatible with the requested operation."""

    code = SCIMATH_ERROR_DIMENSION_MISMATCH


class InvalidLength(SciMathError, ValueError):
    """Sequence length violates a structural requirement (e.g. power of two)."""

    code = SCIMATH_ERROR_INVALID_LENGTH


class SingularMatrix(SciMathError, ArithmeticError):
    """No usable pivot was found while factorizing or inverting."""

    code = SCIMATH_ERROR_SINGULAR_MATRIX


class InsufficientData(SciMathError, ValueError):
    """Too few valid points remain to determine the requested model."""

    code = SCIMATH_ERROR_INSUFFICIENT_DATA


class InvalidArgument(SciMathError, ValueError):
    """A scalar argument is outside its admissible range."""

    code = SCIMATH_ERROR_INVALID_ARGUMENT


_CODE_TO_CLASS = {
    SCIMATH_ERROR_INVALID_HANDLE: InvalidHandle,
    SCIMATH_ERROR_DIMENSION_MISMATCH: DimensionMismatch,
    SCIMATH_ERROR_INVALID_LENGTH: InvalidLength,
    SCIMATH_ERROR_SINGULAR_MATRIX: SingularMatrix,
    SCIMATH_ERROR_INSUFFICIENT_DATA: InsufficientData,
    SCIMATH_ERROR_INVALID_ARGUMENT: InvalidArgument,
}


def error_message(code: int) -> str:
    """Default message for an error code."""
    return _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "SCIMATH_OK",
    "SCIMATH_ERROR_UNKNOWN",
    "SCIMATH_ERROR_INTERNAL",
    "SCIMATH_ERROR_INVALID_ARGUMENT",
    "SCIMATH_ERROR_DIMENSION_MISMATCH",
    "SCIMATH_ERROR_INVALID_LENGTH",
    "SCIMATH_ERROR_INVALID_HANDLE",
    "SCIMATH_ERROR_SINGULAR_MATRIX",
    "SCIMATH_ERROR_INSUFFICIENT_DATA",
    "SciMathError",
    "InvalidHandle",
    "DimensionMismatch",
    "InvalidLength",
    "SingularMatrix",
    "InsufficientData",
    "InvalidArgument",
    "error_message",
]
