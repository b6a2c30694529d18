"""
Tests for the error taxonomy.
"""

import pytest

from scimath import errors
from scimath.errors import (
    DimensionMismatch,
    InsufficientData,
    InvalidArgument,
    InvalidHandle,
    InvalidLength,
    SciMathError,
    SingularMatrix,
)


class TestErrorCodes:
    """Test codes and messages."""

    @pytest.mark.parametrize("exc_cls, code", [
        (InvalidHandle, errors.SCIMATH_ERROR_INVALID_HANDLE),
        (DimensionMismatch, errors.SCIMATH_ERROR_DIMENSION_MISMATCH),
        (InvalidLength, errors.SCIMATH_ERROR_INVALID_LENGTH),
        (SingularMatrix, errors.SCIMATH_ERROR_SINGULAR_MATRIX),
        (InsufficientData, errors.SCIMATH_ERROR_INSUFFICIENT_DATA),
        (InvalidArgument, errors.SCIMATH_ERROR_INVALID_ARGUMENT),
    ])
    def test_class_codes(self, exc_cls, code):
        """Test every subclass carries its code and round-trips through from_code."""
        assert exc_cls().code == code
        assert type(SciMathError.from_code(code)) is exc_cls

    def test_default_message(self):
        """Test messages default to the code's description."""
        exc = SingularMatrix()
        assert exc.message == "Singular matrix"
        assert str(exc) == "scimath error 50: Singular matrix"

    def test_custom_message(self):
        """Test explicit messages are kept."""
        exc = DimensionMismatch("3 vs 4")
        assert str(exc) == "scimath error 11: 3 vs 4"

    def test_from_code_context(self):
        """Test context is appended to the default message."""
        exc = SciMathError.from_code(errors.SCIMATH_ERROR_INVALID_LENGTH, "n=6")
        assert exc.message == "Invalid length: n=6"

    def test_from_unknown_code(self):
        """Test unknown codes produce the base class."""
        exc = SciMathError.from_code(999)
        assert type(exc) is SciMathError
        assert exc.code == 999
        assert "999" in exc.message

    def test_error_message(self):
        """Test the code lookup helper."""
        assert errors.error_message(errors.SCIMATH_OK) == "Success"
        assert "77" in errors.error_message(77)


class TestErrorHierarchy:
    """Test builtin exception compatibility."""

    @pytest.mark.parametrize("exc_cls, builtin", [
        (InvalidHandle, KeyError),
        (DimensionMismatch, ValueError),
        (InvalidLength, ValueError),
        (SingularMatrix, ArithmeticError),
        (InsufficientData, ValueError),
        (InvalidArgument, ValueError),
    ])
    def test_builtin_bases(self, exc_cls, builtin):
        """Test each error can be caught as its builtin base and as SciMathError."""
        with pytest.raises(builtin):
            raise exc_cls("boom")
        with pytest.raises(SciMathError):
            raise exc_cls("boom")

    def test_invalid_handle_str(self):
        """Test KeyError's repr-style str is not used."""
        assert str(InvalidHandle("gone")) == "scimath error 35: gone"
