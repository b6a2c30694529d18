"""
Fast Fourier Transform.

Radix-2 transforms over split real/imaginary arrays. The forward transform
uses the exp(-2*pi*i*k*n/N) convention; the inverse flips the rotation sign
and divides by N, so ``ifft(*fft(re, im))`` reproduces the input.

Lengths must be powers of two (1 included).
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ._dispatch import dispatch
from ._typing import VectorInput, ensure_same_length, ensure_vector, is_power_of_two
from .errors import InvalidLength

ComplexPair = Tuple[np.ndarray, np.ndarray]


def _check_length(n: int) -> None:
    if not is_power_of_two(n):
        raise InvalidLength(f"FFT length must be a power of two, got {n}")


def fft(re: VectorInput, im: Optional[VectorInput] = None, inverse: bool = False) -> ComplexPair:
    """Transform a complex sequence given as (re, im).

    Args:
        re: Real parts.
        im: Imaginary parts (zeros when omitted).
        inverse: Run the inverse transform, including the 1/N scaling.

    Returns:
        (re, im) of the spectrum as new float64 arrays.

    Raises:
        InvalidLength: If the length is not a power of two.
        DimensionMismatch: If ``re`` and ``im`` differ in length.

    Examples:
        >>> fft([1.0, 0.0, 0.0, 0.0])[0]
        array([1., 1., 1., 1.])
    """
    x_re = ensure_vector(re, name="re")
    x_im = np.zeros_like(x_re) if im is None else ensure_vector(im, name="im")
    ensure_same_length(x_re, x_im, "real and imaginary parts")
    _check_length(x_re.size)
    out_re, out_im = dispatch("fft", x_re.size, x_re, x_im, inverse)
    return np.asarray(out_re, dtype=np.float64), np.asarray(out_im, dtype=np.float64)


def ifft(re: VectorInput, im: Optional[VectorInput] = None) -> ComplexPair:
    """Inverse transform; shorthand for ``fft(re, im, inverse=True)``."""
    return fft(re, im, inverse=True)


def fft_inplace(re: np.ndarray, im: np.ndarray, inverse: bool = False) -> None:
    """Transform two float arrays in place (e.g. arena views).

    Raises:
        InvalidLength: If the length is not a power of two.
        DimensionMismatch: If the arrays differ in length.
    """
    out_re, out_im = fft(re, im, inverse)
    re[:] = out_re
    im[:] = out_im


def rfft(data: VectorInput) -> ComplexPair:
    """Spectrum of a real signal, bins 0..N/2 inclusive.

    N reals are packed into N/2 complex samples, transformed at half size,
    then unpacked, halving the work of a full complex transform.

    Raises:
        InvalidLength: If the length is not a power of two.
    """
    x = ensure_vector(data, name="data")
    _check_length(x.size)
    out_re, out_im = dispatch("rfft", x.size, x)
    return np.asarray(out_re, dtype=np.float64), np.asarray(out_im, dtype=np.float64)


__all__ = [
    "fft",
    "ifft",
    "fft_inplace",
    "rfft",
]
