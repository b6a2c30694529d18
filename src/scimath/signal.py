"""
Signal Processing.

Smoothing, filtering, peak picking and deconvolution over 1-D float signals.
All functions return new arrays of the input length unless noted.

Implemented Operations:
    - moving_average: centered window that shrinks at the boundaries
    - savitzky_golay: fixed coefficient table for windows 5, 7, 9, 11
    - detect_peaks: local maxima gated by threshold and prominence
    - butterworth_lowpass: 2nd-order IIR via the bilinear transform
    - deconvolve_richardson_lucy: fixed-iteration RL deconvolution
    - remove_baseline: polynomial background subtraction
    - estimate_snr, magnitude, interleave, deinterleave
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from . import fitting, poly
from ._config import config
from ._dispatch import dispatch
from ._typing import VectorInput, ensure_dimension, ensure_same_length, ensure_vector
from .errors import DimensionMismatch, InvalidArgument


# =============================================================================
# Smoothing
# =============================================================================

# window -> (integer coefficients, normalisation)
SAVITZKY_GOLAY_TABLE = {
    5: ((-3.0, 12.0, 17.0, 12.0, -3.0), 35.0),
    7: ((-2.0, 3.0, 6.0, 7.0, 6.0, 3.0, -2.0), 21.0),
    9: ((-21.0, 14.0, 39.0, 54.0, 59.0, 54.0, 39.0, 14.0, -21.0), 231.0),
    11: ((-36.0, 9.0, 44.0, 69.0, 84.0, 89.0, 84.0, 69.0, 44.0, 9.0, -36.0), 429.0),
}

# quadratic and cubic smoothing share the same kernels
SAVITZKY_GOLAY_DEGREES = (2, 3)


def moving_average(data: VectorInput, window: int) -> np.ndarray:
    """Centered moving average with boundary shrinkage.

    Output ``i`` is the mean of ``data[i - window//2 : i + window//2 + 1]``
    clipped to the signal, so edges average fewer samples instead of padding.
    A window of 1 or less returns a copy.
    """
    x = ensure_vector(data, name="data")
    window = ensure_dimension(window, "window", minimum=0)
    if window <= 1 or x.size == 0:
        return x.copy()
    return np.asarray(dispatch("moving_average", x.size, x, window), dtype=np.float64)


def savitzky_golay(data: VectorInput, window: int, degree: int = 2) -> np.ndarray:
    """Savitzky-Golay smoothing with precomputed coefficients.

    Supported windows are 5, 7, 9 and 11 with degree 2 or 3. Samples within
    ``window // 2`` of either end are copied unsmoothed. Any other window or
    degree, or a signal shorter than the window, is passed through unchanged.

    Examples:
        >>> y = savitzky_golay([10, 10, 10, 100, 10, 10, 10], 5)
        >>> 10 < y[3] < 100
        True
    """
    x = ensure_vector(data, name="data")
    entry = SAVITZKY_GOLAY_TABLE.get(window)
    if entry is None or degree not in SAVITZKY_GOLAY_DEGREES or x.size < window:
        return x.copy()
    coeffs, norm = entry
    return np.asarray(
        dispatch("savitzky_golay", x.size, x, np.array(coeffs), norm), dtype=np.float64
    )


# =============================================================================
# Peaks
# =============================================================================

def detect_peaks(data: VectorInput, threshold: float, prominence: float = 0.0) -> np.ndarray:
    """Indices of strict local maxima above ``threshold``.

    A sample is a candidate when ``y[i] > threshold``, ``y[i] > y[i-1]`` and
    ``y[i] > y[i+1]``; the first and last samples are never peaks. With a
    positive ``prominence``, candidates whose drop to the higher of the two
    surrounding minima (searched outwards up to strictly higher terrain or
    the signal edge) is below ``prominence`` are discarded.

    Returns:
        uint32 array of ascending indices.

    Examples:
        >>> detect_peaks([0, 1, 3, 1, 0.5, 2, 0], 1.5)
        array([2, 5], dtype=uint32)
    """
    x = ensure_vector(data, name="data")
    peaks = dispatch("detect_peaks", x.size, x, float(threshold), float(prominence))
    return np.asarray(peaks, dtype=np.uint32)


# =============================================================================
# Filtering
# =============================================================================

def butterworth_coefficients(cutoff: float, sampling_rate: float) -> Tuple[np.ndarray, np.ndarray]:
    """Second-order low-pass (b, a) from the tangent substitution.

    ``ita = tan(pi * cutoff / fs)`` and ``q = sqrt(2)``; ``a[0]`` is 1.

    Raises:
        InvalidArgument: Unless ``0 < cutoff < sampling_rate / 2``.
    """
    if sampling_rate <= 0.0:
        raise InvalidArgument(f"sampling_rate must be positive, got {sampling_rate}")
    if not 0.0 < cutoff < sampling_rate / 2.0:
        raise InvalidArgument(
            f"cutoff must lie in (0, {sampling_rate / 2.0}) for fs={sampling_rate}, got {cutoff}"
        )
    ita = math.tan(math.pi * cutoff / sampling_rate)
    q = math.sqrt(2.0)
    denom = 1.0 + q * ita + ita * ita
    b0 = ita * ita / denom
    a1 = 2.0 * (ita * ita - 1.0) / denom
    a2 = (1.0 - q * ita + ita * ita) / denom
    return np.array([b0, 2.0 * b0, b0]), np.array([1.0, a1, a2])


def butterworth_lowpass(data: VectorInput, cutoff: float, sampling_rate: float) -> np.ndarray:
    """Apply a 2nd-order Butterworth low-pass filter, sample by sample.

    Runs ``y[n] = b0 x[n] + b1 x[n-1] + b2 x[n-2] - a1 y[n-1] - a2 y[n-2]``
    from a zero initial state.
    """
    x = ensure_vector(data, name="data")
    b, a = butterworth_coefficients(float(cutoff), float(sampling_rate))
    return np.asarray(dispatch("butterworth", x.size, x, b, a), dtype=np.float64)


# =============================================================================
# Deconvolution
# =============================================================================

def deconvolve_richardson_lucy(data: VectorInput, kernel: VectorInput,
                               iterations: int) -> np.ndarray:
    """Richardson-Lucy deconvolution.

    Starting from an all-ones estimate, each iteration blurs the estimate
    with ``kernel``, divides the data by it (the ratio is 0 wherever the
    blurred estimate is at most 1e-12), correlates the ratio with the
    flipped kernel and multiplies the estimate by the result. The
    iteration count is the only stopping criterion.

    Raises:
        InvalidArgument: If the kernel is empty or iterations is negative.
    """
    x = ensure_vector(data, name="data")
    k = ensure_vector(kernel, name="kernel")
    if k.size == 0:
        raise InvalidArgument("Deconvolution kernel must not be empty")
    iterations = ensure_dimension(iterations, "iterations", minimum=0)
    out = dispatch("deconvolve", x.size, x, k, iterations, config.numeric.division_epsilon)
    return np.asarray(out, dtype=np.float64)


# =============================================================================
# Baseline
# =============================================================================

def remove_baseline(data: VectorInput, x: Optional[VectorInput] = None, order: int = 2,
                    iterations: int = 0) -> np.ndarray:
    """Subtract a polynomial background.

    With ``iterations == 0`` the polynomial fitted to (x, data) is
    subtracted directly. Otherwise each pass fits the working copy and pulls
    every point that lies above the fit down onto it, so peaks stop
    dragging the background up; the final fit is subtracted from the
    original data.

    Args:
        data: Signal.
        x: Sample positions (0..n-1 when omitted).
        order: Polynomial degree.
        iterations: Number of clipping passes.

    Raises:
        InsufficientData: If the signal has no more points than ``order``.
        SingularMatrix: If the polynomial fit is singular.
    """
    y = ensure_vector(data, name="data")
    xs = np.arange(y.size, dtype=np.float64) if x is None else ensure_vector(x, name="x")
    ensure_same_length(xs, y, "x and data")
    iterations = ensure_dimension(iterations, "iterations", minimum=0)

    working = y.copy()
    for _ in range(iterations):
        fit = poly.poly_eval(fitting.fit_polynomial(xs, working, order).parameters, xs)
        working = np.where(y > fit, fit, y)
    baseline = poly.poly_eval(fitting.fit_polynomial(xs, working, order).parameters, xs)
    return y - baseline


# =============================================================================
# Diagnostics and Complex Helpers
# =============================================================================

def estimate_snr(data: VectorInput) -> float:
    """Signal-to-noise ratio in dB.

    Signal power is the population variance; noise sigma is the median
    absolute first difference divided by 0.6745. Returns 100 when the noise
    variance is below 1e-18 and 0 for fewer than 2 samples.
    """
    x = ensure_vector(data, name="data")
    return float(dispatch("snr", x.size, x))


def magnitude(interleaved: VectorInput) -> np.ndarray:
    """|z| for each pair of an interleaved ``[re0, im0, re1, im1, ...]`` array.

    Raises:
        DimensionMismatch: If the length is odd.
    """
    z = ensure_vector(interleaved, name="interleaved")
    if z.size % 2:
        raise DimensionMismatch(f"Interleaved complex data needs an even length, got {z.size}")
    return np.asarray(dispatch("magnitude", z.size, z), dtype=np.float64)


def interleave(re: VectorInput, im: VectorInput) -> np.ndarray:
    """Pack split real/imaginary arrays into ``[re0, im0, re1, im1, ...]``."""
    r = ensure_vector(re, name="re")
    i = ensure_vector(im, name="im")
    ensure_same_length(r, i, "real and imaginary parts")
    out = np.empty(r.size * 2)
    out[0::2] = r
    out[1::2] = i
    return out


def deinterleave(z: VectorInput) -> Tuple[np.ndarray, np.ndarray]:
    """Split ``[re0, im0, ...]`` into (re, im)."""
    flat = ensure_vector(z, name="z")
    if flat.size % 2:
        raise DimensionMismatch(f"Interleaved complex data needs an even length, got {flat.size}")
    return flat[0::2].copy(), flat[1::2].copy()


__all__ = [
    "SAVITZKY_GOLAY_TABLE",
    "moving_average",
    "savitzky_golay",
    "detect_peaks",
    "butterworth_coefficients",
    "butterworth_lowpass",
    "deconvolve_richardson_lucy",
    "remove_baseline",
    "estimate_snr",
    "magnitude",
    "interleave",
    "deinterleave",
]
