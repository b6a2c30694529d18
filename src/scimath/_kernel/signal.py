"""Accelerated signal processing kernels."""

import numpy as np
import scipy.signal

from .._dispatch import register_kernel


@register_kernel("moving_average")
def moving_average(data: np.ndarray, window: int) -> np.ndarray:
    n = data.size
    half = window // 2
    prefix = np.concatenate(([0.0], np.cumsum(data)))
    idx = np.arange(n)
    lo = np.maximum(idx - half, 0)
    hi = np.minimum(idx + half, n - 1) + 1
    return (prefix[hi] - prefix[lo]) / (hi - lo)


@register_kernel("savitzky_golay")
def savitzky_golay(data: np.ndarray, coeffs: np.ndarray, norm: float) -> np.ndarray:
    half = coeffs.size // 2
    out = data.copy()
    # symmetric kernel, so convolution equals correlation
    out[half:data.size - half] = np.convolve(data, coeffs, mode='valid') * (1.0 / norm)
    return out


@register_kernel("detect_peaks")
def detect_peaks(data: np.ndarray, threshold: float, prominence: float) -> np.ndarray:
    if data.size < 3:
        return np.empty(0, dtype=np.intp)
    mid = data[1:-1]
    mask = (mid > threshold) & (mid > data[:-2]) & (mid > data[2:])
    peaks = np.flatnonzero(mask) + 1
    if prominence <= 0.0 or peaks.size == 0:
        return peaks
    prominences, _, _ = scipy.signal.peak_prominences(data, peaks)
    return peaks[prominences >= prominence]


@register_kernel("butterworth")
def biquad(data: np.ndarray, b: np.ndarray, a: np.ndarray) -> np.ndarray:
    return scipy.signal.lfilter(b, a, data)


@register_kernel("deconvolve")
def deconvolve(data: np.ndarray, kernel: np.ndarray, iterations: int,
               eps: float = 1e-12) -> np.ndarray:
    """Richardson-Lucy deconvolution starting from an all-ones estimate."""
    n = data.size
    kn = kernel.size
    start = kn - 1 - kn // 2
    reversed_kernel = kernel[::-1]
    current = np.ones(n)
    for _ in range(iterations):
        blurred = np.convolve(current, reversed_kernel)[start:start + n]
        safe = blurred > eps
        ratio = np.zeros(n)
        np.divide(data, blurred, out=ratio, where=safe)
        correction = np.convolve(ratio, kernel)[start:start + n]
        current = current * correction
    return current


@register_kernel("magnitude")
def magnitude(interleaved: np.ndarray) -> np.ndarray:
    pairs = interleaved[:interleaved.size // 2 * 2].reshape(-1, 2)
    return np.hypot(pairs[:, 0], pairs[:, 1])
