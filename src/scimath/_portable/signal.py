"""Portable signal processing kernels."""

import math
from typing import List, Sequence

from .._dispatch import register_portable
from ._common import as_floats


@register_portable("moving_average")
def moving_average(data: Sequence[float], window: int) -> List[float]:
    """Centered mean over [i - w//2, i + w//2], clipped at the edges."""
    x = as_floats(data)
    n = len(x)
    half = window // 2
    prefix = [0.0] * (n + 1)
    for i, v in enumerate(x):
        prefix[i + 1] = prefix[i] + v
    out = [0.0] * n
    for i in range(n):
        lo = max(0, i - half)
        hi = min(n - 1, i + half) + 1
        out[i] = (prefix[hi] - prefix[lo]) / (hi - lo)
    return out


@register_portable("savitzky_golay")
def savitzky_golay(data: Sequence[float], coeffs: Sequence[float],
                   norm: float) -> List[float]:
    """Apply a symmetric smoothing kernel; the outer window//2 samples are copied."""
    x = as_floats(data)
    c = as_floats(coeffs)
    n = len(x)
    window = len(c)
    half = window // 2
    out = list(x)
    inv = 1.0 / norm
    for i in range(half, n - half):
        acc = 0.0
        base = i - half
        for j in range(window):
            acc += x[base + j] * c[j]
        out[i] = acc * inv
    return out


@register_portable("detect_peaks")
def detect_peaks(data: Sequence[float], threshold: float,
                 prominence: float) -> List[int]:
    x = as_floats(data)
    n = len(x)
    peaks = []
    for i in range(1, n - 1):
        val = x[i]
        if val > threshold and val > x[i - 1] and val > x[i + 1]:
            peaks.append(i)

    if prominence <= 0.0:
        return peaks

    kept = []
    for i in peaks:
        val = x[i]
        left_min = val
        j = i - 1
        while j >= 0 and x[j] <= val:
            if x[j] < left_min:
                left_min = x[j]
            j -= 1
        right_min = val
        j = i + 1
        while j < n and x[j] <= val:
            if x[j] < right_min:
                right_min = x[j]
            j += 1
        if val - max(left_min, right_min) >= prominence:
            kept.append(i)
    return kept


@register_portable("butterworth")
def biquad(data: Sequence[float], b: Sequence[float], a: Sequence[float]) -> List[float]:
    """Direct-form I second-order section with zero initial state.

    ``a`` is normalised so that a[0] == 1.
    """
    x = as_floats(data)
    b0, b1, b2 = as_floats(b)
    _, a1, a2 = as_floats(a)
    out = [0.0] * len(x)
    x1 = x2 = y1 = y2 = 0.0
    for i, x0 in enumerate(x):
        y0 = b0 * x0 + b1 * x1 + b2 * x2 - a1 * y1 - a2 * y2
        out[i] = y0
        x2, x1 = x1, x0
        y2, y1 = y1, y0
    return out


def _centered_correlate(x: List[float], k: List[float], half: int) -> List[float]:
    n = len(x)
    kn = len(k)
    out = [0.0] * n
    for i in range(n):
        j_start = half - i if i < half else 0
        j_end = kn if i + half < n else n - i + half
        acc = 0.0
        for j in range(j_start, j_end):
            acc += x[i + j - half] * k[j]
        out[i] = acc
    return out


@register_portable("deconvolve")
def deconvolve(data: Sequence[float], kernel: Sequence[float], iterations: int,
               eps: float = 1e-12) -> List[float]:
    """Richardson-Lucy deconvolution starting from an all-ones estimate."""
    d = as_floats(data)
    k = as_floats(kernel)
    n = len(d)
    half = len(k) // 2
    flipped = k[::-1]
    current = [1.0] * n
    for _ in range(iterations):
        blurred = _centered_correlate(current, k, half)
        ratio = [d[i] / blurred[i] if blurred[i] > eps else 0.0 for i in range(n)]
        correction = _centered_correlate(ratio, flipped, half)
        current = [current[i] * correction[i] for i in range(n)]
    return current


@register_portable("magnitude")
def magnitude(interleaved: Sequence[float]) -> List[float]:
    z = as_floats(interleaved)
    return [math.hypot(z[i], z[i + 1]) for i in range(0, len(z) - 1, 2)]
