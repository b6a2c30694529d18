"""Accelerated FFT (pocketfft through scipy.fft)."""

import numpy as np
import scipy.fft

from .._dispatch import register_kernel


@register_kernel("fft")
def fft(re: np.ndarray, im: np.ndarray, inverse: bool = False):
    z = re + 1j * im
    out = scipy.fft.ifft(z) if inverse else scipy.fft.fft(z)
    return np.ascontiguousarray(out.real), np.ascontiguousarray(out.imag)


@register_kernel("rfft")
def rfft(data: np.ndarray):
    out = scipy.fft.rfft(data)
    return np.ascontiguousarray(out.real), np.ascontiguousarray(out.imag)
