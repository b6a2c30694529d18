"""Portable radix-2 FFT."""

import math
from typing import List, Sequence, Tuple

from .._dispatch import register_portable
from ._common import as_floats


def _bit_reverse(re: List[float], im: List[float]) -> None:
    n = len(re)
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j ^= bit
        if i < j:
            re[i], re[j] = re[j], re[i]
            im[i], im[j] = im[j], im[i]


def transform(re: List[float], im: List[float], inverse: bool = False) -> None:
    """In-place iterative Cooley-Tukey on power-of-two lists.

    Forward uses exp(-2*pi*i*k*n/N); the inverse flips the sign and
    scales by 1/N.
    """
    n = len(re)
    _bit_reverse(re, im)
    sign = 1.0 if inverse else -1.0
    step = 1
    while step < n:
        angle = sign * math.pi / step
        twiddles = [(math.cos(angle * k), math.sin(angle * k)) for k in range(step)]
        for start in range(0, n, step * 2):
            for k in range(step):
                wr, wi = twiddles[k]
                a = start + k
                b = a + step
                tr = wr * re[b] - wi * im[b]
                ti = wr * im[b] + wi * re[b]
                re[b] = re[a] - tr
                im[b] = im[a] - ti
                re[a] += tr
                im[a] += ti
        step <<= 1
    if inverse and n > 0:
        scale = 1.0 / n
        for i in range(n):
            re[i] *= scale
            im[i] *= scale


@register_portable("fft")
def fft(re: Sequence[float], im: Sequence[float],
        inverse: bool = False) -> Tuple[List[float], List[float]]:
    out_re = as_floats(re)
    out_im = as_floats(im)
    transform(out_re, out_im, inverse)
    return out_re, out_im


@register_portable("rfft")
def rfft(data: Sequence[float]) -> Tuple[List[float], List[float]]:
    """Spectrum bins 0..N/2 of a real power-of-two signal.

    The N reals are packed into N/2 complex samples, transformed at half
    size, then split into the even/odd spectra and recombined.
    """
    x = as_floats(data)
    n = len(x)
    if n == 1:
        return [x[0]], [0.0]
    half = n // 2
    zr = x[0::2]
    zi = x[1::2]
    transform(zr, zi)

    out_re = [0.0] * (half + 1)
    out_im = [0.0] * (half + 1)
    for k in range(half + 1):
        ar, ai = zr[k % half], zi[k % half]
        br, bi = zr[(half - k) % half], -zi[(half - k) % half]
        er, ei = (ar + br) * 0.5, (ai + bi) * 0.5
        orr, oi = (ai - bi) * 0.5, -(ar - br) * 0.5
        theta = -2.0 * math.pi * k / n
        wr, wi = math.cos(theta), math.sin(theta)
        out_re[k] = er + wr * orr - wi * oi
        out_im[k] = ei + wr * oi + wi * orr
    return out_re, out_im
