"""
Engine Facade.

Handle-based API over the arena and the algorithm suite. Callers allocate
vectors, fill them, and invoke operations by handle; results are written
into output handles in place or returned as copies.

Example:
    >>> from scimath import Engine
    >>> eng = Engine()
    >>> re = eng.load([1.0, 0.0, 0.0, 0.0])
    >>> im = eng.create_vector(4)
    >>> eng.fft(re, im)
    >>> eng.read(re)
    array([1., 1., 1., 1.])
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from . import calculus, fft, fitting, linalg, optimize, signal, stats
from ._kernel import init_thread_pool
from .fitting import FitResult, LinearFit
from .memory import PointerView, VectorArena, VectorHandle
from .optimize import Objective, RandomSource


class Engine:
    """
    Stateful compute engine addressing arena buffers by handle.

    Attributes:
        arena: The owning ``VectorArena``.

    Notes:
        Not thread-safe for concurrent mutation of the same handle.
    """

    def __init__(self, arena: Optional[VectorArena] = None):
        self.arena = arena if arena is not None else VectorArena()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @staticmethod
    def init_thread_pool(num_threads: Optional[int] = None) -> int:
        """Explicit one-time thread pool setup; returns the worker count."""
        return init_thread_pool(num_threads)

    # -------------------------------------------------------------------------
    # Memory
    # -------------------------------------------------------------------------

    def create_vector(self, size: int, kind: str = 'float64') -> VectorHandle:
        return self.arena.allocate(size, kind)

    def create_batch(self, count: int, size: int, kind: str = 'float64') -> List[VectorHandle]:
        return self.arena.allocate_batch(count, size, kind)

    def load(self, values: Sequence[float], kind: str = 'float64') -> VectorHandle:
        """Allocate a vector holding a copy of ``values``."""
        return self.arena.from_array(values, kind)

    def load_bytes(self, raw: Any, kind: str = 'float64') -> VectorHandle:
        """Allocate a vector straight from a raw byte buffer."""
        return self.arena.from_bytes(raw, kind)

    def get_pointer(self, handle: VectorHandle) -> Tuple[int, int]:
        """(address, length) of a live vector.

        Raises:
            InvalidHandle: If the handle is unknown or released.
        """
        return self.arena.resolve(handle).as_tuple()

    def pointer_view(self, handle: VectorHandle) -> PointerView:
        """Epoch-checked pointer view of a live vector."""
        return self.arena.resolve(handle)

    def read(self, handle: VectorHandle) -> np.ndarray:
        return self.arena.read(handle)

    def write(self, handle: VectorHandle, values: Sequence[float], offset: int = 0) -> None:
        self.arena.write(handle, values, offset)

    def release(self, handle: VectorHandle) -> None:
        self.arena.release(handle)

    def set_column(self, name: str, handle: VectorHandle) -> None:
        self.arena.set_column(name, handle)

    def get_column_id(self, name: str) -> VectorHandle:
        return self.arena.column(name)

    def _view(self, handle: VectorHandle) -> np.ndarray:
        return self.arena.view(handle)

    def _store(self, handle_out: VectorHandle, values: np.ndarray) -> None:
        self.arena.write(handle_out, values)

    def _new(self, values: np.ndarray) -> VectorHandle:
        return self.arena.from_array(values)

    # -------------------------------------------------------------------------
    # FFT
    # -------------------------------------------------------------------------

    def fft(self, handle_re: VectorHandle, handle_im: VectorHandle, inverse: bool = False) -> None:
        """In-place complex FFT of the (re, im) vector pair.

        Raises:
            InvalidLength: If the length is not a power of two.
        """
        fft.fft_inplace(self._view(handle_re), self._view(handle_im), inverse)

    def rfft(self, handle_in: VectorHandle, handle_re: VectorHandle,
             handle_im: VectorHandle) -> None:
        """Real-input FFT; outputs must hold N/2 + 1 values."""
        re, im = fft.rfft(self._view(handle_in))
        self._store(handle_re, re)
        self._store(handle_im, im)

    # -------------------------------------------------------------------------
    # Signal
    # -------------------------------------------------------------------------

    def smooth(self, handle_in: VectorHandle, handle_out: VectorHandle, window: int,
               degree: int = 2) -> None:
        """Savitzky-Golay smoothing into ``handle_out``."""
        self._store(handle_out, signal.savitzky_golay(self._view(handle_in), window, degree))

    def moving_average(self, handle_in: VectorHandle, handle_out: VectorHandle,
                       window: int) -> None:
        self._store(handle_out, signal.moving_average(self._view(handle_in), window))

    def detect_peaks(self, handle_in: VectorHandle, threshold: float,
                     prominence: float = 0.0) -> np.ndarray:
        return signal.detect_peaks(self._view(handle_in), threshold, prominence)

    def butterworth_lowpass(self, handle_in: VectorHandle, handle_out: VectorHandle,
                            cutoff: float, sampling_rate: float) -> None:
        self._store(handle_out,
                    signal.butterworth_lowpass(self._view(handle_in), cutoff, sampling_rate))

    def deconvolve(self, handle_in: VectorHandle, handle_kernel: VectorHandle,
                   handle_out: VectorHandle, iterations: int) -> None:
        """Richardson-Lucy deconvolution into ``handle_out``."""
        out = signal.deconvolve_richardson_lucy(self._view(handle_in),
                                                self._view(handle_kernel), iterations)
        self._store(handle_out, out)

    def remove_baseline(self, handle_y: VectorHandle, handle_x: VectorHandle,
                        handle_out: VectorHandle, order: int, iterations: int = 0) -> None:
        out = signal.remove_baseline(self._view(handle_y), self._view(handle_x), order, iterations)
        self._store(handle_out, out)

    def snr(self, handle: VectorHandle) -> float:
        return signal.estimate_snr(self._view(handle))

    # -------------------------------------------------------------------------
    # Statistics and Calculus
    # -------------------------------------------------------------------------

    def mean(self, handle: VectorHandle) -> float:
        return stats.mean(self._view(handle))

    def variance(self, handle: VectorHandle) -> float:
        return stats.variance(self._view(handle))

    def standard_deviation(self, handle: VectorHandle) -> float:
        return stats.standard_deviation(self._view(handle))

    def median(self, handle: VectorHandle) -> float:
        return stats.median(self._view(handle))

    def mode(self, handle: VectorHandle) -> float:
        return stats.mode(self._view(handle))

    def skewness(self, handle: VectorHandle) -> float:
        return stats.skewness(self._view(handle))

    def kurtosis(self, handle: VectorHandle) -> float:
        return stats.kurtosis(self._view(handle))

    def derivative(self, handle_in: VectorHandle, handle_out: VectorHandle, h: float = 1.0) -> None:
        self._store(handle_out, calculus.derivative(self._view(handle_in), h))

    def integrate(self, handle: VectorHandle, h: float = 1.0) -> float:
        """Simpson integral of the vector."""
        return calculus.integrate_simpson(self._view(handle), h)

    # -------------------------------------------------------------------------
    # Linear Algebra
    # -------------------------------------------------------------------------

    def dot(self, handle_a: VectorHandle, handle_b: VectorHandle) -> float:
        return linalg.dot(self._view(handle_a), self._view(handle_b))

    def normalize(self, handle_in: VectorHandle, handle_out: VectorHandle) -> None:
        self._store(handle_out, linalg.normalize(self._view(handle_in)))

    def matrix_multiply(self, handle_a: VectorHandle, rows_a: int, cols_a: int,
                        handle_b: VectorHandle, rows_b: int, cols_b: int) -> VectorHandle:
        """Multiply two stored matrices; the product goes into a new vector."""
        out = linalg.matrix_multiply(self._view(handle_a), rows_a, cols_a,
                                     self._view(handle_b), rows_b, cols_b)
        return self._new(out)

    def transpose(self, handle: VectorHandle, rows: int, cols: int) -> VectorHandle:
        return self._new(linalg.transpose(self._view(handle), rows, cols))

    def invert_2x2(self, handle: VectorHandle) -> VectorHandle:
        return self._new(linalg.invert_2x2(self._view(handle)))

    def invert_3x3(self, handle: VectorHandle) -> VectorHandle:
        return self._new(linalg.invert_3x3(self._view(handle)))

    def trace(self, handle: VectorHandle, n: int) -> float:
        return linalg.trace(self._view(handle), n)

    def determinant(self, handle: VectorHandle, n: int) -> float:
        return linalg.determinant(self._view(handle), n)

    def solve_linear_system(self, matrix: Sequence[float], vector: Sequence[float],
                            n: int) -> np.ndarray:
        """Solve ``A x = b`` from flat arrays.

        Raises:
            SingularMatrix: If no usable pivot exists.
        """
        return linalg.solve_linear_system(matrix, vector, n)

    # -------------------------------------------------------------------------
    # Fitting and Optimization
    # -------------------------------------------------------------------------

    def fit_linear(self, handle_x: VectorHandle, handle_y: VectorHandle) -> LinearFit:
        return fitting.fit_linear(self._view(handle_x), self._view(handle_y))

    def fit_polynomial(self, handle_x: VectorHandle, handle_y: VectorHandle,
                       degree: int) -> FitResult:
        return fitting.fit_polynomial(self._view(handle_x), self._view(handle_y), degree)

    def fit_exponential(self, handle_x: VectorHandle, handle_y: VectorHandle) -> FitResult:
        return fitting.fit_exponential(self._view(handle_x), self._view(handle_y))

    def fit_logarithmic(self, handle_x: VectorHandle, handle_y: VectorHandle) -> FitResult:
        return fitting.fit_logarithmic(self._view(handle_x), self._view(handle_y))

    def fit_gaussian(self, handle_x: VectorHandle, handle_y: VectorHandle,
                     initial: Sequence[float]) -> FitResult:
        return fitting.fit_gaussian(self._view(handle_x), self._view(handle_y), initial)

    def genetic_algorithm(self, objective: Objective, bounds: Sequence[float],
                          pop_size: int = 50, generations: int = 100,
                          mutation_rate: float = 0.1, rng: RandomSource = None) -> np.ndarray:
        return optimize.genetic_algorithm(objective, bounds, pop_size, generations,
                                          mutation_rate, rng=rng)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def memory_stats(self) -> Dict[str, int]:
        """Vector count and bytes held by the arena."""
        return {"vectors": len(self.arena), "nbytes": self.arena.nbytes}

    def __repr__(self) -> str:
        return f"Engine({self.arena!r})"


__all__ = ["Engine"]
