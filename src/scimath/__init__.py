"""
scimath - Numeric Compute Engine

Statistics, linear algebra, signal processing, curve fitting and
optimization, each shipped twice:

- an accelerated path built on numpy/scipy
- a portable pure-Python path

A size-based dispatcher picks the path per call; the parity harness keeps
the two in agreement.

Modules:
- memory: handle-addressed vector arena
- stats, linalg, fft, signal, fitting, optimize, poly, calculus: algorithms
- engine: handle-based facade
- parity: cross-path verification

Architecture:
    ┌──────────────────────────────────────────────┐
    │              Engine (handles)                │
    ├──────────────────────────────────────────────┤
    │  stats | linalg | fft | signal | fitting ... │
    ├──────────────────────────────────────────────┤
    │  Dispatcher: ACCELERATED | PORTABLE          │
    ├──────────────────────────────────────────────┤
    │  VectorArena (aligned ctypes buffers)        │
    └──────────────────────────────────────────────┘

Example:
    >>> import scimath
    >>> scimath.linalg.solve_linear_system([2, 1, 1, 3], [5, 10], 2)
    array([1., 3.])
    >>>
    >>> eng = scimath.Engine()
    >>> h = eng.load([0, 1, 3, 1, 0.5, 2, 0])
    >>> eng.detect_peaks(h, threshold=1.5)
    array([2, 5], dtype=uint32)
"""

__version__ = '0.1.0'

# Register both implementation paths with the dispatcher
from . import _kernel
from . import _portable

from . import memory
from . import stats
from . import linalg
from . import fft
from . import signal
from . import fitting
from . import optimize
from . import poly
from . import calculus
from . import parity

from ._config import (
    DispatchMode,
    DispatchConfig,
    ParallelConfig,
    NumericConfig,
    config,
    get_config,
    set_dispatch,
    set_parallel,
)
from ._dispatch import Path, select, forced
from ._kernel import init_thread_pool, shutdown_thread_pool
from .engine import Engine
from .errors import (
    SciMathError,
    InvalidHandle,
    DimensionMismatch,
    InvalidLength,
    SingularMatrix,
    InsufficientData,
    InvalidArgument,
)
from .fitting import FitResult, LinearFit
from .memory import VectorArena, VectorHandle, PointerView

__all__ = [
    # Modules
    'memory',
    'stats',
    'linalg',
    'fft',
    'signal',
    'fitting',
    'optimize',
    'poly',
    'calculus',
    'parity',
    # Engine and storage
    'Engine',
    'VectorArena',
    'VectorHandle',
    'PointerView',
    # Dispatch and configuration
    'Path',
    'select',
    'forced',
    'DispatchMode',
    'DispatchConfig',
    'ParallelConfig',
    'NumericConfig',
    'config',
    'get_config',
    'set_dispatch',
    'set_parallel',
    'init_thread_pool',
    'shutdown_thread_pool',
    # Results
    'FitResult',
    'LinearFit',
    # Errors
    'SciMathError',
    'InvalidHandle',
    'DimensionMismatch',
    'InvalidLength',
    'SingularMatrix',
    'InsufficientData',
    'InvalidArgument',
]
