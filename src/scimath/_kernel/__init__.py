"""
Accelerated implementations.

Vectorised numpy/scipy kernels (BLAS, LAPACK, pocketfft and C loops under the
hood). Large reductions may fan out over the thread pool in ``_pool`` once
it has been initialised.
"""

from ._pool import init_thread_pool, shutdown_thread_pool, pool_size

from . import stats
from . import linalg
from . import fft
from . import signal
from . import fitting
from . import optimize
from . import poly
from . import calculus

__all__ = [
    'init_thread_pool',
    'shutdown_thread_pool',
    'pool_size',
    'stats',
    'linalg',
    'fft',
    'signal',
    'fitting',
    'optimize',
    'poly',
    'calculus',
]
