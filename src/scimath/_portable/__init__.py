"""
Portable implementations.

Pure-Python loops over plain floats, always single-threaded. Each function is
registered with the dispatcher under the same operation id as its
accelerated counterpart in ``scimath._kernel``.
"""

from . import stats
from . import linalg
from . import fft
from . import signal
from . import fitting
from . import optimize
from . import poly
from . import calculus

__all__ = [
    'stats',
    'linalg',
    'fft',
    'signal',
    'fitting',
    'optimize',
    'poly',
    'calculus',
]
