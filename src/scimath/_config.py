"""
scimath Config - Runtime Configuration System

Holds the tunables that steer the engine without changing function
signatures: dispatch thresholds and overrides, thread pool sizing, and the
numerical tolerances shared by the solvers.

Environment variables (read when a section is created or reset):
    SCIMATH_DISPATCH     auto | accelerated | portable
    SCIMATH_NUM_THREADS  worker count for the accelerated thread pool
    SCIMATH_NO_THREADS   disable the thread pool entirely
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Callable, Dict, Any, List
from enum import IntEnum
import logging
import os
import threading

logger = logging.getLogger("scimath.config")


# =============================================================================
# Strategy Enumerations
# =============================================================================

class DispatchMode(IntEnum):
    """
    How the dispatcher picks an implementation path.
    """
    AUTO = 0           # Size-based selection per operation
    ACCELERATED = 1    # Always use the numpy/scipy path
    PORTABLE = 2       # Always use the pure-Python path


# Input size (elements) above which the accelerated path is chosen.
DEFAULT_THRESHOLDS: Dict[str, int] = {
    # reductions and vector ops
    "mean": 1000,
    "variance": 1000,
    "median": 1000,
    "mode": 1000,
    "skewness": 1000,
    "kurtosis": 1000,
    "dot": 1000,
    "normalize": 1000,
    "magnitude": 1000,
    "snr": 1000,
    "poly_eval": 1000,
    # calculus
    "derivative": 1000,
    "integrate_simpson": 1000,
    "integrate_trapezoid": 1000,
    "cumulative_integrate": 1000,
    # fft
    "fft": 1024,
    "rfft": 1024,
    # dense linear algebra (matrix order, or output elements for multiply)
    "matrix_multiply": 4096,
    "transpose": 4096,
    "solve": 64,
    "determinant": 64,
    "least_squares": 4096,
    # signal processing
    "moving_average": 32000,
    "butterworth": 32000,
    "savitzky_golay": 4096,
    "detect_peaks": 4096,
    "deconvolve": 2048,
    # fitting and optimization
    "fit_linear": 4096,
    "fit_polynomial": 4096,
    "fit_gaussian": 1024,
    "genetic_algorithm": 256,
}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


def _mode_from_env() -> DispatchMode:
    raw = os.environ.get('SCIMATH_DISPATCH', '').strip().lower()
    if not raw:
        return DispatchMode.AUTO
    try:
        return DispatchMode[raw.upper()]
    except KeyError:
        logger.warning("Ignoring unknown SCIMATH_DISPATCH value %r", raw)
        return DispatchMode.AUTO


def _threads_from_env() -> int:
    raw = os.environ.get('SCIMATH_NUM_THREADS', '').strip()
    if not raw:
        return 0
    try:
        return max(int(raw), 0)
    except ValueError:
        logger.warning("Ignoring non-integer SCIMATH_NUM_THREADS value %r", raw)
        return 0


# =============================================================================
# Configuration Classes
# =============================================================================

@dataclass
class DispatchConfig:
    """Configuration for accelerated/portable path selection."""
    mode: DispatchMode = field(default_factory=_mode_from_env)
    thresholds: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))
    default_threshold: int = 1000  # For operations without an explicit entry

    def threshold(self, operation: str) -> int:
        """Size threshold for an operation."""
        return self.thresholds.get(operation, self.default_threshold)


@dataclass
class ParallelConfig:
    """Configuration for the accelerated-path thread pool."""
    enabled: bool = field(default_factory=lambda: not _env_flag('SCIMATH_NO_THREADS'))
    num_threads: int = field(default_factory=_threads_from_env)  # 0 = auto-detect
    min_elements_per_thread: int = 65536


@dataclass
class NumericConfig:
    """Numerical tolerances shared by the solvers."""
    singular_epsilon: float = 1e-12   # Smallest acceptable pivot magnitude
    division_epsilon: float = 1e-12   # Guard for ratio and model denominators


# =============================================================================
# Global Configuration Manager
# =============================================================================

class SciMathConfig:
    """
    Global configuration manager for scimath.

    Provides thread-local configuration with context manager support.
    Configuration can be set globally or locally within a context.

    Example:
        # Global configuration
        scimath.config.dispatch.thresholds["fft"] = 4096

        # Local configuration (context manager)
        with scimath.config.local(dispatch=DispatchConfig(mode=DispatchMode.PORTABLE)):
            result = scimath.fft.fft(re, im)
        # Back to global config
    """

    _SECTIONS = ("dispatch", "parallel", "numeric")

    def __init__(self):
        self._global_dispatch = DispatchConfig()
        self._global_parallel = ParallelConfig()
        self._global_numeric = NumericConfig()

        # Thread-local storage for context overrides
        self._local = threading.local()

        # Callbacks for config changes
        self._callbacks: Dict[str, List[Callable]] = {
            name: [] for name in self._SECTIONS
        }

    # -------------------------------------------------------------------------
    # Property Accessors (with thread-local override support)
    # -------------------------------------------------------------------------

    @property
    def dispatch(self) -> DispatchConfig:
        """Get dispatch configuration."""
        if getattr(self._local, "dispatch", None) is not None:
            return self._local.dispatch
        return self._global_dispatch

    @dispatch.setter
    def dispatch(self, value: DispatchConfig):
        """Set global dispatch configuration."""
        self._global_dispatch = value
        self._notify("dispatch", value)

    @property
    def parallel(self) -> ParallelConfig:
        """Get parallel configuration."""
        if getattr(self._local, "parallel", None) is not None:
            return self._local.parallel
        return self._global_parallel

    @parallel.setter
    def parallel(self, value: ParallelConfig):
        """Set global parallel configuration."""
        self._global_parallel = value
        self._notify("parallel", value)

    @property
    def numeric(self) -> NumericConfig:
        """Get numeric configuration."""
        if getattr(self._local, "numeric", None) is not None:
            return self._local.numeric
        return self._global_numeric

    @numeric.setter
    def numeric(self, value: NumericConfig):
        """Set global numeric configuration."""
        self._global_numeric = value
        self._notify("numeric", value)

    # -------------------------------------------------------------------------
    # Convenience Properties
    # -------------------------------------------------------------------------

    @property
    def num_threads(self) -> int:
        """Number of threads for the accelerated path (0 = auto)."""
        return self.parallel.num_threads

    @num_threads.setter
    def num_threads(self, value: int):
        self._global_parallel.num_threads = value

    @property
    def epsilon(self) -> float:
        """Singular pivot tolerance."""
        return self.numeric.singular_epsilon

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    def local(self, **kwargs) -> "_LocalConfigContext":
        """
        Create a local configuration context.

        Args:
            **kwargs: Configuration overrides (dispatch, parallel, numeric)

        Returns:
            Context manager
        """
        unknown = set(kwargs) - set(self._SECTIONS)
        if unknown:
            raise TypeError(f"Unknown configuration sections: {sorted(unknown)}")
        return _LocalConfigContext(self, **kwargs)

    def _set_local(self, **kwargs) -> Dict[str, Any]:
        """Set thread-local configuration, returning the previous values."""
        previous = {}
        for key, value in kwargs.items():
            previous[key] = getattr(self._local, key, None)
            if value is not None:
                setattr(self._local, key, value)
        return previous

    def _restore_local(self, previous: Dict[str, Any]):
        """Restore thread-local configuration saved by ``_set_local``."""
        for key, value in previous.items():
            setattr(self._local, key, value)

    # -------------------------------------------------------------------------
    # Callback Registration
    # -------------------------------------------------------------------------

    def on_change(self, config_name: str, callback: Callable):
        """
        Register callback for configuration changes.

        Args:
            config_name: Name of config ("dispatch", "parallel", "numeric")
            callback: Function to call when config changes
        """
        if config_name in self._callbacks:
            self._callbacks[config_name].append(callback)

    def _notify(self, config_name: str, value: Any):
        """Notify callbacks of configuration change."""
        for callback in self._callbacks.get(config_name, []):
            try:
                callback(value)
            except Exception:
                logger.warning("Config callback %r failed for %s", callback, config_name,
                               exc_info=True)

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    def reset(self):
        """Reset all configurations to defaults (re-reading the environment)."""
        self.dispatch = DispatchConfig()
        self.parallel = ParallelConfig()
        self.numeric = NumericConfig()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "dispatch": {
                "mode": self.dispatch.mode.name,
                "thresholds": dict(self.dispatch.thresholds),
                "default_threshold": self.dispatch.default_threshold,
            },
            "parallel": {
                "enabled": self.parallel.enabled,
                "num_threads": self.parallel.num_threads,
                "min_elements_per_thread": self.parallel.min_elements_per_thread,
            },
            "numeric": {
                "singular_epsilon": self.numeric.singular_epsilon,
                "division_epsilon": self.numeric.division_epsilon,
            },
        }

    def __repr__(self) -> str:
        return f"SciMathConfig({self.to_dict()})"


class _LocalConfigContext:
    """Context manager for local configuration override."""

    def __init__(self, config: SciMathConfig, **kwargs):
        self._config = config
        self._kwargs = kwargs
        self._previous: Optional[Dict[str, Any]] = None

    def __enter__(self):
        self._previous = self._config._set_local(**self._kwargs)
        return self._config

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._config._restore_local(self._previous or {})
        return False


# =============================================================================
# Global Instance
# =============================================================================

config = SciMathConfig()


# =============================================================================
# Convenience Functions
# =============================================================================

def get_config() -> SciMathConfig:
    """Get the global configuration instance."""
    return config


def set_dispatch(mode: DispatchMode = DispatchMode.AUTO, **thresholds: int):
    """
    Configure path selection.

    Args:
        mode: Dispatch mode
        **thresholds: Per-operation size thresholds to override
    """
    merged = dict(DEFAULT_THRESHOLDS)
    merged.update(thresholds)
    config.dispatch = DispatchConfig(mode=mode, thresholds=merged)


def set_parallel(num_threads: int = 0, enabled: bool = True):
    """
    Configure the accelerated-path thread pool.

    Args:
        num_threads: Number of threads (0 = auto)
        enabled: Whether the pool may be used at all
    """
    config.parallel = ParallelConfig(enabled=enabled, num_threads=num_threads)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "DispatchMode",
    "DEFAULT_THRESHOLDS",
    "DispatchConfig",
    "ParallelConfig",
    "NumericConfig",
    "SciMathConfig",
    "config",
    "get_config",
    "set_dispatch",
    "set_parallel",
]
