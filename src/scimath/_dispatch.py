"""
scimath Dispatch - Accelerated / Portable Path Selection

Every numerical operation ships twice: an accelerated implementation built on
numpy/scipy and a portable pure-Python one. Implementations register
themselves under an operation id; ``select`` picks a path from the input size
and the active configuration.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from enum import IntEnum
from typing import Callable, Dict, Iterator, List, Optional
import logging

from ._config import DispatchMode, config
from .errors import SciMathError, SCIMATH_ERROR_INTERNAL

logger = logging.getLogger("scimath.dispatch")


# =============================================================================
# Path Enumeration
# =============================================================================

class Path(IntEnum):
    """
    Implementation path.
    """
    ACCELERATED = 0    # numpy/scipy, may use the thread pool
    PORTABLE = 1       # Pure Python, single-threaded


_MODE_TO_PATH = {
    DispatchMode.ACCELERATED: Path.ACCELERATED,
    DispatchMode.PORTABLE: Path.PORTABLE,
}


# =============================================================================
# Kernel Registry
# =============================================================================

class KernelRegistry:
    """
    Registry of implementations keyed by (path, operation id).
    """

    def __init__(self):
        self._handlers: Dict[Path, Dict[str, Callable]] = {
            Path.ACCELERATED: {},
            Path.PORTABLE: {},
        }

    def register(self, path: Path, operation: str, handler: Callable):
        """Register a handler for an operation on a path."""
        self._handlers[path][operation] = handler

    def get_handler(self, path: Path, operation: str) -> Optional[Callable]:
        """Get handler for an operation."""
        return self._handlers[path].get(operation)

    def has_handler(self, path: Path, operation: str) -> bool:
        """Check if handler exists."""
        return operation in self._handlers[path]

    def operations(self, path: Path) -> List[str]:
        """Operation ids registered on a path."""
        return sorted(self._handlers[path])


# Global registry instance
_registry = KernelRegistry()


def register_kernel(operation: str):
    """Decorator registering an accelerated implementation."""
    def decorator(func: Callable) -> Callable:
        _registry.register(Path.ACCELERATED, operation, func)
        return func
    return decorator


def register_portable(operation: str):
    """Decorator registering a portable implementation."""
    def decorator(func: Callable) -> Callable:
        _registry.register(Path.PORTABLE, operation, func)
        return func
    return decorator


def get_registry() -> KernelRegistry:
    return _registry


# =============================================================================
# Path Selection
# =============================================================================

def select(operation: str, size: int) -> Path:
    """
    Choose the implementation path for an operation.

    Pure function of the operation id, the input size, and the active
    dispatch configuration.

    Args:
        operation: Operation id
        size: Input size in the unit the operation's threshold uses

    Returns:
        ``Path.ACCELERATED`` if a mode forces it or ``size`` exceeds the
        threshold, else ``Path.PORTABLE``
    """
    cfg = config.dispatch
    forced_path = _MODE_TO_PATH.get(cfg.mode)
    if forced_path is not None:
        return forced_path
    if size > cfg.threshold(operation):
        return Path.ACCELERATED
    return Path.PORTABLE


def resolve(operation: str, path: Path) -> Callable:
    """
    Implementation registered for ``operation`` on ``path``.

    Raises:
        SciMathError: If nothing is registered
    """
    handler = _registry.get_handler(path, operation)
    if handler is None:
        raise SciMathError(
            f"No {path.name.lower()} implementation registered for {operation!r}",
            code=SCIMATH_ERROR_INTERNAL,
        )
    return handler


def dispatch(operation: str, size: int, *args, **kwargs):
    """Select a path for ``operation`` and run it."""
    path = select(operation, size)
    logger.debug("%s(size=%d) -> %s", operation, size, path.name)
    return resolve(operation, path)(*args, **kwargs)


@contextmanager
def forced(path: Path) -> Iterator[Path]:
    """
    Force every dispatch on this thread onto one path.

    Example:
        >>> with forced(Path.PORTABLE):
        ...     mean([1.0, 2.0])
    """
    mode = DispatchMode.ACCELERATED if path == Path.ACCELERATED else DispatchMode.PORTABLE
    with config.local(dispatch=replace(config.dispatch, mode=mode)):
        yield path


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "Path",
    "KernelRegistry",
    "register_kernel",
    "register_portable",
    "get_registry",
    "select",
    "resolve",
    "dispatch",
    "forced",
]
