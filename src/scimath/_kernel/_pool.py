"""Thread pool for the accelerated path.

numpy releases the GIL inside its C loops, so chunked reductions and row
blocks scale across threads without process overhead. The pool is created
explicitly by ``init_thread_pool``; until then, or when the capability check
fails, every helper here runs sequentially.
"""

from __future__ import annotations

import contextvars
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence, Tuple

from .._config import config

logger = logging.getLogger("scimath.pool")

_lock = threading.Lock()
_executor: Optional[ThreadPoolExecutor] = None
_num_threads = 1


def init_thread_pool(num_threads: Optional[int] = None) -> int:
    """Create (or recreate) the worker pool.

    Capability check: more than one CPU and ``SCIMATH_NO_THREADS`` unset.
    When it fails the engine stays single-threaded; this is logged, never an
    error.

    Args:
        num_threads: Worker count. ``None`` uses ``config.parallel.num_threads``
            and falls back to ``os.cpu_count()``.

    Returns:
        Number of workers now in use (1 means sequential).
    """
    global _executor, _num_threads

    cpus = os.cpu_count() or 1
    requested = num_threads if num_threads is not None else (config.parallel.num_threads or cpus)

    if not config.parallel.enabled:
        logger.info("Thread pool disabled by configuration; running single-threaded")
        requested = 1
    elif cpus < 2 and num_threads is None:
        logger.info("Only one CPU available; running single-threaded")
        requested = 1
    requested = max(int(requested), 1)

    with _lock:
        if _executor is not None:
            _executor.shutdown(wait=True)
            _executor = None
        if requested > 1:
            _executor = ThreadPoolExecutor(max_workers=requested,
                                           thread_name_prefix="scimath")
        _num_threads = requested

    logger.info("Thread pool initialised with %d worker(s)", requested)
    return requested


def shutdown_thread_pool() -> None:
    """Stop the workers and return to sequential execution."""
    global _executor, _num_threads
    with _lock:
        if _executor is not None:
            _executor.shutdown(wait=True)
        _executor = None
        _num_threads = 1


def pool_size() -> int:
    """Workers currently available (1 when no pool exists)."""
    return _num_threads


def chunk_bounds(n: int) -> List[Tuple[int, int]]:
    """Split ``range(n)`` into contiguous chunks, one per worker at most.

    Chunks never drop below ``config.parallel.min_elements_per_thread``
    elements, so small inputs come back as a single chunk.
    """
    min_chunk = max(config.parallel.min_elements_per_thread, 1)
    chunks = max(min(_num_threads, n // min_chunk), 1)
    step, extra = divmod(n, chunks)
    bounds = []
    start = 0
    for i in range(chunks):
        stop = start + step + (1 if i < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds


def parallel_map(func: Callable, args_list: Sequence[tuple]) -> list:
    """Execute ``func(*args)`` for each args tuple, in parallel if a pool exists.

    Returns:
        Results in the same order as ``args_list``. The first worker
        exception is re-raised.
    """
    executor = _executor
    if executor is None or len(args_list) < 2:
        return [func(*args) for args in args_list]

    results = [None] * len(args_list)
    # One snapshot per task so Context.run() is never entered concurrently
    contexts = [contextvars.copy_context() for _ in args_list]
    future_to_idx = {
        executor.submit(ctx.run, func, *args): i
        for i, (ctx, args) in enumerate(zip(contexts, args_list))
    }
    for future in as_completed(future_to_idx):
        results[future_to_idx[future]] = future.result()
    return results
