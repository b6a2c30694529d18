"""Vector Arena.

Pool of numeric buffers addressed by opaque integer handles. The arena is the
sole owner of every buffer; callers only ever hold handles, copies, or
short-lived views.

Handles are issued from a monotonically increasing counter and are never
reused, so a handle that outlived its release is always detected.

The arena is not thread-safe for concurrent mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence, Union

import numpy as np

from ..errors import DimensionMismatch, InvalidArgument, InvalidHandle
from ._buffer import Buffer
from ._ownership import PointerView

logger = logging.getLogger("scimath.memory")

__all__ = [
    'VectorHandle',
    'ArenaEntry',
    'VectorArena',
]


# =============================================================================
# Handle and Entry
# =============================================================================

class VectorHandle(int):
    """Opaque identifier of an arena buffer."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"VectorHandle({int(self)})"


@dataclass
class ArenaEntry:
    """Bookkeeping for one allocation."""
    handle: VectorHandle
    buffer: Buffer

    @property
    def kind(self) -> str:
        return self.buffer.kind

    @property
    def length(self) -> int:
        return self.buffer.size


# =============================================================================
# Arena
# =============================================================================

class VectorArena:
    """
    Handle-addressed pool of aligned float buffers.

    Features:
    - Zero-filled allocation of float32/float64 vectors
    - Named columns mapping labels to handles
    - Pointer views tied to the allocation epoch

    Example:
        >>> arena = VectorArena()
        >>> h = arena.from_array([1.0, 2.0, 3.0])
        >>> arena.view(h)[:] *= 2
        >>> arena.read(h)
        array([2., 4., 6.])
        >>> arena.release(h)
    """

    def __init__(self, alignment: int = 64):
        self._entries: Dict[int, ArenaEntry] = {}
        self._columns: Dict[str, VectorHandle] = {}
        self._next_id = 1
        self._epoch = 0
        self._alignment = alignment

    # -------------------------------------------------------------------------
    # Allocation
    # -------------------------------------------------------------------------

    def _issue(self, buffer: Buffer) -> VectorHandle:
        handle = VectorHandle(self._next_id)
        self._next_id += 1
        self._epoch += 1
        self._entries[handle] = ArenaEntry(handle, buffer)
        logger.debug("Allocated %r (%d x %s)", handle, buffer.size, buffer.kind)
        return handle

    def allocate(self, length: int, kind: str = 'float64') -> VectorHandle:
        """
        Allocate a zero-filled vector.

        Args:
            length: Number of elements (may be 0)
            kind: 'float64' (default) or 'float32'

        Returns:
            Fresh handle
        """
        if isinstance(length, bool) or not isinstance(length, (int, np.integer)):
            raise InvalidArgument(f"Vector length must be an integer, got {length!r}")
        if length < 0:
            raise InvalidArgument(f"Vector length must be non-negative, got {length}")
        return self._issue(Buffer.zeros(int(length), kind, self._alignment))

    def allocate_batch(self, count: int, length: int,
                       kind: str = 'float64') -> List[VectorHandle]:
        """Allocate ``count`` zero-filled vectors of the same length."""
        if count < 0:
            raise InvalidArgument(f"Batch count must be non-negative, got {count}")
        return [self.allocate(length, kind) for _ in range(count)]

    def from_array(self, values: Union[Sequence[float], np.ndarray],
                   kind: str = 'float64') -> VectorHandle:
        """Allocate a vector holding a copy of ``values``."""
        return self._issue(Buffer.from_values(values, kind, self._alignment))

    def from_bytes(self, raw: Any, kind: str = 'float64') -> VectorHandle:
        """
        Load a raw byte buffer straight into the arena.

        Args:
            raw: bytes-like object of native-endian floats
            kind: Element kind encoded in ``raw``

        Returns:
            Fresh handle
        """
        return self._issue(Buffer.from_bytes(raw, kind, self._alignment))

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def _entry(self, handle: Any) -> ArenaEntry:
        if isinstance(handle, bool) or not isinstance(handle, (int, np.integer)):
            raise InvalidHandle(f"Not a vector handle: {handle!r}")
        try:
            return self._entries[int(handle)]
        except KeyError:
            raise InvalidHandle(f"Unknown or released handle {int(handle)}") from None

    def resolve(self, handle: Any) -> PointerView:
        """
        Resolve a handle to a non-owning pointer view.

        The view is valid until the next allocation on this arena.

        Raises:
            InvalidHandle: If the handle is unknown or released
        """
        entry = self._entry(handle)
        return PointerView.capture(self, entry.handle, entry.buffer.ptr,
                                   entry.length, entry.kind)

    def length(self, handle: Any) -> int:
        return self._entry(handle).length

    def kind(self, handle: Any) -> str:
        return self._entry(handle).kind

    def view(self, handle: Any) -> np.ndarray:
        """Zero-copy numpy window onto the buffer (mutations are visible)."""
        return self._entry(handle).buffer.to_numpy()

    def read(self, handle: Any) -> np.ndarray:
        """Copy of the buffer contents."""
        return self.view(handle).copy()

    def write(self, handle: Any, values: Union[Sequence[float], np.ndarray],
              offset: int = 0) -> None:
        """
        Copy ``values`` into the buffer starting at ``offset``.

        Raises:
            DimensionMismatch: If the values do not fit
        """
        dst = self.view(handle)
        src = np.asarray(values, dtype=dst.dtype).ravel()
        if offset < 0 or offset + src.size > dst.size:
            raise DimensionMismatch(
                f"Cannot write {src.size} values at offset {offset} "
                f"into a vector of length {dst.size}"
            )
        dst[offset:offset + src.size] = src

    # -------------------------------------------------------------------------
    # Release
    # -------------------------------------------------------------------------

    def release(self, handle: Any) -> None:
        """Free a buffer. Releasing an already released handle is a no-op."""
        try:
            key = int(handle)
        except (TypeError, ValueError):
            return
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        for name in [n for n, h in self._columns.items() if h == key]:
            del self._columns[name]
        logger.debug("Released %r", entry.handle)

    def clear(self) -> None:
        """Release every buffer and column. Issued handles stay retired."""
        self._entries.clear()
        self._columns.clear()
        self._epoch += 1

    # -------------------------------------------------------------------------
    # Named Columns
    # -------------------------------------------------------------------------

    def set_column(self, name: str, handle: Any) -> None:
        """Bind a label to a live handle."""
        self._columns[name] = self._entry(handle).handle

    def column(self, name: str) -> VectorHandle:
        """
        Handle bound to ``name``.

        Raises:
            InvalidHandle: If no column has that name
        """
        try:
            return self._columns[name]
        except KeyError:
            raise InvalidHandle(f"No column named {name!r}") from None

    def drop_column(self, name: str) -> None:
        self._columns.pop(name, None)

    @property
    def columns(self) -> Dict[str, VectorHandle]:
        """Copy of the column table."""
        return dict(self._columns)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def epoch(self) -> int:
        """Counter bumped by every allocation and by ``clear``."""
        return self._epoch

    @property
    def nbytes(self) -> int:
        return sum(e.buffer.nbytes for e in self._entries.values())

    def handles(self) -> List[VectorHandle]:
        return list(self._entries.keys())

    def __contains__(self, handle: Any) -> bool:
        try:
            return int(handle) in self._entries
        except (TypeError, ValueError):
            return False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[VectorHandle]:
        return iter(list(self._entries.keys()))

    def __repr__(self) -> str:
        return f"VectorArena(vectors={len(self)}, nbytes={self.nbytes})"
