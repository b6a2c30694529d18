"""
Aligned Numeric Buffer

ctypes-backed contiguous storage for the arena. Each buffer owns a single
64-byte aligned allocation and exposes its address for native callers plus a
zero-copy numpy window for the algorithm layer.
"""

import ctypes
from typing import Union, Sequence, Any

import numpy as np

from ..errors import InvalidArgument, InvalidLength

__all__ = ['Buffer', 'KINDS', 'itemsize_of']


# =============================================================================
# Type Mapping
# =============================================================================

# kind -> (ctypes type, numpy dtype, itemsize)
_TYPE_MAP = {
    'float32': (ctypes.c_float, np.float32, 4),
    'float64': (ctypes.c_double, np.float64, 8),
}

KINDS = tuple(_TYPE_MAP)


def _get_type_info(kind: str):
    """Get (ctypes_type, numpy_dtype, itemsize) for a kind string."""
    if isinstance(kind, np.dtype) or isinstance(kind, type):
        kind = np.dtype(kind).name
    if kind not in _TYPE_MAP:
        raise InvalidArgument(f"Unsupported vector kind: {kind!r}. "
                              f"Supported: {list(_TYPE_MAP.keys())}")
    return _TYPE_MAP[kind]


def itemsize_of(kind: str) -> int:
    """Bytes per element for a kind."""
    return _get_type_info(kind)[2]


# =============================================================================
# Buffer Class
# =============================================================================

class Buffer:
    """
    Contiguous float buffer with C-compatible memory layout.

    Attributes:
        kind (str): 'float32' or 'float64'
        size (int): Number of elements
        nbytes (int): Total bytes
        ptr (int): Address of the first element (0 when empty)

    Example:
        >>> buf = Buffer.zeros(1000, kind='float32')
        >>> buf[0] = 3.14
        >>> addr = buf.ptr
        >>> window = buf.to_numpy()   # zero-copy
    """

    def __init__(self, size: int, kind: str = 'float64', align: int = 64):
        """
        Allocate an uninitialized buffer.

        Args:
            size: Number of elements
            kind: Element kind
            align: Memory alignment in bytes
        """
        if size < 0:
            raise InvalidLength(f"Buffer size must be non-negative, got {size}")

        self._ctype, self._np_dtype, self._itemsize = _get_type_info(kind)
        self._kind = np.dtype(self._np_dtype).name
        self._size = size
        self._nbytes = size * self._itemsize

        if size == 0:
            self._data = None
            self._owner = None
            self._offset = 0
        else:
            raw = (ctypes.c_uint8 * (align + self._nbytes))()
            addr = ctypes.addressof(raw)
            aligned_addr = (addr + align - 1) & ~(align - 1)
            self._data = (self._ctype * size).from_address(aligned_addr)
            self._owner = raw  # Keeps the allocation alive
            self._offset = aligned_addr - addr

    @property
    def size(self) -> int:
        """Number of elements."""
        return self._size

    @property
    def kind(self) -> str:
        """Element kind string."""
        return self._kind

    @property
    def nbytes(self) -> int:
        return self._nbytes

    @property
    def itemsize(self) -> int:
        return self._itemsize

    @property
    def ptr(self) -> int:
        """Address of the first element."""
        if self._data is None:
            return 0
        return ctypes.addressof(self._data)

    def get_pointer(self) -> ctypes.c_void_p:
        """ctypes void pointer for native calls."""
        if self._data is None:
            return ctypes.c_void_p(0)
        return ctypes.cast(self._data, ctypes.c_void_p)

    # -------------------------------------------------------------------------
    # Initialization Methods
    # -------------------------------------------------------------------------

    @classmethod
    def zeros(cls, size: int, kind: str = 'float64', align: int = 64) -> 'Buffer':
        """Create zero-initialized buffer."""
        buf = cls(size, kind, align)
        if buf._data is not None:
            ctypes.memset(buf.get_pointer(), 0, buf.nbytes)
        return buf

    @classmethod
    def from_values(cls, values: Union[Sequence[float], np.ndarray],
                    kind: str = 'float64', align: int = 64) -> 'Buffer':
        """Create buffer holding a copy of a 1-D sequence."""
        _, np_dtype, _ = _get_type_info(kind)
        src = np.asarray(values, dtype=np_dtype)
        if src.ndim != 1:
            src = src.ravel()
        buf = cls(src.size, kind, align)
        if buf._data is not None:
            buf.to_numpy()[:] = src
        return buf

    @classmethod
    def from_bytes(cls, raw: Any, kind: str = 'float64', align: int = 64) -> 'Buffer':
        """
        Create buffer from raw native-endian bytes.

        The bytes are copied into a fresh aligned allocation, so the source
        object may be discarded afterwards.

        Args:
            raw: Object supporting the buffer protocol
            kind: Element kind the bytes encode
        """
        _, np_dtype, itemsize = _get_type_info(kind)
        mv = memoryview(raw).cast('B')
        if mv.nbytes % itemsize != 0:
            raise InvalidLength(f"Byte length {mv.nbytes} is not a multiple of "
                                f"{itemsize} for kind {kind!r}")
        buf = cls(mv.nbytes // itemsize, kind, align)
        if buf._data is not None:
            buf.to_numpy()[:] = np.frombuffer(mv, dtype=np_dtype)
        return buf

    # -------------------------------------------------------------------------
    # Element Access
    # -------------------------------------------------------------------------

    def __getitem__(self, idx: int) -> float:
        if self._data is None:
            raise IndexError("Empty buffer")
        if idx < 0:
            idx += self._size
        if idx < 0 or idx >= self._size:
            raise IndexError(f"Index {idx} out of bounds [0, {self._size})")
        return self._data[idx]

    def __setitem__(self, idx: int, value: float):
        if self._data is None:
            raise IndexError("Empty buffer")
        if idx < 0:
            idx += self._size
        if idx < 0 or idx >= self._size:
            raise IndexError(f"Index {idx} out of bounds [0, {self._size})")
        self._data[idx] = value

    def __len__(self) -> int:
        return self._size

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_numpy(self) -> np.ndarray:
        """Zero-copy numpy window onto the buffer."""
        if self._data is None:
            return np.empty(0, dtype=self._np_dtype)
        # Views chain back to the owning allocation, not the aligned alias
        return np.frombuffer(self._owner, dtype=self._np_dtype, count=self._size,
                             offset=self._offset)

    def tolist(self) -> list:
        return self.to_numpy().tolist()

    def copy(self) -> 'Buffer':
        """Deep copy into a new aligned allocation."""
        return Buffer.from_values(self.to_numpy(), self._kind)

    def fill(self, value: float) -> None:
        self.to_numpy().fill(value)

    def __repr__(self) -> str:
        if self._size <= 10:
            return f"Buffer({self.tolist()}, kind='{self._kind}')"
        head = self.to_numpy()[:3].tolist()
        tail = self.to_numpy()[-3:].tolist()
        return f"Buffer([{head[0]}, {head[1]}, {head[2]}, ..., {tail[0]}, {tail[1]}, " \
               f"{tail[2]}], size={self._size}, kind='{self._kind}')"
