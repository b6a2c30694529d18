"""
Arena-managed numeric storage.

Exports:
    Buffer: aligned ctypes float storage
    VectorArena, VectorHandle: handle-addressed buffer pool
    PointerView: non-owning view with epoch-based validity
"""

from ._buffer import Buffer, KINDS, itemsize_of
from ._arena import VectorArena, VectorHandle, ArenaEntry
from ._ownership import PointerView, ensure_alive

__all__ = [
    'Buffer',
    'KINDS',
    'itemsize_of',
    'VectorArena',
    'VectorHandle',
    'ArenaEntry',
    'PointerView',
    'ensure_alive',
]
