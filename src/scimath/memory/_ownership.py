"""Ownership and Pointer Validity.

The arena exclusively owns every buffer it hands out. Callers that need raw
addresses receive a ``PointerView``: a non-owning record of where a buffer
lived at the time it was resolved.

Safety Model:
    1. OWNED data: the arena entry, freed on release or clear
    2. VIEW data: a PointerView, valid only until the next allocation on the
       same arena or the release of its handle
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
from weakref import ref

from ..errors import InvalidHandle

__all__ = [
    'PointerView',
    'ensure_alive',
]


# =============================================================================
# Pointer View
# =============================================================================

@dataclass(frozen=True)
class PointerView:
    """Non-owning view of an arena buffer.

    Attributes:
        address: Address of the first element.
        length: Number of elements.
        kind: Element kind ('float32' or 'float64').
        handle: Handle the view was resolved from.
        epoch: Arena allocation epoch at resolve time.

    Validity:
        The view is invalidated by any later allocation on the same arena
        (even though buffers are never moved) and by releasing its handle.
        Check ``is_valid`` before passing ``address`` to native code.

    Example:
        >>> view = arena.resolve(h)
        >>> view.is_valid
        True
        >>> _ = arena.allocate(8)
        >>> view.is_valid
        False
    """
    address: int
    length: int
    kind: str
    handle: int
    epoch: int
    _arena_ref: Optional[Any] = field(default=None, repr=False, compare=False)

    @classmethod
    def capture(cls, arena: Any, handle: int, address: int, length: int,
                kind: str) -> 'PointerView':
        """Create a view bound to the arena's current epoch."""
        return cls(address, length, kind, int(handle), arena.epoch, ref(arena))

    @property
    def is_valid(self) -> bool:
        """Whether the arena is alive, unchanged, and still holds the handle."""
        if self._arena_ref is None:
            return False
        arena = self._arena_ref()
        if arena is None:
            return False
        return arena.epoch == self.epoch and self.handle in arena

    def ensure_valid(self) -> None:
        """Raise InvalidHandle if the view is stale.

        Raises:
            InvalidHandle: If the view was invalidated.
        """
        if not self.is_valid:
            raise InvalidHandle(
                f"Pointer view for handle {self.handle} is stale "
                f"(resolved at epoch {self.epoch})"
            )

    def as_tuple(self):
        """(address, length) pair."""
        return self.address, self.length


def ensure_alive(view: PointerView) -> PointerView:
    """Validate a pointer view and return it.

    Args:
        view: View to check.

    Returns:
        The same view.

    Raises:
        InvalidHandle: If the view is stale.
    """
    view.ensure_valid()
    return view
