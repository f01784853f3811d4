"""Per-walk bookkeeping of which open directories may be removed."""

from __future__ import annotations

from enum import Enum


class Marker(str, Enum):
    """State of one open directory during a move or delete walk."""
    EMPTY = "empty"
    RETAINED = "retained"

    def __str__(self) -> str:          # noqa: D105
        return self.value


class DeletionTracker:
    """Stack of :class:`Marker` values, one per directory currently open.

    A directory is pushed as ``EMPTY`` on enter; anything beneath it that
    survives the walk flips it to ``RETAINED``; on leave the marker is
    popped and the directory may be removed only if it was still ``EMPTY``.
    """

    def __init__(self) -> None:
        self._stack: list[Marker] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    def enter(self) -> None:
        self._stack.append(Marker.EMPTY)

    def mark_retained(self) -> None:
        """Flag the innermost open directory as holding retained content."""
        if self._stack:
            self._stack[-1] = Marker.RETAINED

    def leave(self) -> bool:
        """Pop the innermost marker; return True if it was still ``EMPTY``."""
        return self._stack.pop() is Marker.EMPTY
