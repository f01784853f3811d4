"""Data structures for tree walks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OperationMode(str, Enum):
    """What a :class:`~pathtree.walk.TreeWalker` does with the entries it visits.

    Members: ``COPY``, ``MOVE``, ``DELETE``, ``FILES`` (enumerate files),
    ``DIRECTORIES`` (enumerate directories), ``OBSERVE`` (snapshot of the
    directories a watch subscribes to).
    """
    COPY = "copy"
    MOVE = "move"
    DELETE = "delete"
    FILES = "files"
    DIRECTORIES = "directories"
    OBSERVE = "observe"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @property
    def file_oriented(self) -> bool:
        """True if negated patterns exclude files rather than directories."""
        return self in _FILE_ORIENTED

    @property
    def needs_destination(self) -> bool:
        return self in (OperationMode.COPY, OperationMode.MOVE)

    @property
    def tracks_deletion(self) -> bool:
        return self in (OperationMode.MOVE, OperationMode.DELETE)


_FILE_ORIENTED = frozenset({
    OperationMode.COPY, OperationMode.MOVE,
    OperationMode.DELETE, OperationMode.FILES,
})


@dataclass
class WalkError:
    """A path that failed during a walk.

    Attributes:
        path: The source path that caused the error.
        error: Human-readable error message.
    """
    path: str
    error: str


@dataclass
class WalkReport:
    """Result of a copy, move or delete walk.

    Paths are POSIX paths relative to the walk base.

    Attributes:
        mode: The :class:`OperationMode` that produced the report.
        transferred: Files copied or moved.
        removed: Files and directories deleted from the source.
        skipped: Files left alone because the destination existed.
        errors: Per-entry failures that did not abort the walk.
        cancelled: ``True`` if the walk stopped on its cancel flag.
    """
    mode: OperationMode
    transferred: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[WalkError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """``True`` if no entry failed and the walk ran to completion."""
        return not self.errors and not self.cancelled

    @property
    def total(self) -> int:
        """Number of transferred plus removed entries."""
        return len(self.transferred) + len(self.removed)
