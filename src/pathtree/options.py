"""Per-operation configuration for tree walks.

An :class:`Option` is a small fluent builder::

    src.copy_to(dest, lambda o: o.glob("**/*.py", "!**/test_*").strip())

Every operation accepting an option also accepts anything
:meth:`Option.of` understands: ``None``, an ``Option``, a callable
``Option -> Option``, a single pattern or a sequence of patterns.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path, PurePath, PurePosixPath
from typing import Callable, Iterable, Optional, Union

from ._filter import UserPredicate


class ExistingPolicy(str, Enum):
    """What to do when a file is about to be written over an existing entry.

    Members: ``REPLACE`` (overwrite), ``SKIP`` (leave the destination),
    ``STOP`` (abort the walk with :class:`~pathtree.AlreadyExistsError`).
    """
    REPLACE = "replace"
    SKIP = "skip"
    STOP = "stop"

    def __str__(self) -> str:          # noqa: D105
        return self.value


class Option:
    """Configuration of one copy, move, delete, walk or observe operation.

    Attributes:
        patterns: Ordered glob patterns (``!`` negates, ``!dir/**`` prunes).
        predicate: Custom include predicate, or ``None``.
        accept_root: Whether the walk root is itself part of the operation.
            Cleared by :meth:`strip`.
        max_depth: Deepest level visited below the root, or ``None``.
        allocation: Sub-path of the destination receiving the output.
        existing: :class:`ExistingPolicy` for file collisions.
        retain_pruned_content: Whether a pruned subtree blocks removal of
            its parent directory during move and delete.
        exclude_files: Gitignore-syntax pattern files.
        use_gitignore: Honour ``.gitignore`` files found while walking.
    """

    def __init__(self) -> None:
        self.patterns: list[str] = []
        self.predicate: UserPredicate | None = None
        self.accept_root = True
        self.max_depth: int | None = None
        self.allocation = PurePosixPath()
        self.existing = ExistingPolicy.REPLACE
        self.retain_pruned_content = True
        self.exclude_files: list[Path] = []
        self.use_gitignore = False

    def __repr__(self) -> str:
        return (
            f"Option(patterns={self.patterns!r}, accept_root={self.accept_root}, "
            f"max_depth={self.max_depth}, existing={self.existing})"
        )

    # ------------------------------------------------------------------
    def depth(self, depth: int) -> Option:
        """Limit the walk to *depth* levels below the root (0 = root only)."""
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")
        self.max_depth = depth
        return self

    def glob(self, *patterns: str | None) -> Option:
        """Append glob patterns; ``None`` entries are ignored."""
        for pattern in patterns:
            if pattern is not None:
                self.patterns.append(pattern)
        return self

    def take(self, predicate: UserPredicate | None) -> Option:
        """Use *predicate(relative, stat)* instead of glob-based inclusion."""
        if predicate is not None:
            self.predicate = predicate
        return self

    def strip(self) -> Option:
        """Strip the source root directory itself.

        Normally the files of ``src/`` land in ``dest/src/...``; with this
        option they land in ``dest/...``.  Patterns are then matched
        against paths relative to ``src`` instead of its parent.
        """
        self.accept_root = False
        return self

    def allocate_in(self, relative: str | PurePath | None) -> Option:
        """Place the output under *relative* inside the destination.

        Absolute paths are ignored.
        """
        if relative is None:
            return self
        rel = PurePosixPath(str(relative).replace(os.sep, "/"))
        if not rel.is_absolute():
            self.allocation = rel
        return self

    def replace_existing(self) -> Option:
        self.existing = ExistingPolicy.REPLACE
        return self

    def skip_existing(self) -> Option:
        self.existing = ExistingPolicy.SKIP
        return self

    def stop_existing(self) -> Option:
        self.existing = ExistingPolicy.STOP
        return self

    def retain_pruned(self, flag: bool = True) -> Option:
        """Decide whether pruned subtrees keep their parents from removal."""
        self.retain_pruned_content = flag
        return self

    def exclude_from(self, path: str | os.PathLike[str]) -> Option:
        """Exclude paths matching the gitignore-syntax patterns in *path*."""
        self.exclude_files.append(Path(path))
        return self

    def gitignore(self) -> Option:
        """Honour ``.gitignore`` files in walked directories."""
        self.use_gitignore = True
        return self

    # ------------------------------------------------------------------
    @classmethod
    def of(cls, spec: OptionSpec = None) -> Option:
        """Build an :class:`Option` from any accepted option spec."""
        if spec is None:
            return cls()
        if isinstance(spec, Option):
            return spec
        if isinstance(spec, str):
            return cls().glob(spec)
        if callable(spec):
            option = cls()
            result = spec(option)
            return result if isinstance(result, Option) else option
        return cls().glob(*spec)


OptionSpec = Union[
    None, Option, str, Iterable[str], Callable[[Option], Optional[Option]]
]
