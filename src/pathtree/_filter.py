"""Pattern compilation: ordered glob strings to include/exclude predicates.

Patterns are processed in order:

- ``pattern``       -> OR into *include*
- ``!pattern/**``   -> OR into *exclude_directory* (prunes the subtree)
- ``!pattern``      -> OR into *exclude_file* for file-oriented modes,
  *exclude_directory* for directory-oriented ones

Every predicate takes ``(relative, stat)`` where *relative* is the POSIX
path relative to the walk base (``""`` for the base itself).
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from ._glob import compile_glob
from .exceptions import InvalidPatternError

if TYPE_CHECKING:
    from .walk._types import OperationMode

Predicate = Callable[[str, Optional[os.stat_result]], bool]
UserPredicate = Callable[[PurePosixPath, Optional[os.stat_result]], bool]


def _match_all(relative: str, st: os.stat_result | None = None) -> bool:
    return True


def _match_none(relative: str, st: os.stat_result | None = None) -> bool:
    return False


class GlobSet:
    """OR of compiled glob patterns, usable as a :data:`Predicate`."""

    def __init__(self) -> None:
        self.patterns: list[str] = []
        self._regexes: list[re.Pattern[str]] = []

    def add(self, glob: str, *, source: str | None = None) -> None:
        """Compile and add *glob*; errors name *source* (the raw pattern)."""
        try:
            regex = compile_glob(glob)
        except InvalidPatternError as exc:
            if source is None or source == glob:
                raise
            raise InvalidPatternError(source, exc.reason) from None
        self.patterns.append(glob)
        self._regexes.append(regex)

    def __bool__(self) -> bool:
        return bool(self._regexes)

    def __call__(self, relative: str, st: os.stat_result | None = None) -> bool:
        return any(r.fullmatch(relative) for r in self._regexes)


@dataclass(frozen=True)
class CompiledFilter:
    """The three predicates derived from an option's patterns.

    Attributes:
        include: Entry must match to be accepted (default: match all).
        exclude_file: Matching entries are rejected (default: match none).
        exclude_directory: Matching directories are pruned with their
            whole subtree (default: match none).
    """
    include: Predicate = _match_all
    exclude_file: Predicate = _match_none
    exclude_directory: Predicate = _match_none

    def accepts(self, relative: str, st: os.stat_result | None = None) -> bool:
        """``include and not exclude_file``."""
        if self.exclude_file(relative, st):
            return False
        return self.include(relative, st)

    def prunes(self, relative: str, st: os.stat_result | None = None) -> bool:
        """True if the directory at *relative* must not be descended into."""
        return self.exclude_directory(relative, st)


MATCH_ALL = CompiledFilter()


def compile_filter(
    patterns: Iterable[str],
    mode: OperationMode,
    predicate: UserPredicate | None = None,
) -> CompiledFilter:
    """Compile ordered *patterns* for *mode* into a :class:`CompiledFilter`.

    A custom *predicate* replaces the glob-based include predicate; it
    receives a :class:`~pathlib.PurePosixPath` and the entry's stat result.
    Negated patterns still contribute exclusions alongside a predicate.

    Raises:
        InvalidPatternError: A pattern is malformed.
        ValueError: Both *predicate* and positive include patterns given.
    """
    include = GlobSet()
    exclude_file = GlobSet()
    exclude_directory = GlobSet()

    for pattern in patterns:
        if not pattern.startswith("!"):
            include.add(pattern)
        elif pattern.endswith("/**"):
            exclude_directory.add(pattern[1:-3], source=pattern)
        elif mode.file_oriented:
            exclude_file.add(pattern[1:], source=pattern)
        else:
            exclude_directory.add(pattern[1:], source=pattern)

    if predicate is not None:
        if include:
            raise ValueError(
                "A custom predicate and include patterns are mutually exclusive: "
                + ", ".join(include.patterns)
            )

        def include_fn(relative: str, st: os.stat_result | None = None) -> bool:
            return bool(predicate(PurePosixPath(relative), st))
    else:
        include_fn = include if include else _match_all

    return CompiledFilter(
        include=include_fn,
        exclude_file=exclude_file if exclude_file else _match_none,
        exclude_directory=exclude_directory if exclude_directory else _match_none,
    )
