"""The traversal engine shared by every tree operation."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterator, Protocol

from .._exclude import IgnoreRules
from .._filter import compile_filter
from .._tracker import DeletionTracker
from ..exceptions import AlreadyExistsError
from ..location import Location
from ..options import Option, OptionSpec
from ._modes import STRATEGIES
from ._types import OperationMode, WalkError, WalkReport

logger = logging.getLogger(__name__)


class CancelFlag(Protocol):
    def is_set(self) -> bool: ...


class _Cancelled(Exception):
    """Unwinds the recursion once the cancel flag is seen."""


class TreeWalker:
    """One depth-first walk of a file or directory tree.

    Directories are entered before their children and left after them.
    Patterns are compiled here, so a bad pattern fails before the
    filesystem is touched, even for lazily consumed enumerations.

    Iterate the walker to receive emitted locations lazily, or call
    :meth:`run` to execute it and get the :class:`WalkReport`.

    Args:
        source: Root of the walk (file or directory).
        destination: Required for ``COPY`` and ``MOVE``.
        mode: The :class:`OperationMode`.
        option: Anything :meth:`Option.of` accepts.
        cancel: Object with ``is_set()``, polled before every visit.
        base: Override of the relative-path base (used by watches).
    """

    def __init__(
        self,
        source: str | os.PathLike[str],
        destination: str | os.PathLike[str] | None = None,
        mode: OperationMode | str = OperationMode.FILES,
        option: OptionSpec = None,
        *,
        cancel: CancelFlag | None = None,
        base: str | os.PathLike[str] | None = None,
    ) -> None:
        self.mode = OperationMode(mode)
        self.option = Option.of(option)
        self.source = Path(source)
        # An archive's synthetic root is never an entry of its own
        self.accept_root = self.option.accept_root and not getattr(source, "archive", False)
        self.filter = compile_filter(self.option.patterns, self.mode, self.option.predicate)

        if self.mode.needs_destination:
            if destination is None:
                raise ValueError(f"{self.mode} requires a destination")
            self.destination: Path | None = Path(destination) / str(self.option.allocation)
        else:
            self.destination = None

        rules = IgnoreRules(
            exclude_from=self.option.exclude_files,
            gitignore=self.option.use_gitignore,
        )
        # Comment-only exclude files leave nothing to check
        self._ignore: IgnoreRules | None = rules if rules.active else None

        self._cancel = cancel
        self._base_override = Path(base) if base is not None else None
        self._base = self.source
        self._max_depth = self.option.max_depth
        self._tracker = DeletionTracker()
        self._strategy = STRATEGIES[self.mode](self)
        self.report = WalkReport(self.mode)

    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[Location]:
        return self._walk()

    def run(self) -> WalkReport:
        """Walk to completion and return the report."""
        for _ in self._walk():
            pass
        return self.report

    def target(self, rel: str) -> Path:
        """Mirror of the relative path *rel* under the destination."""
        assert self.destination is not None
        return self.destination / rel if rel else self.destination

    def skip(self, rel: str) -> None:
        """Record a file left in place by the existing-entry policy."""
        self.report.skipped.append(rel)
        if self.mode.tracks_deletion:
            self._tracker.mark_retained()

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _walk(self) -> Iterator[Location]:
        source = self.source
        try:
            st = source.stat()
        except FileNotFoundError:
            return
        is_dir = stat.S_ISDIR(st.st_mode)

        if self._base_override is not None:
            self._base = self._base_override
        elif is_dir and self.mode.needs_destination and self.accept_root:
            self._base = source.parent
        else:
            self._base = source

        if self.destination is not None:
            if not is_dir and self.destination.is_dir():
                self.destination = self.destination / source.name
            self.destination.parent.mkdir(parents=True, exist_ok=True)

        try:
            if is_dir:
                yield from self._visit_directory(source, st, 0)
            else:
                yield from self._visit_file(source, st)
        except _Cancelled:
            logger.debug("%s walk of %s cancelled", self.mode, source)
            self.report.cancelled = True

    def _visit_directory(self, path: Path, st: os.stat_result, depth: int) -> Iterator[Location]:
        self._check_cancel()
        rel = self._relative(path)
        is_base = path == self._base

        if not is_base and self._prunes(path, rel, st):
            self._pruned()
            return
        if self._ignore is not None:
            self._ignore.enter_directory(path, self._root_relative(path))

        emitted = self._strategy.enter_directory(path, rel, st, is_base)
        if emitted is not None:
            yield emitted
        tracks = self.mode.tracks_deletion
        if tracks:
            self._tracker.enter()

        try:
            children = self._children(path)
        except OSError as exc:
            self._record(path, exc)
            children = []
            self._tracker.mark_retained()

        if self._max_depth is not None and depth >= self._max_depth:
            if children:
                self._pruned()
        else:
            for child in children:
                try:
                    child_st = child.stat(follow_symlinks=False)
                except OSError as exc:
                    self._record(Path(child.path), exc)
                    if tracks:
                        self._tracker.mark_retained()
                    continue
                if stat.S_ISDIR(child_st.st_mode):
                    yield from self._visit_directory(Path(child.path), child_st, depth + 1)
                else:
                    yield from self._visit_file(Path(child.path), child_st)

        self._strategy.leave_directory(path, rel, st)

        if tracks:
            was_empty = self._tracker.leave()
            eligible = self.accept_root or not is_base
            if not (was_empty and eligible and self._remove_directory(path, rel)):
                self._tracker.mark_retained()

    def _visit_file(self, path: Path, st: os.stat_result) -> Iterator[Location]:
        self._check_cancel()
        rel = self._relative(path)

        if not self._accepts_file(path, rel, st):
            if self.mode.tracks_deletion:
                self._tracker.mark_retained()
            return

        try:
            emitted = self._strategy.visit_file(path, rel, st)
        except AlreadyExistsError:
            raise
        except OSError as exc:
            self._record(path, exc)
            if self.mode.tracks_deletion:
                self._tracker.mark_retained()
            return
        if emitted is not None:
            yield emitted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_cancel(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise _Cancelled

    def _relative(self, path: Path) -> str:
        if path == self._base:
            return ""
        return path.relative_to(self._base).as_posix()

    def _root_relative(self, path: Path) -> str:
        if path == self.source:
            return ""
        return path.relative_to(self.source).as_posix()

    @staticmethod
    def _children(path: Path) -> list[os.DirEntry[str]]:
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)

    def _prunes(self, path: Path, rel: str, st: os.stat_result) -> bool:
        if self.filter.prunes(rel, st):
            return True
        if self._ignore is not None:
            return self._ignore.is_ignored(self._root_relative(path), is_dir=True)
        return False

    def _accepts_file(self, path: Path, rel: str, st: os.stat_result) -> bool:
        if not self.filter.accepts(rel, st):
            return False
        if self._ignore is not None and self._ignore.is_ignored(self._root_relative(path)):
            return False
        return True

    def _pruned(self) -> None:
        """Content was left out beneath the innermost open directory."""
        if self.mode.tracks_deletion and self.option.retain_pruned_content:
            self._tracker.mark_retained()

    def _remove_directory(self, path: Path, rel: str) -> bool:
        try:
            path.rmdir()
        except OSError as exc:
            self._record(path, exc)
            return False
        self.report.removed.append(rel or path.name)
        return True

    def _record(self, path: Path, exc: OSError) -> None:
        logger.debug("%s: skipping %s: %s", self.mode, path, exc)
        self.report.errors.append(WalkError(path=str(path), error=str(exc)))
