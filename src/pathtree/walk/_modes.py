"""Per-mode effects plugged into the shared traversal.

Each strategy receives the walker and implements three hooks:

- ``enter_directory`` - before the children; may return a location to emit
- ``visit_file``      - for an accepted file; may return a location to emit
- ``leave_directory`` - after the children

Walk order, pruning, filtering and deletion tracking stay in the walker.
"""

from __future__ import annotations

import errno
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import AlreadyExistsError
from ..location import Directory, File, Location
from ..options import ExistingPolicy
from ._types import OperationMode

if TYPE_CHECKING:
    from ._walker import TreeWalker


class Mode:
    """Base strategy: visits everything, does nothing."""

    def __init__(self, walker: TreeWalker) -> None:
        self.walker = walker

    def enter_directory(self, path: Path, rel: str, st: os.stat_result,
                        is_base: bool) -> Location | None:
        return None

    def visit_file(self, path: Path, rel: str, st: os.stat_result) -> Location | None:
        return None

    def leave_directory(self, path: Path, rel: str, st: os.stat_result) -> None:
        pass


# ---------------------------------------------------------------------------
# Copy / move
# ---------------------------------------------------------------------------

class _TransferMode(Mode):
    """Shared mirroring logic of copy and move."""

    def enter_directory(self, path, rel, st, is_base):
        # Eager creation keeps empty directories; failure aborts the walk
        self.walker.target(rel).mkdir(parents=True, exist_ok=True)
        return None

    def visit_file(self, path, rel, st):
        target = self.walker.target(rel)
        if not self._claim(target, rel):
            return None
        self._transfer(path, target)
        self.walker.report.transferred.append(rel or path.name)
        return File(target)

    def leave_directory(self, path, rel, st):
        os.utime(self.walker.target(rel), ns=(st.st_atime_ns, st.st_mtime_ns))

    def _transfer(self, source: Path, target: Path) -> None:
        raise NotImplementedError

    def _claim(self, target: Path, rel: str) -> bool:
        """Apply the existing-entry policy; return False to leave *target*."""
        if not os.path.lexists(target):
            return True
        policy = self.walker.option.existing
        if policy is ExistingPolicy.STOP:
            raise AlreadyExistsError(errno.EEXIST, "Destination already exists", str(target))
        if policy is ExistingPolicy.SKIP:
            self.walker.skip(rel)
            return False
        if target.is_dir() and not target.is_symlink():
            raise IsADirectoryError(errno.EISDIR, "Destination is a directory", str(target))
        return True


class CopyMode(_TransferMode):
    def _transfer(self, source, target):
        shutil.copy2(source, target, follow_symlinks=False)


class MoveMode(_TransferMode):
    def _transfer(self, source, target):
        os.replace(source, target)


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

class DeleteMode(Mode):
    def visit_file(self, path, rel, st):
        path.unlink()
        self.walker.report.removed.append(rel or path.name)
        return None


# ---------------------------------------------------------------------------
# Enumeration
# ---------------------------------------------------------------------------

class FilesMode(Mode):
    def visit_file(self, path, rel, st):
        return File(path)


class DirectoriesMode(Mode):
    def enter_directory(self, path, rel, st, is_base):
        walker = self.walker
        if is_base and not walker.accept_root:
            return None
        if walker.filter.accepts(rel, st):
            return Directory(path)
        return None


class ObserveMode(Mode):
    """Every directory that is not pruned, the root included."""

    def enter_directory(self, path, rel, st, is_base):
        return Directory(path)


STRATEGIES: dict[OperationMode, type[Mode]] = {
    OperationMode.COPY: CopyMode,
    OperationMode.MOVE: MoveMode,
    OperationMode.DELETE: DeleteMode,
    OperationMode.FILES: FilesMode,
    OperationMode.DIRECTORIES: DirectoriesMode,
    OperationMode.OBSERVE: ObserveMode,
}
