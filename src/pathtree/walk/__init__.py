"""Copy, move, delete and enumerate directory trees.

All operations run through one :class:`TreeWalker` and share the same
filtering (glob patterns, custom predicate, ignore files), depth limit and
root handling, configured by an :class:`~pathtree.Option`.

Copy, move and delete are best-effort: per-file failures are collected in
the returned :class:`WalkReport` and the walk continues.
"""

from __future__ import annotations

import os
from typing import Iterator

from ..location import Directory, File
from ..options import OptionSpec
from ._types import OperationMode, WalkError, WalkReport
from ._walker import CancelFlag, TreeWalker

__all__ = [
    "OperationMode", "TreeWalker", "WalkError", "WalkReport",
    "copy_tree", "move_tree", "delete_tree", "walk_files", "walk_directories",
]


def copy_tree(
    source: str | os.PathLike[str],
    destination: str | os.PathLike[str],
    option: OptionSpec = None,
    *,
    cancel: CancelFlag | None = None,
) -> WalkReport:
    """Copy *source* (file or directory) to *destination*.

    A directory lands at ``destination/<name>`` unless the option strips
    the root.  A file copied onto an existing directory lands inside it.
    Contents, permissions and timestamps are preserved.
    """
    return TreeWalker(source, destination, OperationMode.COPY, option, cancel=cancel).run()


def move_tree(
    source: str | os.PathLike[str],
    destination: str | os.PathLike[str],
    option: OptionSpec = None,
    *,
    cancel: CancelFlag | None = None,
) -> WalkReport:
    """Move *source* to *destination*, removing emptied source directories.

    Files are renamed atomically.  Source directories that still hold
    filtered-out content are kept.
    """
    return TreeWalker(source, destination, OperationMode.MOVE, option, cancel=cancel).run()


def delete_tree(
    source: str | os.PathLike[str],
    option: OptionSpec = None,
    *,
    cancel: CancelFlag | None = None,
) -> WalkReport:
    """Delete the accepted files under *source* and every emptied directory."""
    return TreeWalker(source, None, OperationMode.DELETE, option, cancel=cancel).run()


def walk_files(
    root: str | os.PathLike[str],
    option: OptionSpec = None,
    *,
    cancel: CancelFlag | None = None,
) -> Iterator[File]:
    """Lazily yield the accepted files under *root*."""
    return iter(TreeWalker(root, None, OperationMode.FILES, option, cancel=cancel))


def walk_directories(
    root: str | os.PathLike[str],
    option: OptionSpec = None,
    *,
    cancel: CancelFlag | None = None,
) -> Iterator[Directory]:
    """Lazily yield the accepted directories under *root*, the root included
    unless the option strips it."""
    return iter(TreeWalker(root, None, OperationMode.DIRECTORIES, option, cancel=cancel))
