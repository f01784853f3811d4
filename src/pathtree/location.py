"""Typed path handles: :class:`File` and :class:`Directory`.

A location is an immutable value naming a path; it does not require the
path to exist.  Equality, hashing and ordering use the normalized path
string, independent of the handle's kind::

    >>> File("a/b.txt") == Directory("a/b.txt")
    True

Tree operations (``copy_to``, ``move_to``, ``delete``, ``walk_files``,
``walk_directories``, ``observe``) delegate to :mod:`pathtree.walk` and
:mod:`pathtree.watch`.
"""

from __future__ import annotations

import datetime
import errno
import io
import os
import tempfile
import time
from functools import total_ordering
from pathlib import Path
from typing import IO, TYPE_CHECKING, ContextManager, Iterator

from ._glob import glob_match
from .exceptions import AlreadyExistsError

if TYPE_CHECKING:
    from .archive import Archive
    from .options import Option, OptionSpec
    from .walk import WalkReport
    from .watch import Observation


def _option_of(specs: tuple) -> OptionSpec:
    """Collapse ``*specs`` (one option spec, or several patterns)."""
    if not specs:
        return None
    if len(specs) == 1:
        return specs[0]
    return list(specs)


@total_ordering
class Location:
    """Base class of :class:`File` and :class:`Directory`."""

    __slots__ = ("_path",)

    def __init__(self, path: str | os.PathLike[str] = "") -> None:
        self._path = Path(path)

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def __fspath__(self) -> str:
        return os.fspath(self._path)

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Location):
            return self._path == other._path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)

    def __lt__(self, other: Location) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.path < other.path

    # ------------------------------------------------------------------
    # Name decomposition
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        """The last path component (``""`` for an empty path)."""
        return self._path.name

    @property
    def base(self) -> str:
        """The name without its extension (``".gitignore"`` -> ``""``)."""
        name = self.name
        index = name.rfind(".")
        return name if index == -1 else name[:index]

    @property
    def extension(self) -> str:
        """The text after the last dot, or ``""`` (``".gitignore"`` -> ``"gitignore"``)."""
        name = self.name
        index = name.rfind(".")
        return "" if index == -1 else name[index + 1:]

    def with_base(self, base: str):
        """Sibling location with a new base name and the same extension."""
        extension = self.extension
        name = f"{base}.{extension}" if extension else base
        return type(self)(self._path.with_name(name))

    def with_extension(self, extension: str):
        """Sibling location with the same base name and a new extension."""
        return type(self)(self._path.with_name(f"{self.base}.{extension}"))

    @property
    def path(self) -> str:
        """The path with ``/`` separators on every platform."""
        return self._path.as_posix() if self._path.parts else ""

    def as_path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Directory:
        return Directory(self._path.parent)

    def absolutize(self):
        """This location as an absolute path; ``self`` if already absolute."""
        if self._path.is_absolute():
            return self
        return type(self)(self._path.absolute())

    def relativize(self, other: Location):
        """*other* expressed relative to this location, keeping *other*'s kind."""
        return type(other)(os.path.relpath(other._path, self._path))

    def is_absolute(self) -> bool:
        return self._path.is_absolute()

    def is_relative(self) -> bool:
        return not self._path.is_absolute()

    def is_root(self) -> bool:
        return self._path.is_absolute() and self._path.parent == self._path

    def as_file(self) -> File:
        return self if isinstance(self, File) else File(self._path)

    def as_directory(self) -> Directory:
        return self if isinstance(self, Directory) else Directory(self._path)

    def match(self, *patterns: str) -> bool:
        """True if the path matches any of *patterns* (``!`` negates one)."""
        for pattern in patterns:
            expected = True
            if pattern.startswith("!"):
                pattern = pattern[1:]
                expected = False
            if glob_match(pattern, self.path) is expected:
                return True
        return False

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def is_present(self) -> bool:
        return os.path.lexists(self._path)

    def is_absent(self) -> bool:
        return not os.path.lexists(self._path)

    def is_file(self) -> bool:
        return self._path.is_file()

    def is_directory(self) -> bool:
        return self._path.is_dir()

    def is_symlink(self) -> bool:
        return self._path.is_symlink()

    def stat(self) -> os.stat_result:
        return self._path.stat()

    def last_modified(self) -> float:
        """Modification time in seconds since the epoch (0 if absent)."""
        try:
            return self._path.stat().st_mtime
        except FileNotFoundError:
            return 0.0

    def set_last_modified(self, when: float | datetime.datetime):
        if isinstance(when, datetime.datetime):
            when = when.timestamp()
        os.utime(self._path, (when, when))
        return self

    def touch(self):
        """Create the location if absent, otherwise bump its modification time."""
        if self.is_absent():
            return self.create()
        return self.set_last_modified(time.time())

    def create(self):
        raise NotImplementedError

    def lock(self, *, blocking: bool = True) -> ContextManager[None]:
        """Advisory exclusive lock on this location (see :mod:`pathtree.lock`)."""
        from .lock import lock
        return lock(self._path, blocking=blocking)

    # ------------------------------------------------------------------
    # Tree operations
    # ------------------------------------------------------------------

    def copy_to(self, destination: str | os.PathLike[str], *option):
        """Copy this location into *destination*; return where it landed."""
        from .options import Option
        from .walk import copy_tree
        opt = Option.of(_option_of(option))
        landing = self._landing(destination, opt)
        copy_tree(self, destination, opt)
        return landing

    def move_to(self, destination: str | os.PathLike[str], *option):
        """Move this location into *destination*; return where it landed."""
        from .options import Option
        from .walk import move_tree
        opt = Option.of(_option_of(option))
        landing = self._landing(destination, opt)
        move_tree(self, destination, opt)
        return landing

    def delete(self, *option) -> WalkReport:
        """Delete this location (or its accepted content)."""
        from .walk import delete_tree
        return delete_tree(self, _option_of(option))

    def move_up(self):
        """Shorthand for ``move_to(parent.parent)``."""
        return self.move_to(self.parent.parent)

    def rename_to(self, name: str):
        """Rename within the parent directory.

        Raises:
            TypeError: *name* is ``None``.
            AlreadyExistsError: An entry called *name* already exists.
        """
        if name is None:
            raise TypeError("name must not be None")
        if name == self.name:
            return self
        target = self._path.with_name(name)
        if os.path.lexists(target):
            raise AlreadyExistsError(errno.EEXIST, "Target already exists", str(target))
        os.rename(self._path, target)
        return type(self)(target)

    def _landing(self, destination, option: Option) -> Location:
        raise NotImplementedError


class File(Location):
    """A file location."""

    __slots__ = ()

    def create(self) -> File:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.touch(exist_ok=True)
        return self

    def size(self) -> int:
        try:
            return self._path.stat().st_size
        except FileNotFoundError:
            return 0

    def _landing(self, destination, option: Option) -> File:
        target = Path(destination) / str(option.allocation)
        if target.is_dir():
            target = target / self.name
        return File(target)

    # ------------------------------------------------------------------
    # Content (an absent file reads as empty)
    # ------------------------------------------------------------------

    def read_bytes(self) -> bytes:
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return b""

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read_bytes().decode(encoding)

    def lines(self, encoding: str = "utf-8") -> list[str]:
        return self.read_text(encoding).splitlines()

    def write_bytes(self, data: bytes) -> File:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(data)
        return self

    def write_text(self, text: str, encoding: str = "utf-8") -> File:
        return self.write_bytes(text.encode(encoding))

    def new_input_stream(self) -> IO[bytes]:
        if self.is_absent():
            return io.BytesIO(b"")
        return open(self._path, "rb")

    def new_output_stream(self) -> IO[bytes]:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        return open(self._path, "wb")

    # ------------------------------------------------------------------
    # Archives
    # ------------------------------------------------------------------

    def as_archive(self) -> Archive:
        """Context manager mounting this zip or tar file as a directory."""
        from .archive import Archive
        return Archive(self._path)

    def unpack(self, destination: str | os.PathLike[str] | None = None, *option) -> Directory:
        """Extract this archive into *destination* (a new temp dir by default)."""
        dest = Directory(destination) if destination is not None else temporary_directory()
        with self.as_archive() as root:
            root.copy_to(dest, *option)
        return dest

    def observe_unpacking_to(self, destination: str | os.PathLike[str], *option) -> Iterator[File]:
        """Extract this archive, yielding each file as it is written."""
        from .walk import OperationMode, TreeWalker
        with self.as_archive() as root:
            yield from TreeWalker(root, destination, OperationMode.COPY, _option_of(option))

    def observe(self, **kwargs) -> Observation:
        """Observe changes of this file through its parent directory."""
        escaped = "".join("\\" + c if c in "*?[]{}\\,!" else c for c in self.name)
        return self.parent.observe(escaped, "!*/**", **kwargs)


class Directory(Location):
    """A directory location.

    Attributes:
        archive: ``True`` for the mounted root of an archive; such a root is
            never part of an operation itself (its root is always stripped).
    """

    __slots__ = ("archive",)

    def __init__(self, path: str | os.PathLike[str] = "", *, archive: bool = False) -> None:
        super().__init__(path)
        self.archive = archive

    def file(self, name: str) -> File:
        return File(self._path / name)

    def directory(self, name: str) -> Directory:
        return Directory(self._path / name)

    def create(self) -> Directory:
        self._path.mkdir(parents=True, exist_ok=True)
        return self

    def is_empty(self) -> bool:
        try:
            with os.scandir(self._path) as it:
                return next(it, None) is None
        except (FileNotFoundError, NotADirectoryError):
            return True

    def size(self) -> int:
        """Total size of the files beneath this directory."""
        return sum(f.size() for f in self.walk_files())

    def children(self) -> list[Location]:
        """Immediate entries, sorted; empty if absent."""
        try:
            with os.scandir(self._path) as it:
                return sorted(locate(e.path) for e in it)
        except (FileNotFoundError, NotADirectoryError):
            return []

    def descendant(self) -> Iterator[Location]:
        """Every file and directory beneath this one, top-down."""
        for dirpath, dirnames, filenames in os.walk(self._path):
            dirnames.sort()
            for name in sorted(filenames):
                yield File(os.path.join(dirpath, name))
            for name in dirnames:
                yield Directory(os.path.join(dirpath, name))

    def walk_files(self, *option) -> Iterator[File]:
        from .walk import walk_files
        return walk_files(self, _option_of(option))

    def walk_directories(self, *option) -> Iterator[Directory]:
        from .walk import walk_directories
        return walk_directories(self, _option_of(option))

    def observe(self, *patterns: str, **kwargs) -> Observation:
        """Start watching this directory; see :class:`~pathtree.watch.WatchRegistrar`."""
        from .watch import WatchRegistrar
        return WatchRegistrar(self._path, patterns, **kwargs).start()

    def _landing(self, destination, option: Option) -> Directory:
        target = Path(destination) / str(option.allocation)
        if option.accept_root and not self.archive:
            target = target / self.name
        return Directory(target)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def locate(path: str | os.PathLike[str]) -> Location:
    """A :class:`Directory` if *path* is an existing directory, else a :class:`File`."""
    if os.path.isdir(path):
        return Directory(path)
    return File(path)


def temporary_directory() -> Directory:
    """Create a fresh temporary directory (not removed automatically)."""
    return Directory(tempfile.mkdtemp(prefix="pathtree-"))
