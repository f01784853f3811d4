"""Mount zip and tar archives as read-only directory trees.

An :class:`Archive` extracts into a private temporary directory and yields
a :class:`~pathtree.location.Directory` flagged as archive-backed: its
root is never an entry of an operation, so copying it places the archive
content directly in the destination::

    with File("site.zip").as_archive() as root:
        root.copy_to("public", "**/*.html")
"""

from __future__ import annotations

import logging
import os
import tarfile
import tempfile
import zipfile
from pathlib import Path, PurePosixPath

from .location import Directory

logger = logging.getLogger(__name__)

_TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz")


def archive_format(filename: str | os.PathLike[str]) -> str | None:
    """``"zip"``, ``"tar"`` or ``None`` from the file name extension."""
    lower = os.fspath(filename).lower()
    if lower.endswith((".zip", ".jar")):
        return "zip"
    if lower.endswith(_TAR_SUFFIXES):
        return "tar"
    return None


def is_archive(path: str | os.PathLike[str]) -> bool:
    """True if *path* is an existing zip or tar file."""
    if not os.path.isfile(path):
        return False
    return zipfile.is_zipfile(path) or tarfile.is_tarfile(path)


def _safe_members(tf: tarfile.TarFile) -> list[tarfile.TarInfo]:
    """Regular files and directories with relative, non-escaping names."""
    members = []
    for member in tf.getmembers():
        name = PurePosixPath(member.name)
        if name.is_absolute() or ".." in name.parts:
            logger.warning("Skipping unsafe archive member: %s", member.name)
            continue
        if not (member.isfile() or member.isdir()):
            logger.debug("Skipping non-regular archive member: %s", member.name)
            continue
        members.append(member)
    return members


class Archive:
    """Context manager exposing the content of a zip or tar file.

    Args:
        path: The archive file.  The format is sniffed from the content,
            not the name.

    Raises:
        FileNotFoundError: *path* does not exist.
        ValueError: *path* is neither a zip nor a tar file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._tmp: tempfile.TemporaryDirectory | None = None

    def __repr__(self) -> str:
        return f"Archive({str(self.path)!r})"

    def __enter__(self) -> Directory:
        if not self.path.is_file():
            raise FileNotFoundError(f"Archive not found: {self.path}")
        self._tmp = tempfile.TemporaryDirectory(prefix="pathtree-archive-")
        try:
            self._extract(Path(self._tmp.name))
        except BaseException:
            self._tmp.cleanup()
            self._tmp = None
            raise
        return Directory(self._tmp.name, archive=True)

    def __exit__(self, *exc_info) -> None:
        if self._tmp is not None:
            self._tmp.cleanup()
            self._tmp = None

    def _extract(self, into: Path) -> None:
        if zipfile.is_zipfile(self.path):
            with zipfile.ZipFile(self.path, "r") as zf:
                # ZipFile.extractall already neutralizes absolute and ".." names
                zf.extractall(into)
            logger.debug("Extracted zip %s into %s", self.path, into)
            return
        try:
            tf = tarfile.open(self.path, mode="r:*")
        except tarfile.TarError as exc:
            raise ValueError(f"Not a zip or tar archive: {self.path}") from exc
        with tf:
            if hasattr(tarfile, "data_filter"):
                tf.extractall(into, filter="data")
            else:
                tf.extractall(into, members=_safe_members(tf))
        logger.debug("Extracted tar %s into %s", self.path, into)
