"""Advisory exclusive file lock across threads and processes.

``fcntl.flock`` on POSIX and ``msvcrt.locking`` on Windows serialize
processes; a per-file ``threading.Lock`` serializes threads of this
process, since ``flock`` alone does not exclude threads sharing it.
"""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from typing import Iterator

# Per-process threading locks, keyed by file identity
_thread_locks: dict[tuple[int, int] | str, threading.Lock] = {}
_thread_locks_guard = threading.Lock()


def _get_thread_lock(path: str) -> threading.Lock:
    real = os.path.realpath(path)
    try:
        st = os.stat(real)
        key: tuple[int, int] | str = (st.st_dev, st.st_ino)
        if st.st_ino == 0:
            key = os.path.normcase(real)
    except OSError:
        key = os.path.normcase(real)
    with _thread_locks_guard:
        if key not in _thread_locks:
            _thread_locks[key] = threading.Lock()
        return _thread_locks[key]


def _lock_target(path: str) -> str:
    """Directories are locked through a ``.pathtree.lock`` file inside them."""
    if os.path.isdir(path):
        return os.path.join(path, ".pathtree.lock")
    return path


def _acquire_thread_lock(path: str, blocking: bool) -> threading.Lock:
    tlock = _get_thread_lock(path)
    if not tlock.acquire(blocking):
        raise BlockingIOError(f"Lock held by another thread: {path}")
    return tlock


try:
    import fcntl

    @contextmanager
    def lock(path: str | os.PathLike[str], *, blocking: bool = True) -> Iterator[None]:
        """Hold an exclusive lock on *path* (created if absent) for the block.

        Raises:
            BlockingIOError: *blocking* is false and the lock is taken.
        """
        target = _lock_target(os.fspath(path))
        fd = os.open(target, os.O_CREAT | os.O_RDWR | getattr(os, "O_CLOEXEC", 0))
        try:
            tlock = _acquire_thread_lock(target, blocking)
            try:
                flags = fcntl.LOCK_EX if blocking else fcntl.LOCK_EX | fcntl.LOCK_NB
                fcntl.flock(fd, flags)
                try:
                    yield
                finally:
                    fcntl.flock(fd, fcntl.LOCK_UN)
            finally:
                tlock.release()
        finally:
            os.close(fd)

except ImportError:
    import msvcrt

    @contextmanager
    def lock(path: str | os.PathLike[str], *, blocking: bool = True) -> Iterator[None]:
        """Hold an exclusive lock on *path* (created if absent) for the block.

        Raises:
            BlockingIOError: *blocking* is false and the lock is taken.
        """
        target = _lock_target(os.fspath(path))
        fd = os.open(target, os.O_CREAT | os.O_RDWR)
        os.set_inheritable(fd, False)
        try:
            tlock = _acquire_thread_lock(target, blocking)
            try:
                try:
                    msvcrt.locking(fd, msvcrt.LK_LOCK if blocking else msvcrt.LK_NBLCK, 1)
                except OSError as exc:
                    raise BlockingIOError(f"Lock held by another process: {target}") from exc
                try:
                    yield
                finally:
                    msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)
            finally:
                tlock.release()
        finally:
            os.close(fd)
