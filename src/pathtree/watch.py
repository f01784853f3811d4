"""Live change notification for directory trees.

:meth:`Directory.observe <pathtree.location.Directory.observe>` starts a
:class:`WatchRegistrar` and returns an :class:`Observation`, an iterable of
:class:`WatchEvent` that runs until disposed::

    with Directory("src").observe("**/*.py") as events:
        for event in events:
            print(event.kind, event.location)

Notifications come from ``watchfiles`` (the ``notify`` crate).  The OS
watch itself is recursive; the set of *subscribed* directories decides
which events are delivered: the content of a pruned subtree stays silent
(the pruned directory itself is still reported) and newly created
directories join as their creation events arrive.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from watchfiles import Change
from watchfiles._rust_notify import RustNotify

from ._filter import compile_filter
from .exceptions import WatchServiceClosedError
from .location import Directory, File, Location
from .walk import OperationMode, TreeWalker

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 50
DEFAULT_STEP_MS = 50
DEFAULT_POLL_DELAY_MS = 300

_CLOSED = object()


class EventKind(str, Enum):
    CREATED = "created"
    DELETED = "deleted"
    MODIFIED = "modified"

    def __str__(self) -> str:          # noqa: D105
        return self.value


_KINDS = {
    Change.added: EventKind.CREATED,
    Change.modified: EventKind.MODIFIED,
    Change.deleted: EventKind.DELETED,
}


@dataclass(frozen=True)
class WatchEvent:
    """One delivered change.

    Attributes:
        kind: The :class:`EventKind`.
        location: The changed entry, under the observed root.
        count: Occurrences folded into this event.
    """
    kind: EventKind
    location: Location
    count: int = 1


class Observation:
    """Consumer side of a running watch.

    Iterating blocks for the next event and stops once disposed.  Use
    :meth:`get` to wait with a timeout instead.
    """

    def __init__(self, registrar: WatchRegistrar) -> None:
        self._registrar = registrar
        self._events: queue.Queue = registrar.events
        self._done = False

    def __iter__(self) -> Iterator[WatchEvent]:
        while True:
            event = self.get()
            if event is None:
                return
            yield event

    def get(self, timeout: float | None = None) -> WatchEvent | None:
        """Next event, or ``None`` on timeout or once the watch is closed."""
        if self._done:
            return None
        try:
            item = self._events.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._done = True
            return None
        return item

    @property
    def disposed(self) -> bool:
        return self._registrar.disposed.is_set()

    def dispose(self) -> None:
        """Stop watching; safe to call more than once."""
        self._registrar.close()

    def __enter__(self) -> Observation:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()


class WatchRegistrar:
    """Maintains the subscribed directory set and runs the event loop.

    Args:
        root: Directory to watch.
        patterns: Glob patterns as for a walk; the content of ``!dir/**``
            subtrees is not subscribed.  Default: everything.
        debounce_ms: Window in which raw events are grouped into a batch.
        step_ms: Polling step of the notification loop.
        force_polling: Use stat polling instead of OS notifications.
        poll_delay_ms: Poll interval when polling.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        patterns: Iterable[str] = (),
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        step_ms: int = DEFAULT_STEP_MS,
        force_polling: bool = False,
        poll_delay_ms: int = DEFAULT_POLL_DELAY_MS,
    ) -> None:
        self.root = Path(root)
        self.real_root = Path(os.path.realpath(root))
        self.patterns = list(patterns)
        # Without patterns the single recursive OS registration covers it all
        self.match_everything = self.patterns in ([], ["**"])
        self.filter = compile_filter(self.patterns, OperationMode.OBSERVE)
        self.file_filter = compile_filter(self.patterns, OperationMode.FILES)
        self.debounce_ms = debounce_ms
        self.step_ms = step_ms
        self.force_polling = force_polling
        self.poll_delay_ms = poll_delay_ms
        self.subscriptions: set[Path] = set()
        # Pruned directories directly beneath a subscription; never subscribed
        self.pruned: set[Path] = set()
        self.events: queue.Queue = queue.Queue()
        self.disposed = threading.Event()
        self._notify: RustNotify | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> Observation:
        """Subscribe the initial directories and open the OS watch.

        Changes made after this returns are observed.

        Raises:
            NotADirectoryError: The root is not an existing directory.
        """
        if not self.real_root.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.root}")
        if self.match_everything:
            self.subscriptions.add(self.real_root)
        else:
            self._subscribe_tree(self.real_root)
        self._notify = RustNotify(
            watch_paths=[str(self.real_root)],
            debug=False,
            force_polling=self.force_polling,
            poll_delay_ms=self.poll_delay_ms,
            recursive=True,
            ignore_permission_denied=False,
        )
        self._thread = threading.Thread(
            target=self._run, name=f"pathtree-watch:{self.root}", daemon=True,
        )
        self._thread.start()
        logger.debug("Watching %s (%d directories)", self.root, len(self.subscriptions))
        return Observation(self)

    def close(self) -> None:
        self.disposed.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def _run(self) -> None:
        assert self._notify is not None
        try:
            with self._notify as notify:
                while True:
                    try:
                        batch = self._wait(notify)
                    except WatchServiceClosedError:
                        break
                    if batch:
                        self._process(batch)
        except Exception:
            logger.exception("Watch loop for %s failed", self.root)
        finally:
            self.events.put(_CLOSED)
            logger.debug("Stopped watching %s", self.root)

    def _wait(self, notify: RustNotify) -> set[tuple[int, str]]:
        result = notify.watch(self.debounce_ms, self.step_ms, 5000, self.disposed)
        if result == "stop" or self.disposed.is_set():
            raise WatchServiceClosedError(str(self.root))
        if isinstance(result, str):
            # "timeout" or "signal"
            return set()
        return result

    def _process(self, batch: set[tuple[int, str]]) -> None:
        dropped: list[Path] = []
        # Path order: a directory precedes its content
        for raw_change, raw_path in sorted(batch, key=lambda c: (c[1], c[0])):
            if self.disposed.is_set():
                return
            try:
                kind = _KINDS[Change(raw_change)]
                path = Path(raw_path)
                self._handle(kind, path, dropped)
            except Exception:
                logger.warning("Dropped watch event %s %s", raw_change, raw_path, exc_info=True)
        for path in dropped:
            self._unsubscribe_tree(path)

    def _handle(self, kind: EventKind, path: Path, dropped: list[Path]) -> None:
        if path == self.real_root or self.real_root not in path.parents:
            return
        if self.match_everything:
            is_dir = path.is_dir()
        else:
            if path.parent not in self.subscriptions:
                return
            if kind is EventKind.DELETED:
                is_dir = path in self.subscriptions or path in self.pruned
            else:
                is_dir = path.is_dir()
        rel = path.relative_to(self.real_root).as_posix()

        if is_dir:
            if kind is EventKind.CREATED and not self.match_everything:
                if self.filter.prunes(rel):
                    self.pruned.add(path)
                else:
                    self._subscribe_tree(path)
            elif kind is EventKind.DELETED:
                dropped.append(path)
            if not self.filter.accepts(rel):
                return
        elif not self.file_filter.accepts(rel):
            return
        target = self.root / rel
        location: Location = Directory(target) if is_dir else File(target)
        self.events.put(WatchEvent(kind, location))

    def _subscribe_tree(self, directory: Path) -> None:
        """Subscribe *directory* and every non-pruned directory beneath it."""
        walker = TreeWalker(
            directory, None, OperationMode.OBSERVE, self.patterns,
            cancel=self.disposed, base=self.real_root,
        )
        for found in walker:
            subscribed = Path(found)
            self.subscriptions.add(subscribed)
            self._record_pruned(subscribed)

    def _record_pruned(self, directory: Path) -> None:
        """Remember the pruned subdirectories of *directory*."""
        try:
            with os.scandir(directory) as it:
                children = [Path(e.path) for e in it if e.is_dir(follow_symlinks=False)]
        except OSError as exc:
            logger.debug("Cannot list %s: %s", directory, exc)
            return
        for child in children:
            if self.filter.prunes(child.relative_to(self.real_root).as_posix()):
                self.pruned.add(child)

    def _unsubscribe_tree(self, directory: Path) -> None:
        def keep(p: Path) -> bool:
            return p != directory and directory not in p.parents

        self.subscriptions = {p for p in self.subscriptions if keep(p)}
        self.pruned = {p for p in self.pruned if keep(p)}
