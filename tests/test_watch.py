"""Tests for live change observation."""

import os
import shutil
import time

import pytest

from pathtree import Directory, EventKind, File
from pathtree.watch import WatchRegistrar

TIMEOUT = 10.0


def collect_until(events, predicate, timeout=TIMEOUT):
    """Gather events until one satisfies *predicate*; fail on timeout."""
    seen = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        event = events.get(timeout=0.2)
        if event is None:
            continue
        seen.append(event)
        if predicate(event):
            return seen
    pytest.fail(f"No matching event within {timeout}s; saw {seen!r}")


def is_event(kind, name):
    return lambda e: e.kind is kind and e.location.name == name


class TestObserve:
    def test_new_subdirectory_then_file(self, tmp_path):
        with Directory(tmp_path).observe() as events:
            (tmp_path / "sub").mkdir()
            seen = collect_until(events, is_event(EventKind.CREATED, "sub"))
            assert isinstance(seen[-1].location, Directory)

            (tmp_path / "sub" / "f.txt").write_text("x")
            seen += collect_until(events, is_event(EventKind.CREATED, "f.txt"))

        created = [e.location.name for e in seen if e.kind is EventKind.CREATED]
        assert created.index("sub") < created.index("f.txt")
        assert seen[-1].location == File(tmp_path / "sub" / "f.txt")
        assert seen[-1].count == 1

    def test_new_subdirectory_with_patterns(self, tmp_path):
        with Directory(tmp_path).observe("!ignored/**") as events:
            (tmp_path / "sub").mkdir()
            collect_until(events, is_event(EventKind.CREATED, "sub"))
            (tmp_path / "sub" / "f.txt").write_text("x")
            seen = collect_until(events, is_event(EventKind.CREATED, "f.txt"))
        assert seen[-1].location == File(tmp_path / "sub" / "f.txt")

    def test_pruned_subtree_is_silent(self, tmp_path):
        (tmp_path / "ignored").mkdir()
        with Directory(tmp_path).observe("!ignored/**") as events:
            (tmp_path / "ignored" / "x.txt").write_text("x")
            (tmp_path / "done.txt").write_text("done")
            seen = collect_until(events, is_event(EventKind.CREATED, "done.txt"))
        assert all(e.location.name != "x.txt" for e in seen)

    def test_file_patterns(self, tmp_path):
        with Directory(tmp_path).observe("*.txt", "!*.log") as events:
            (tmp_path / "skip.log").write_text("x")
            (tmp_path / "keep.txt").write_text("x")
            seen = collect_until(events, is_event(EventKind.CREATED, "keep.txt"))
        assert all(e.location.name != "skip.log" for e in seen)

    def test_modified_and_deleted(self, tmp_path):
        target = tmp_path / "f.txt"
        target.write_text("one")
        with Directory(tmp_path).observe() as events:
            target.write_text("two")
            collect_until(events, is_event(EventKind.MODIFIED, "f.txt"))
            target.unlink()
            collect_until(events, is_event(EventKind.DELETED, "f.txt"))

    def test_observe_single_file(self, tmp_path):
        f = File(tmp_path / "watched.txt")
        with f.observe() as events:
            (tmp_path / "other.txt").write_text("x")
            f.write_text("hello")
            seen = collect_until(events, lambda e: e.location == f)
        assert all(e.location == f for e in seen)

    def test_pruned_directory_itself_is_reported(self, tmp_path):
        with Directory(tmp_path).observe("!ignored/**") as events:
            (tmp_path / "ignored").mkdir()
            seen = collect_until(events, is_event(EventKind.CREATED, "ignored"))
            assert seen[-1].location == Directory(tmp_path / "ignored")

            (tmp_path / "ignored").rmdir()
            seen = collect_until(events, is_event(EventKind.DELETED, "ignored"))
            assert seen[-1].location == Directory(tmp_path / "ignored")

    def test_moved_in_subtree_with_patterns(self, tmp_path):
        root = tmp_path / "root"
        root.mkdir()
        (tmp_path / "stage" / "moved" / "x" / "y").mkdir(parents=True)
        with Directory(root).observe("!ignored/**") as events:
            os.rename(tmp_path / "stage" / "moved", root / "moved")
            seen = collect_until(events, is_event(EventKind.CREATED, "moved"))
            assert seen[-1].location == Directory(root / "moved")

            (root / "moved" / "x" / "y" / "f.txt").write_text("x")
            seen = collect_until(events, is_event(EventKind.CREATED, "f.txt"))
        assert seen[-1].location == File(root / "moved" / "x" / "y" / "f.txt")


class TestDispose:
    def test_iteration_ends_after_dispose(self, tmp_path):
        events = Directory(tmp_path).observe()
        assert not events.disposed
        events.dispose()
        assert events.disposed
        for _ in events:
            pass
        assert events.get(timeout=0.1) is None

    def test_dispose_twice(self, tmp_path):
        events = Directory(tmp_path).observe()
        events.dispose()
        events.dispose()
        assert events.disposed

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            WatchRegistrar(tmp_path / "missing").start()

    def test_subscriptions_seeded_from_walk(self, tmp_path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "skip" / "c").mkdir(parents=True)
        registrar = WatchRegistrar(tmp_path, ["!skip/**"])
        events = registrar.start()
        try:
            rels = sorted(p.relative_to(registrar.real_root).as_posix()
                          for p in registrar.subscriptions)
            assert rels == [".", "a", "a/b"]
        finally:
            events.dispose()

    def test_pruned_directory_recorded_at_start(self, tmp_path):
        (tmp_path / "ignored" / "deep").mkdir(parents=True)
        registrar = WatchRegistrar(tmp_path, ["!ignored/**"])
        events = registrar.start()
        try:
            assert registrar.pruned == {registrar.real_root / "ignored"}
            shutil.rmtree(tmp_path / "ignored")
            seen = collect_until(events, is_event(EventKind.DELETED, "ignored"))
            assert isinstance(seen[-1].location, Directory)
            assert all(e.location.name != "deep" for e in seen)
        finally:
            events.dispose()

    def test_subscriptions_shrink_after_removal(self, tmp_path):
        (tmp_path / "sub" / "inner").mkdir(parents=True)
        registrar = WatchRegistrar(tmp_path, ["!ignored/**"])
        events = registrar.start()
        try:
            sub = registrar.real_root / "sub"
            assert {sub, sub / "inner"} <= registrar.subscriptions
            shutil.rmtree(tmp_path / "sub")
            deadline = time.monotonic() + TIMEOUT
            while sub in registrar.subscriptions or sub / "inner" in registrar.subscriptions:
                if time.monotonic() > deadline:
                    pytest.fail(f"Still subscribed: {sorted(registrar.subscriptions)}")
                time.sleep(0.1)
            assert registrar.subscriptions == {registrar.real_root}
        finally:
            events.dispose()
