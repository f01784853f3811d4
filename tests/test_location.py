"""Tests for File and Directory handles."""

import datetime
import os

import pytest

from conftest import files_under
from pathtree import Directory, File, Location, locate, temporary_directory
from pathtree.exceptions import AlreadyExistsError


# ---------------------------------------------------------------------------
# Names and value semantics
# ---------------------------------------------------------------------------

class TestNames:
    @pytest.mark.parametrize("name", ["a.txt", "archive.tar.gz", "x.y", "a..b"])
    def test_base_and_extension_recompose(self, name):
        f = File(name)
        assert f.base + "." + f.extension == name

    def test_leading_dot(self):
        f = File(".gitignore")
        assert f.base == ""
        assert f.extension == "gitignore"

    def test_no_extension(self):
        f = File("Makefile")
        assert f.base == "Makefile"
        assert f.extension == ""

    def test_with_base_and_extension(self):
        f = File("docs/readme.md")
        assert f.with_base("index") == File("docs/index.md")
        assert f.with_extension("txt") == File("docs/readme.txt")
        assert isinstance(f.with_extension("txt"), File)

    def test_posix_path(self):
        assert File(os.path.join("a", "b.txt")).path == "a/b.txt"


class TestValueSemantics:
    def test_equality_ignores_kind(self):
        assert File("a/b") == Directory("a/b")
        assert hash(File("a/b")) == hash(Directory("a/b"))

    def test_ordering(self):
        assert sorted([File("b"), File("a"), Directory("c")]) == [
            File("a"), File("b"), Directory("c"),
        ]

    def test_fspath(self, tmp_path):
        f = File(tmp_path / "x.txt")
        assert os.fspath(f) == str(tmp_path / "x.txt")

    def test_repr(self):
        assert repr(File("a/b.txt")) == "File('a/b.txt')"


class TestNavigation:
    def test_absolutize_idempotent(self):
        f = File("some/relative.txt")
        once = f.absolutize()
        assert once.is_absolute()
        assert once.absolutize() == once
        assert once.absolutize() is once

    def test_relativize(self, tmp_path):
        root = Directory(tmp_path)
        rel = root.relativize(File(tmp_path / "a" / "b.txt"))
        assert isinstance(rel, File)
        assert rel.path == "a/b.txt"
        assert rel.is_relative()

    def test_parent(self):
        assert File("a/b/c.txt").parent == Directory("a/b")
        assert isinstance(File("a/b/c.txt").parent, Directory)

    def test_is_root(self):
        assert Directory(os.path.abspath(os.sep)).is_root()
        assert not Directory("a").is_root()

    def test_conversions(self):
        f = File("a")
        assert isinstance(f.as_directory(), Directory)
        assert f.as_file() is f

    def test_match(self):
        f = File("src/app.py")
        assert f.match("**/*.py")
        assert not f.match("*.py")
        assert f.match("!**/*.txt")
        assert not f.match("!**/*.py")


# ---------------------------------------------------------------------------
# Attributes and content
# ---------------------------------------------------------------------------

class TestFileContent:
    def test_absent_reads_empty(self, tmp_path):
        f = File(tmp_path / "missing.txt")
        assert f.is_absent()
        assert f.read_text() == ""
        assert f.lines() == []
        assert f.size() == 0
        assert f.last_modified() == 0
        with f.new_input_stream() as stream:
            assert stream.read() == b""

    def test_write_creates_parents(self, tmp_path):
        f = File(tmp_path / "a" / "b" / "c.txt").write_text("one\ntwo\n")
        assert f.is_file()
        assert f.lines() == ["one", "two"]
        assert f.size() == 8

    def test_streams(self, tmp_path):
        f = File(tmp_path / "out" / "data.bin")
        with f.new_output_stream() as out:
            out.write(b"\x00\x01")
        with f.new_input_stream() as stream:
            assert stream.read() == b"\x00\x01"
        assert f.read_bytes() == b"\x00\x01"

    def test_create_and_touch(self, tmp_path):
        f = File(tmp_path / "new" / "empty.txt").touch()
        assert f.is_file()
        assert f.read_bytes() == b""

    def test_set_last_modified(self, tmp_path, fixed_mtime):
        f = File(tmp_path / "f").create()
        f.set_last_modified(datetime.datetime.fromtimestamp(fixed_mtime))
        assert int(f.last_modified()) == fixed_mtime
        f.touch()
        assert f.last_modified() > fixed_mtime


class TestDirectory:
    def test_children_sorted(self, src):
        names = [c.name for c in Directory(src).children()]
        assert names == ["a.log", "a.txt", "empty", "sub"]

    def test_children_kinds(self, src):
        kinds = {c.name: type(c) for c in Directory(src).children()}
        assert kinds["sub"] is Directory
        assert kinds["a.txt"] is File

    def test_children_of_absent(self, tmp_path):
        assert Directory(tmp_path / "nope").children() == []

    def test_descendant(self, src):
        found = {os.path.relpath(d, src).replace(os.sep, "/") for d in Directory(src).descendant()}
        assert found == {"a.log", "a.txt", "empty", "sub", "sub/b.txt", "sub/deep", "sub/deep/c.txt"}

    def test_file_and_directory(self, src):
        d = Directory(src)
        assert d.file("a.txt").read_text() == "alpha"
        assert d.directory("sub").is_directory()

    def test_is_empty_and_create(self, tmp_path):
        d = Directory(tmp_path / "x" / "y")
        assert d.is_empty()
        d.create()
        assert d.is_directory()
        assert d.is_empty()

    def test_size(self, src):
        assert Directory(src).size() == len("alpha") + len("log") + len("beta") + len("gamma")

    def test_walk_files(self, src):
        assert [f.name for f in Directory(src).walk_files("**/*.txt")] == ["a.txt", "b.txt", "c.txt"]

    def test_walk_files_several_patterns(self, src):
        assert [f.name for f in Directory(src).walk_files("*.txt", "*.log")] == ["a.log", "a.txt"]

    def test_walk_directories(self, src):
        assert [d.name for d in Directory(src).walk_directories(lambda o: o.strip())] == [
            "empty", "sub", "deep",
        ]


class TestFactories:
    def test_locate(self, src):
        assert isinstance(locate(src), Directory)
        assert isinstance(locate(src / "a.txt"), File)
        assert isinstance(locate(src / "missing"), File)

    def test_temporary_directory(self):
        d = temporary_directory()
        try:
            assert d.is_directory()
            assert d.name.startswith("pathtree-")
        finally:
            d.delete()
        assert d.is_absent()

    def test_location_base_class(self):
        assert isinstance(File("a"), Location)


# ---------------------------------------------------------------------------
# Tree operations
# ---------------------------------------------------------------------------

class TestOperations:
    def test_copy_to_returns_landing(self, src, dest):
        landed = Directory(src).copy_to(dest)
        assert landed == Directory(dest / "src")
        assert files_under(landed.as_path())[:2] == ["a.log", "a.txt"]

    def test_copy_to_strip_lands_in_destination(self, src, dest):
        landed = Directory(src).copy_to(dest, lambda o: o.strip())
        assert landed == Directory(dest)

    def test_copy_file_into_directory(self, src, dest):
        dest.mkdir()
        landed = File(src / "a.txt").copy_to(dest)
        assert landed == File(dest / "a.txt")
        assert landed.read_text() == "alpha"

    def test_move_to(self, src, dest):
        landed = Directory(src).move_to(dest, "!**/*.log")
        assert landed.is_directory()
        assert files_under(src) == ["a.log"]

    def test_configure_callable_runs_once(self, src, dest):
        calls = []

        def configure(o):
            calls.append(o)
            return o.strip()

        landed = Directory(src).copy_to(dest / "copied", configure)
        assert len(calls) == 1
        assert landed == Directory(dest / "copied")

        landed = Directory(src).move_to(dest / "moved", configure)
        assert len(calls) == 2
        assert landed == Directory(dest / "moved")

    def test_delete(self, src):
        report = Directory(src).delete("**/*.txt")
        assert report.ok
        assert files_under(src) == ["a.log"]

    def test_move_up(self, src):
        moved = File(src / "sub" / "deep" / "c.txt").move_up()
        assert moved == File(src / "sub" / "c.txt")
        assert moved.read_text() == "gamma"
        assert not (src / "sub" / "deep" / "c.txt").exists()


class TestRename:
    def test_rename(self, src):
        renamed = File(src / "a.txt").rename_to("z.txt")
        assert renamed == File(src / "z.txt")
        assert renamed.read_text() == "alpha"
        assert not (src / "a.txt").exists()

    def test_same_name_returns_self(self, src):
        f = File(src / "a.txt")
        assert f.rename_to("a.txt") is f

    def test_none(self, src):
        with pytest.raises(TypeError):
            File(src / "a.txt").rename_to(None)

    def test_existing_file(self, src):
        with pytest.raises(AlreadyExistsError):
            File(src / "a.txt").rename_to("a.log")
        assert (src / "a.txt").read_text() == "alpha"

    def test_existing_directory(self, src):
        with pytest.raises(AlreadyExistsError):
            File(src / "a.txt").rename_to("sub")

    def test_rename_directory(self, src):
        renamed = Directory(src / "sub").rename_to("moved")
        assert isinstance(renamed, Directory)
        assert (src / "moved" / "b.txt").read_text() == "beta"
