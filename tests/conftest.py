"""Shared fixtures for pathtree tests."""

import os

import pytest
from click.testing import CliRunner


def make_tree(root, spec):
    """Create files (str values) and directories (dict values) under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in spec.items():
        path = root / name
        if isinstance(content, dict):
            make_tree(path, content)
        else:
            path.write_text(content)
    return root


def files_under(root):
    """Sorted POSIX paths of every file beneath *root*."""
    return sorted(
        p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()
    )


@pytest.fixture
def src(tmp_path):
    """A small source tree::

        src/
          a.log       "log"
          a.txt       "alpha"
          empty/
          sub/
            b.txt     "beta"
            deep/
              c.txt   "gamma"
    """
    return make_tree(tmp_path / "src", {
        "a.txt": "alpha",
        "a.log": "log",
        "empty": {},
        "sub": {
            "b.txt": "beta",
            "deep": {"c.txt": "gamma"},
        },
    })


@pytest.fixture
def dest(tmp_path):
    return tmp_path / "dest"


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fixed_mtime():
    """A timestamp well in the past, for preservation checks."""
    return 1_000_000_000


@pytest.fixture
def set_mtime(fixed_mtime):
    def _set(path):
        os.utime(path, (fixed_mtime, fixed_mtime))
    return _set
