"""Ignore-file support for tree walks.

Combines patterns read from ``exclude_from`` files with ``.gitignore``
files discovered while walking into a single check used by the walker
next to the compiled glob predicates.

Pattern syntax follows gitignore rules (implemented by
``dulwich.ignore.IgnoreFilter``).  Paths are relative to the walk root
(not the walk base), since that is where ignore files live.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from dulwich.ignore import IgnoreFilter


class IgnoreRules:
    """Gitignore-style exclusions for one walk."""

    def __init__(
        self,
        *,
        exclude_from: Sequence[str | Path] = (),
        gitignore: bool = False,
    ) -> None:
        base_lines: list[bytes] = []
        for source in exclude_from:
            for raw in Path(source).read_bytes().splitlines():
                line = raw.strip()
                if line and not line.startswith(b"#"):
                    base_lines.append(line)
        self._base: IgnoreFilter | None = (
            IgnoreFilter(base_lines) if base_lines else None
        )
        self._gitignore = gitignore
        # {rel_dir: IgnoreFilter | None}, loaded as directories are entered
        self._dir_filters: dict[str, IgnoreFilter | None] = {}

    @property
    def active(self) -> bool:
        """True if any ignore source is configured."""
        return self._base is not None or self._gitignore

    def enter_directory(self, abs_dir: Path, rel_dir: str) -> None:
        """Load ``.gitignore`` from *abs_dir* if gitignore mode is on."""
        if not self._gitignore or rel_dir in self._dir_filters:
            return
        gi = abs_dir / ".gitignore"
        if gi.is_file():
            self._dir_filters[rel_dir] = IgnoreFilter.from_path(str(gi))
        else:
            self._dir_filters[rel_dir] = None

    def is_ignored(self, rel_path: str, *, is_dir: bool = False) -> bool:
        """Check *rel_path* against exclude files and loaded ``.gitignore`` files.

        Only ``.gitignore`` files of directories already passed to
        :meth:`enter_directory` take part.
        """
        if not rel_path:
            return False
        check = rel_path + "/" if is_dir else rel_path

        if self._base is not None and self._base.is_ignored(check) is True:
            return True

        if not self._gitignore:
            return False

        if not is_dir and rel_path.rsplit("/", 1)[-1] == ".gitignore":
            return True

        # Deepest .gitignore wins; an explicit negation stops the search.
        parts = rel_path.split("/")
        for depth in range(len(parts) - 1, -1, -1):
            filt = self._dir_filters.get("/".join(parts[:depth]))
            if filt is None:
                continue
            sub = "/".join(parts[depth:])
            result = filt.is_ignored(sub + "/" if is_dir else sub)
            if result is not None:
                return result
        return False
