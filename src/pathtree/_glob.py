"""Glob-to-regex translation for relative-path matching.

Syntax follows the usual filesystem glob conventions:

- ``*`` matches any run of characters inside one path segment
- ``**`` matches any run of characters across segments; a leading ``**/``
  segment also matches zero directories, so ``**/*.txt`` matches ``a.txt``
- ``?`` matches one character other than ``/``
- ``[abc]``, ``[a-z]``, ``[!abc]`` character classes
- ``{a,b}`` alternation (no nesting)
- ``\\`` escapes the following character

Patterns are matched against the whole POSIX form of a relative path.
"""

from __future__ import annotations

import re
from functools import lru_cache

from .exceptions import InvalidPatternError


def translate(pattern: str) -> str:
    """Return the regular-expression source equivalent to *pattern*.

    Raises :class:`~pathtree.exceptions.InvalidPatternError` for empty
    patterns, unterminated classes or groups, and nested groups.
    """
    if not pattern:
        raise InvalidPatternError(pattern, "empty pattern")

    out: list[str] = []
    i, n = 0, len(pattern)
    in_group = False
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                segment_start = i == 0 or pattern[i - 1] == "/"
                if segment_start and pattern.startswith("**/", i):
                    out.append("(?:.*/)?")
                    i += 3
                else:
                    out.append(".*")
                    i += 2
            else:
                out.append("[^/]*")
                i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            i = _translate_class(pattern, i, out)
        elif c == "{":
            if in_group:
                raise InvalidPatternError(pattern, "nested groups are not supported")
            in_group = True
            out.append("(?:")
            i += 1
        elif c == "}" and in_group:
            in_group = False
            out.append(")")
            i += 1
        elif c == "," and in_group:
            out.append("|")
            i += 1
        elif c == "\\":
            if i + 1 >= n:
                raise InvalidPatternError(pattern, "dangling escape")
            out.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            out.append(re.escape(c))
            i += 1

    if in_group:
        raise InvalidPatternError(pattern, "unterminated group")
    return "".join(out)


def _translate_class(pattern: str, start: int, out: list[str]) -> int:
    """Translate the ``[...]`` class at *start*; return the index after it."""
    j = start + 1
    negate = j < len(pattern) and pattern[j] in "!^"
    if negate:
        j += 1
    # A ']' right after the opening bracket is a literal member
    search_from = j + 1 if j < len(pattern) and pattern[j] == "]" else j
    end = pattern.find("]", search_from)
    if end == -1:
        raise InvalidPatternError(pattern, "unterminated character class")
    body = pattern[j:end]
    if "/" in body:
        raise InvalidPatternError(pattern, "'/' inside a character class")
    body = body.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")
    if negate:
        out.append(f"[^/{body}]")
    else:
        if body.startswith("^"):
            body = "\\" + body
        out.append(f"[{body}]")
    return end + 1


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile *pattern* into a regex matched with ``fullmatch``."""
    source = translate(pattern)
    try:
        return re.compile(source, re.DOTALL)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from None


def glob_match(pattern: str, relative: str) -> bool:
    """Return True if the POSIX relative path *relative* matches *pattern*."""
    return compile_glob(pattern).fullmatch(relative) is not None
