"""Glob-style path matching for file triggers.

Supported syntax:
    ``*``      any run of characters except ``/``
    ``**``     any run of characters including ``/``; ``**/`` also matches
               zero directories, so ``src/**/*.ts`` matches ``src/a.ts``
    ``?``      exactly one character except ``/``
    ``[abc]``  character class, ``[!abc]`` negated

Matching is case-sensitive and anchored to the whole path.
"""

from __future__ import annotations

import re
from functools import lru_cache

SEP = "/"


def translate(pattern: str) -> str:
    """Translate a glob into an (unanchored) regular expression string."""
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            if j - i == 1:
                out.append("[^/]*")
            elif j < n and pattern[j] == SEP:
                out.append("(?:.*/)?")
                j += 1
            else:
                out.append(".*")
            i = j
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                raise ValueError(f"Unbalanced '[' in glob {pattern!r}")
            body = pattern[i + 1 : j]
            negate = body[:1] in ("!", "^")
            if negate:
                body = body[1:]
            body = body.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")
            out.append(f"[^/{body}]" if negate else f"[{body}]")
            i = j + 1
        else:
            out.append(re.escape(c))
            i += 1
    return "".join(out)


@lru_cache(maxsize=None)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(translate(pattern))


def validate_glob(pattern: object) -> None:
    """Raise ValueError if *pattern* is not a usable glob."""
    if not isinstance(pattern, str):
        raise ValueError(f"Path pattern must be a string, got {type(pattern).__name__}")
    if not pattern.strip():
        raise ValueError("Path pattern is empty")
    try:
        _compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid glob {pattern!r}: {e}") from e


def normalize_path(path: str) -> str:
    """Strip leading ``./`` segments so relative spellings compare equal."""
    while path.startswith("./"):
        path = path[2:]
    return path


def matches(pattern: str, path: str) -> bool:
    """Return True if *path* satisfies the glob *pattern*."""
    if not path or not pattern:
        return False
    return _compile(pattern).fullmatch(normalize_path(path)) is not None
