from __future__ import annotations

import os
import posixpath
import re
from fnmatch import fnmatchcase
from typing import Iterable


class InvalidPattern(ValueError):
    pass


def validate_pattern(pattern) -> str:
    if not isinstance(pattern, str) or not pattern:
        raise InvalidPattern(f"pattern must be a non-empty string, got {pattern!r}")
    if "**" in pattern:
        raise InvalidPattern(f"recursive '**' is not supported: {pattern!r}")
    return pattern


def _segments(path: str):
    return [s for s in path.split("/") if s not in ("", ".")]


def matches(pattern: str, path: str) -> bool:
    """
    Shell-glob match of `pattern` against `path`.

    A pattern without '/' is tested against the basename only, so '*.ts'
    matches 'src/app.ts'. A pattern with '/' is tested segment by segment
    and both sides must have the same number of segments; '*' never spans
    a '/'. Raises InvalidPattern for empty patterns and '**'.
    """
    validate_pattern(pattern)
    path = path.replace("\\", "/")

    if "/" not in pattern:
        return fnmatchcase(posixpath.basename(path.rstrip("/")), pattern)

    pat_parts = _segments(pattern)
    path_parts = _segments(path)
    if pattern.startswith("/") != path.startswith("/"):
        return False
    if len(pat_parts) != len(path_parts):
        return False
    return all(fnmatchcase(seg, pat) for seg, pat in zip(path_parts, pat_parts))


def matches_any(patterns: Iterable[str], path: str) -> bool:
    # validate everything first so a bad pattern is reported even if an
    # earlier one already matched
    patterns = [validate_pattern(p) for p in patterns]
    return any(matches(p, path) for p in patterns)


def containing_dir(path: str) -> str:
    return os.path.dirname(path.rstrip("/")) or "."


_PLACEHOLDER = re.compile(r"\{(file|dir)\}")


def expand_command(template: str, file_path: str) -> str:
    """Replace {file} and {dir}; any other {...} token is left as written."""
    values = {"file": file_path, "dir": containing_dir(file_path)}
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
