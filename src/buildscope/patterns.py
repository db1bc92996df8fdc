"""Ant-style glob patterns: normalization and path matching.

A pattern is a ``/``-delimited sequence of segments.  Within a segment ``*``
matches any run of characters and ``?`` matches exactly one; a segment that is
exactly ``**`` matches zero or more whole path segments.  Patterns are always
relative.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

from buildscope.errors import PatternError

SEPARATOR = "/"
RECURSIVE = "**"

# Ant's DirectoryScanner default excludes.
DEFAULT_EXCLUDES: tuple[str, ...] = (
    # Miscellaneous typical temporary files
    "**/*~",
    "**/#*#",
    "**/.#*",
    "**/%*%",
    "**/._*",
    # CVS
    "**/CVS",
    "**/CVS/**",
    "**/.cvsignore",
    # SCCS
    "**/SCCS",
    "**/SCCS/**",
    # Visual SourceSafe
    "**/vssver.scc",
    # Subversion
    "**/.svn",
    "**/.svn/**",
    # Git
    "**/.git",
    "**/.git/**",
    "**/.gitattributes",
    "**/.gitignore",
    "**/.gitmodules",
    # Mercurial
    "**/.hg",
    "**/.hg/**",
    "**/.hgignore",
    "**/.hgsub",
    "**/.hgsubstate",
    "**/.hgtags",
    # Bazaar
    "**/.bzr",
    "**/.bzr/**",
    "**/.bzrignore",
    # Mac
    "**/.DS_Store",
)

_DRIVE_RE = re.compile(r"^[A-Za-z]:/")


def _check_property_refs(pattern: str) -> None:
    start = pattern.find("${")
    while start != -1:
        end = pattern.find("}", start + 2)
        if end == -1:
            raise PatternError(pattern, "unbalanced '${' property reference")
        start = pattern.find("${", end + 1)


def _split(path: str) -> list[str]:
    return [s for s in path.replace("\\", SEPARATOR).split(SEPARATOR) if s not in ("", ".")]


def normalize(pattern: str) -> str:
    """Return the canonical spelling of *pattern*.

    Separators become ``/``, empty and ``.`` segments are dropped, a trailing
    separator means "everything below" and runs of ``**`` collapse to one.
    Raises :class:`PatternError` for empty, absolute or malformed patterns.
    """
    if pattern is None or not pattern.strip():
        raise PatternError(pattern or "", "empty pattern")
    text = pattern.strip().replace("\\", SEPARATOR)
    if text.startswith(SEPARATOR) or _DRIVE_RE.match(text):
        raise PatternError(pattern, "absolute patterns are not allowed")
    _check_property_refs(text)
    if text.endswith(SEPARATOR):
        text += RECURSIVE

    segments: list[str] = []
    for segment in _split(text):
        if RECURSIVE in segment and segment != RECURSIVE:
            raise PatternError(pattern, f"'**' must be a whole path segment, got {segment!r}")
        if segment == RECURSIVE and segments and segments[-1] == RECURSIVE:
            continue
        segments.append(segment)
    if not segments:
        raise PatternError(pattern, "empty pattern")
    return SEPARATOR.join(segments)


@lru_cache(maxsize=1024)
def _segment_regex(segment: str, case_sensitive: bool) -> re.Pattern[str]:
    parts = []
    for ch in segment:
        if ch == "*":
            parts.append("[^/]*")
        elif ch == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(ch))
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile("".join(parts), flags)


def _match_segments(
    pattern: list[str], path: list[str], case_sensitive: bool
) -> bool:
    # Set of path positions reachable after consuming each pattern segment.
    positions = {0}
    n = len(path)
    for segment in pattern:
        if not positions:
            return False
        if segment == RECURSIVE:
            lowest = min(positions)
            positions = set(range(lowest, n + 1))
            continue
        regex = _segment_regex(segment, case_sensitive)
        positions = {
            i + 1 for i in positions if i < n and regex.fullmatch(path[i])
        }
    return n in positions


class PatternMatcher:
    """Ant glob matcher over ``/``-separated path strings."""

    def __init__(self, *, case_sensitive: bool = True) -> None:
        self.case_sensitive = case_sensitive

    def normalize(self, pattern: str) -> str:
        return normalize(pattern)

    def matches(self, pattern: str, candidate_path: str) -> bool:
        """Return True if *candidate_path* is matched by *pattern*."""
        segments = normalize(pattern).split(SEPARATOR)
        return _match_segments(segments, _split(candidate_path), self.case_sensitive)

    def select(self, pattern: str, candidates: Iterable[str]) -> list[str]:
        """Return the members of *candidates* matched by *pattern*, in order."""
        segments = normalize(pattern).split(SEPARATOR)
        return [
            c
            for c in candidates
            if _match_segments(segments, _split(c), self.case_sensitive)
        ]

    def is_excluded(self, candidate_path: str, excludes: Iterable[str]) -> bool:
        return any(self.matches(p, candidate_path) for p in excludes)


def matches(pattern: str, candidate_path: str) -> bool:
    """Case-sensitive shorthand for :meth:`PatternMatcher.matches`."""
    return PatternMatcher().matches(pattern, candidate_path)
