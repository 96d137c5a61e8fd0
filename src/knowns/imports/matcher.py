"""
File selection for fetched source trees.

Patterns are globs relative to the content root, using forward slashes:

    *        any run of characters within one path segment
    ?        one character within a segment
    [abc]    character class
    **       zero or more whole segments
    {a,b}    alternatives

A pattern without glob characters also matches everything below it when
it names a directory, so "drafts" excludes "drafts/a.md". Include is
applied first, then exclude, and exclude always wins.
"""

from __future__ import annotations

import fnmatch
import os
import re
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Sequence

from knowns.constants import ALWAYS_IGNORED_PATTERNS
from knowns.logging import get_logger

logger = get_logger("knowns.imports.matcher")

DEFAULT_INCLUDE = ("**",)
_GLOB_CHARS = re.compile(r"[*?\[{]")


def expand_braces(pattern: str) -> List[str]:
    """Expand brace groups like 'docs/*.{md,txt}' into one pattern per alternative."""
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    end = pattern.find("}", start + 1)
    if end == -1:
        return [pattern]

    parts = [p for p in pattern[start + 1 : end].split(",")]
    if len(parts) <= 1:
        return [pattern]

    expanded: List[str] = []
    for part in parts:
        expanded.extend(expand_braces(f"{pattern[:start]}{part}{pattern[end + 1:]}"))
    return expanded


def normalize_pattern(pattern: str) -> str:
    pattern = pattern.strip().replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]
    pattern = pattern.lstrip("/")
    if pattern.endswith("/"):
        pattern += "**"
    return pattern


@lru_cache(maxsize=512)
def _segment_regex(segment: str) -> "re.Pattern[str]":
    return re.compile(fnmatch.translate(segment))


def _match_segments(path_parts: Sequence[str], pattern_parts: Sequence[str]) -> bool:
    if not pattern_parts:
        return not path_parts

    head = pattern_parts[0]
    if head == "**":
        rest = pattern_parts[1:]
        # '**' consumes zero or more whole segments
        return any(
            _match_segments(path_parts[i:], rest) for i in range(len(path_parts) + 1)
        )

    if not path_parts:
        return False
    if not _segment_regex(head).match(path_parts[0]):
        return False
    return _match_segments(path_parts[1:], pattern_parts[1:])


def match_path(path: str, pattern: str) -> bool:
    """Check a relative posix path against one pattern."""
    path_parts = PurePosixPath(path).parts
    for expanded in expand_braces(normalize_pattern(pattern)):
        if not expanded:
            continue
        pattern_parts = [p for p in expanded.split("/") if p]
        if _match_segments(path_parts, pattern_parts):
            return True
        if not _GLOB_CHARS.search(expanded):
            # Literal directory name: match anything below it
            if _match_segments(path_parts, pattern_parts + ["**"]):
                return True
    return False


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(match_path(path, pattern) for pattern in patterns)


def walk_files(root: Path) -> List[str]:
    """
    List every regular file below root as a sorted relative posix path.

    Directory symlinks are not followed; file symlinks are listed.
    """
    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        rel_dir = Path(dirpath).relative_to(root)
        kept = []
        for dirname in dirnames:
            rel = (rel_dir / dirname).as_posix()
            if matches_any(rel, ALWAYS_IGNORED_PATTERNS):
                continue
            kept.append(dirname)
        dirnames[:] = sorted(kept)

        for filename in filenames:
            full = Path(dirpath) / filename
            if not full.is_file():
                continue
            found.append((rel_dir / filename).as_posix())

    return sorted(found)


def match_files(
    root: Path,
    include: Optional[Sequence[str]] = None,
    exclude: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Select files below root.

    Args:
        root: Content root of the staged source
        include: Patterns to keep; everything when empty
        exclude: Patterns to drop, evaluated after include

    Returns:
        Lexicographically sorted relative posix paths
    """
    include = list(include) if include else list(DEFAULT_INCLUDE)
    exclude = list(exclude or []) + list(ALWAYS_IGNORED_PATTERNS)

    selected = [
        path
        for path in walk_files(root)
        if matches_any(path, include) and not matches_any(path, exclude)
    ]

    logger.debug(
        f"Matched {len(selected)} file(s) under {root} "
        f"(include={include}, exclude={exclude})"
    )
    return selected
