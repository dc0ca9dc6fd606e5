"""Resolve the initial watch set from a glob pattern or a stream of paths."""
from __future__ import annotations

import glob
import logging
import os
from pathlib import Path
from typing import Iterable, List, Set, Union

logger = logging.getLogger(__name__)


class PatternError(Exception):
    """Raised for a malformed glob pattern."""


def expand_pattern(pattern: str) -> List[Path]:
    """Expand ``pattern`` once; the result is sorted and may be empty."""

    _validate_pattern(pattern)
    matches = sorted(glob.glob(pattern))
    logger.debug("Pattern %r matched %s path(s)", pattern, len(matches))
    return [Path(match) for match in matches]


def read_path_list(lines: Iterable[Union[str, bytes]]) -> List[Path]:
    """One path per line; blank lines and repeats are dropped.

    Byte lines are decoded with the filesystem encoding, so names that are
    not valid text still round-trip to the same file.
    """

    seen: Set[str] = set()
    paths: List[Path] = []
    for line in lines:
        entry = os.fsdecode(line).strip()
        if not entry or entry in seen:
            continue
        seen.add(entry)
        paths.append(Path(entry))
    return paths


def _validate_pattern(pattern: str) -> None:
    if not pattern:
        raise PatternError("empty pattern")
    i = 0
    while i < len(pattern):
        if pattern[i] == "[":
            close = _find_class_end(pattern, i + 1)
            if close < 0:
                raise PatternError(f"unterminated character class in {pattern!r}")
            i = close
        i += 1


def _find_class_end(pattern: str, start: int) -> int:
    i = start
    if i < len(pattern) and pattern[i] == "!":
        i += 1
    # a leading ']' is a literal member of the class
    if i < len(pattern) and pattern[i] == "]":
        i += 1
    while i < len(pattern):
        if pattern[i] == "/":
            return -1
        if pattern[i] == "]":
            return i
        i += 1
    return -1
