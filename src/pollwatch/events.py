"""Snapshot and event models shared across watcher components."""
from __future__ import annotations

import os
import stat as stat_module
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class FileSnapshot:
    """Observable metadata of one path at a point in time."""

    size: int
    mode: int
    mtime_ns: int
    is_dir: bool

    @classmethod
    def from_stat(cls, result: os.stat_result) -> "FileSnapshot":
        return cls(
            size=result.st_size,
            mode=result.st_mode,
            mtime_ns=result.st_mtime_ns,
            is_dir=stat_module.S_ISDIR(result.st_mode),
        )

    @classmethod
    def take(cls, path: Path) -> "FileSnapshot":
        """Stat ``path``; raises ``OSError`` (or ``ValueError`` for an embedded NUL)."""

        return cls.from_stat(os.stat(path))


@dataclass(frozen=True)
class ChangeEvent:
    """A single detected change for one watched path."""

    path: Path
    snapshot: Optional[FileSnapshot] = None
    detected_at: datetime = field(default_factory=datetime.now)
