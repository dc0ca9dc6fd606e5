"""Shared fixtures for the watcher tests."""
import io
import threading
import time
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from pollwatch.command import CommandExecutor


class RecordingExecutor(CommandExecutor):
    """Records every argv instead of starting a process."""

    def __init__(self, returncode: Optional[int] = 0, delay: float = 0.0):
        super().__init__()
        self.calls: List[List[str]] = []
        self.returncode = returncode
        self.delay = delay
        self.called = threading.Event()
        self._lock = threading.Lock()
        self._active = 0
        self.max_active = 0

    def execute(self, argv: Sequence[str]) -> Optional[int]:
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            if self.delay:
                time.sleep(self.delay)
            self.calls.append(list(argv))
            self.called.set()
            return self.returncode
        finally:
            with self._lock:
                self._active -= 1


class Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


def wait_until(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def terminal() -> Terminal:
    return Terminal()


@pytest.fixture
def watched_files(tmp_path: Path) -> List[Path]:
    files = []
    for name in ("a.txt", "b.txt"):
        path = tmp_path / name
        path.write_text("initial\n")
        files.append(path)
    return files
