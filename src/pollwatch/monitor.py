"""Per-path polling loops fanned in to a single command consumer."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .channel import ChangeChannel, ChannelClosed
from .command import CommandExecutor, build_command
from .config import WatchConfig
from .events import ChangeEvent, FileSnapshot

logger = logging.getLogger(__name__)


@dataclass
class WatchStats:
    """Counters emitted by the watcher for observability."""

    events_received: int = 0
    commands_run: int = 0
    commands_failed: int = 0


def has_changed(old: Optional[FileSnapshot], new: FileSnapshot) -> bool:
    """A missing baseline always counts as a change."""

    return old is None or old != new


class PathPoller:
    """Polls one path and sends a ``ChangeEvent`` whenever its metadata moves."""

    def __init__(
        self,
        path: Path,
        channel: ChangeChannel,
        *,
        poll_interval: float,
        baseline: Optional[FileSnapshot] = None,
    ):
        self.path = path
        self._channel = channel
        self._poll_interval = poll_interval
        self._baseline = baseline
        self._stop_event = threading.Event()

    @property
    def baseline(self) -> Optional[FileSnapshot]:
        return self._baseline

    @classmethod
    def register(cls, path: Path, channel: ChangeChannel, *, poll_interval: float) -> "PathPoller":
        """Create a poller with the current state of ``path`` as its baseline."""

        try:
            baseline: Optional[FileSnapshot] = FileSnapshot.take(path)
        except (OSError, ValueError) as exc:
            logger.warning("Cannot stat %s: %s; watching for it to appear", path, exc)
            baseline = None
        return cls(path, channel, poll_interval=poll_interval, baseline=baseline)

    def poll_once(self) -> Optional[ChangeEvent]:
        """Check the path once, updating the baseline if it changed."""

        try:
            current = FileSnapshot.take(self.path)
        except (OSError, ValueError) as exc:
            logger.debug("Stat failed for %s: %s", self.path, exc)
            return None
        if not has_changed(self._baseline, current):
            return None
        self._baseline = current
        return ChangeEvent(path=self.path, snapshot=current)

    def run(self) -> None:
        """Sleep, check, repeat until stopped or the channel closes."""

        while not self._stop_event.wait(self._poll_interval):
            event = self.poll_once()
            if event is None:
                continue
            logger.info("Change detected: %s", self.path)
            try:
                self._channel.send(event)
            except ChannelClosed:
                break
        logger.debug("Poller for %s stopped", self.path)

    def stop(self) -> None:
        self._stop_event.set()


class FileWatcher:
    """Runs one poller thread per path and executes commands one at a time."""

    def __init__(
        self,
        config: WatchConfig,
        paths: Optional[Iterable[Path]] = None,
        *,
        executor: Optional[CommandExecutor] = None,
    ):
        self._config = config
        self._channel = ChangeChannel()
        self._executor = executor or CommandExecutor()
        self._stop_event = threading.Event()
        self._stats = WatchStats()
        self._threads: List[threading.Thread] = []
        self._pollers: List[PathPoller] = [
            PathPoller.register(path, self._channel, poll_interval=config.poll_interval)
            for path in (config.paths if paths is None else paths)
        ]

    @property
    def pollers(self) -> List[PathPoller]:
        return list(self._pollers)

    @property
    def stats(self) -> WatchStats:
        return self._stats

    def start(self) -> None:
        """Start the poller threads without entering the consumer loop."""

        if self._threads:
            return
        for poller in self._pollers:
            thread = threading.Thread(
                target=poller.run,
                name=f"poll:{poller.path}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        logger.info(
            "Watching %s path(s) every %ss",
            len(self._pollers),
            self._config.poll_interval,
        )

    def run(self) -> None:
        """Consume change events until stopped."""

        self.start()
        try:
            while not self._stop_event.is_set():
                try:
                    event = self._channel.receive(timeout=0.5)
                except ChannelClosed:
                    break
                if event is None:
                    continue
                self._dispatch(event)
        except KeyboardInterrupt:
            logger.info("Watcher interrupted by user")
        finally:
            self.stop()
            logger.info(
                "Watcher stopped after %s events, %s commands (%s failed)",
                self._stats.events_received,
                self._stats.commands_run,
                self._stats.commands_failed,
            )

    def stop(self) -> None:
        """Stop every poller and release any blocked on the channel."""

        self._stop_event.set()
        for poller in self._pollers:
            poller.stop()
        self._channel.close()

    def join(self, timeout: Optional[float] = None) -> None:
        for thread in self._threads:
            thread.join(timeout)

    def _dispatch(self, event: ChangeEvent) -> None:
        self._stats.events_received += 1
        argv = build_command(self._config.command, event.path)
        returncode = self._executor.execute(argv)
        self._stats.commands_run += 1
        if returncode != 0:
            self._stats.commands_failed += 1
