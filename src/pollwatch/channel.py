"""Unbuffered hand-off between the pollers and the command consumer."""
from __future__ import annotations

import threading
from typing import Optional

from .events import ChangeEvent


class ChannelClosed(Exception):
    """Raised when sending to, or draining, a closed channel."""


class ChangeChannel:
    """Rendezvous channel: ``send`` returns only once a consumer took the event.

    Any number of threads may send; events are handed over one at a time, so a
    consumer busy running a command holds every sender back.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._slot: Optional[ChangeEvent] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ChangeEvent) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._slot is None or self._closed)
            if self._closed:
                raise ChannelClosed("channel closed")
            self._slot = event
            self._cond.notify_all()
            self._cond.wait_for(lambda: self._slot is not event or self._closed)
            if self._slot is event:
                # closed before anyone picked it up
                self._slot = None
                raise ChannelClosed("channel closed before the event was received")

    def receive(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """Take the next event, or return ``None`` if ``timeout`` expires first."""

        with self._cond:
            ready = self._cond.wait_for(lambda: self._slot is not None or self._closed, timeout)
            if not ready:
                return None
            if self._slot is None:
                raise ChannelClosed("channel closed")
            event = self._slot
            self._slot = None
            self._cond.notify_all()
            return event

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()
