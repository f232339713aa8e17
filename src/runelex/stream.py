"""Rendezvous hand-off between the scanning thread and the token consumer."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class Cancelled(Exception):
    """Raised in the producer when the consumer cancels the hand-off."""


class Handoff(Generic[T]):
    """A capacity-zero FIFO channel.

    ``send`` returns only after a ``recv`` has taken the item, so the producer
    can never run more than one item ahead of the consumer. After ``close``,
    ``recv`` returns None once the channel is empty, on every call.
    ``cancel`` releases a blocked producer by raising Cancelled in it.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._slot: T | None = None
        self._full = False
        self._sent = 0
        self._taken = 0
        self._closed = False
        self._cancelled = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    @property
    def cancelled(self) -> bool:
        with self._cond:
            return self._cancelled

    def send(self, item: T) -> None:
        with self._cond:
            while self._full and not self._cancelled:
                self._cond.wait()
            if self._cancelled:
                raise Cancelled
            if self._closed:
                raise RuntimeError("send on closed hand-off")
            self._slot = item
            self._full = True
            self._sent += 1
            ticket = self._sent
            self._cond.notify_all()
            # Rendezvous: wait for a receiver to take this item.
            while self._taken < ticket and not self._cancelled:
                self._cond.wait()
            if self._taken < ticket:
                raise Cancelled

    def recv(self) -> T | None:
        with self._cond:
            while not self._full and not self._closed:
                self._cond.wait()
            if not self._full:
                return None
            item = self._slot
            self._slot = None
            self._full = False
            self._taken += 1
            self._cond.notify_all()
            return item

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def cancel(self) -> None:
        with self._cond:
            self._cancelled = True
            self._slot = None
            self._full = False
            self._cond.notify_all()
