"""
Bounded hand-off slots between pipeline threads.

Both slots hold at most one item and are built on queue.Queue(maxsize=1):

- BlockingSlot: the producer waits until the consumer has taken the
  previous item (backpressure).
- LatestSlot: the producer replaces an unconsumed item (latest wins).

Every wait is a short poll so that a shared stop event is noticed promptly,
and both slots can be closed by the producer to tell the consumer that no
more items will arrive.
"""

from __future__ import annotations

import queue
import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

# Seconds between checks of the stop event / closed flag while waiting
POLL_INTERVAL = 0.1


class _Slot(Generic[T]):
    def __init__(self, poll_interval: float = POLL_INTERVAL):
        self._queue: "queue.Queue[T]" = queue.Queue(maxsize=1)
        self._closed = threading.Event()
        self._poll = poll_interval

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """Mark the slot closed. Items already in the slot can still be taken."""
        self._closed.set()

    def empty(self) -> bool:
        return self._queue.empty()

    def get(
        self,
        stop: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Optional[T]:
        """
        Take the item from the slot, waiting for one to arrive.

        Returns None when the slot is closed and empty, when ``stop`` is set,
        or when ``timeout`` seconds pass without an item.
        """
        waited = 0.0
        while True:
            if stop is not None and stop.is_set():
                return None
            try:
                return self._queue.get(timeout=self._poll)
            except queue.Empty:
                pass
            if self.closed:
                # The producer may have put a last item just before closing
                try:
                    return self._queue.get_nowait()
                except queue.Empty:
                    return None
            waited += self._poll
            if timeout is not None and waited >= timeout:
                return None

    def drain(self) -> int:
        """Discard anything left in the slot; return how many items were dropped."""
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
                dropped += 1
            except queue.Empty:
                return dropped


class BlockingSlot(_Slot[T]):
    """Single-item slot whose producer waits for the consumer."""

    def put(self, item: T, stop: Optional[threading.Event] = None) -> bool:
        """
        Put an item, waiting while the slot is full.

        Returns False if ``stop`` was set or the slot was closed before the
        item could be placed.
        """
        while not self.closed:
            if stop is not None and stop.is_set():
                return False
            try:
                self._queue.put(item, timeout=self._poll)
                return True
            except queue.Full:
                continue
        return False


class LatestSlot(_Slot[T]):
    """Single-item slot where a new item replaces an unconsumed one."""

    def __init__(self, poll_interval: float = POLL_INTERVAL):
        super().__init__(poll_interval)
        self.overwritten = 0

    def put(self, item: T) -> bool:
        """
        Put an item without blocking, discarding any unconsumed one.

        Returns False if the slot is closed.
        """
        if self.closed:
            return False
        while True:
            try:
                self._queue.put_nowait(item)
                return True
            except queue.Full:
                pass
            try:
                self._queue.get_nowait()
                self.overwritten += 1
            except queue.Empty:
                pass
