"""Bounded hand-off channel between the scanning producer and the writer."""

from __future__ import annotations

import queue
from threading import Event
from typing import Generic, TypeVar

from ..errors import PipelineCancelled

T = TypeVar("T")

_POLL_SECONDS = 0.1


class BoundedChannel(Generic[T]):
    """Blocking FIFO of fixed capacity whose waits abort once ``cancelled`` is set.

    A full channel suspends the sender (backpressure), an empty one suspends
    the receiver.
    """

    def __init__(self, capacity: int, cancelled: Event | None = None) -> None:
        if capacity < 1:
            raise ValueError("Channel capacity must be >= 1")
        self.capacity = capacity
        self.cancelled = cancelled or Event()
        self._queue: queue.Queue[T] = queue.Queue(maxsize=capacity)

    def put(self, item: T) -> None:
        while True:
            if self.cancelled.is_set():
                raise PipelineCancelled("Channel closed while sending")
            try:
                self._queue.put(item, timeout=_POLL_SECONDS)
                return
            except queue.Full:
                continue

    def get(self, timeout: float | None = None) -> T:
        """Receive the next item.

        Raises ``queue.Empty`` when ``timeout`` elapses first and
        ``PipelineCancelled`` once the channel is cancelled.
        """

        waited = 0.0
        while True:
            if self.cancelled.is_set():
                raise PipelineCancelled("Channel closed while receiving")
            try:
                return self._queue.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                waited += _POLL_SECONDS
                if timeout is not None and waited >= timeout:
                    raise

    def qsize(self) -> int:
        return self._queue.qsize()

    def cancel(self) -> None:
        self.cancelled.set()


__all__ = ["BoundedChannel"]
