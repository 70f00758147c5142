"""Supervised thread pool running the pipeline's long-lived workers."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from functools import partial
from threading import Event, Lock
from typing import Any, Callable, Dict

import structlog

from ..errors import PipelineCancelled


class ThreadPoolManager:
    """Run named workers and stop the whole group when one of them fails.

    A failing worker sets the shared ``cancelled`` event, which every
    channel wait of the other workers observes.
    """

    def __init__(
        self,
        max_workers: int = 2,
        cancelled: Event | None = None,
        thread_name_prefix: str = "matcher",
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.cancelled = cancelled or Event()
        self.logger = logger or structlog.get_logger("fuzzy_row_matcher.thread_pool")
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._futures: Dict[str, Future] = {}
        self._lock = Lock()

    def submit(self, name: str, fn: Callable[..., Any], *args: Any) -> Future:
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._futures[name] = future
        future.add_done_callback(partial(self._on_done, name))
        self.logger.info("worker_started", worker=name)
        return future

    def _on_done(self, name: str, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None or isinstance(exc, PipelineCancelled):
            return
        self.logger.error("worker_failed", worker=name, error=str(exc))
        self.cancelled.set()

    @property
    def failure(self) -> BaseException | None:
        """First exception raised by a finished worker, cancellations aside."""

        for future in self.futures().values():
            if not future.done() or future.cancelled():
                continue
            exc = future.exception()
            if exc is not None and not isinstance(exc, PipelineCancelled):
                return exc
        return None

    def futures(self) -> Dict[str, Future]:
        with self._lock:
            return dict(self._futures)

    def shutdown(self, timeout: float) -> list[str]:
        """Stop accepting work, wait up to ``timeout`` seconds, then force-cancel.

        Returns the names of workers that had to be cancelled.
        """

        self._executor.shutdown(wait=False)
        futures = self.futures()
        _, not_done = wait(list(futures.values()), timeout=timeout)
        if not not_done:
            return []
        return self.cancel()

    def cancel(self) -> list[str]:
        self.cancelled.set()
        cancelled = [name for name, future in self.futures().items() if not future.done()]
        for future in self.futures().values():
            if not future.done():
                future.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
        if cancelled:
            self.logger.warning("workers_force_cancelled", workers=cancelled)
        return cancelled


__all__ = ["ThreadPoolManager"]
