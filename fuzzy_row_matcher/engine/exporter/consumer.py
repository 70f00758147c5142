"""Consumer side of the pipeline: drain the channel into a batch writer."""

from __future__ import annotations

from typing import Callable

import structlog

from ..channel import BoundedChannel
from ..records import Batch
from .base import BaseBatchWriter


class BatchConsumer:
    """Write every batch received until the empty end-of-stream batch arrives.

    The writer is created inside `run` so it lives on the consumer's thread.
    A write failure is logged and re-raised; nothing is retried.
    """

    def __init__(
        self,
        channel: BoundedChannel[Batch],
        writer_factory: Callable[[], BaseBatchWriter],
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.channel = channel
        self.writer_factory = writer_factory
        self.logger = logger or structlog.get_logger("fuzzy_row_matcher.consumer")
        self.batches_written = 0

    def run(self) -> int:
        self.logger.info("consumer_started")
        try:
            with self.writer_factory() as writer:
                while True:
                    batch = self.channel.get()
                    if batch.is_empty:
                        self.logger.info("end_of_stream", batches=self.batches_written)
                        return self.batches_written
                    writer.write(batch)
                    self.batches_written += 1
        except Exception as exc:
            self.logger.error("consumer_failed", batches=self.batches_written, error=str(exc))
            raise


__all__ = ["BatchConsumer"]
