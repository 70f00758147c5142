"""Pipeline orchestrator wiring the scanning producer to the batch consumer."""

from __future__ import annotations

import queue
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from functools import partial
from typing import Callable

import structlog

from .config import RunConfiguration, TargetConfig
from .engine import (
    BaseBatchWriter,
    Batch,
    BatchConsumer,
    BoundedChannel,
    RowComparator,
    RunReport,
    SQLiteBatchWriter,
    StatisticsAggregator,
    ThreadPoolManager,
)
from .errors import FuzzyRowMatcherError, InterruptedWaitError, PersistenceError
from .infra import RowCursor, SQLiteManager, open_source, run_script

_POLL_SECONDS = 0.2

SourceOpener = Callable[..., AbstractContextManager[RowCursor]]
Bootstrapper = Callable[[TargetConfig, str], bool]
WriterFactory = Callable[[TargetConfig, str], BaseBatchWriter]


def new_run_timestamp() -> str:
    return str(int(datetime.now(timezone.utc).timestamp()))


class Orchestrator:
    """Run one fuzzy match: scan on a producer thread, persist on a consumer thread.

    The source opener, schema bootstrapper and writer factory are injectable;
    the defaults work against SQLite/CSV sources and a SQLite target.
    """

    def __init__(
        self,
        config: RunConfiguration,
        *,
        source_opener: SourceOpener | None = None,
        bootstrapper: Bootstrapper | None = None,
        writer_factory: WriterFactory | None = None,
        storage: SQLiteManager | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.storage = storage or SQLiteManager()
        self.source_opener = source_opener or partial(open_source, storage=self.storage)
        self.bootstrapper = bootstrapper or self._bootstrap_sqlite
        self.writer_factory = writer_factory or self._sqlite_writer
        self.logger = logger or structlog.get_logger("fuzzy_row_matcher.orchestrator")

    # ------------------------------------------------------------------
    def run(self, run_timestamp: str | None = None) -> RunReport:
        config = self.config
        run_timestamp = run_timestamp or new_run_timestamp()
        logger = self.logger.bind(run=run_timestamp)

        if config.target is not None:
            logger.info("table_creation_started", target=str(config.target.path))
            if not self.bootstrapper(config.target, run_timestamp):
                raise PersistenceError("Failed to build database tables")
            logger.info("table_creation_complete")

        pool = ThreadPoolManager(max_workers=2 if config.persist else 1, logger=logger)
        channel: BoundedChannel[Batch] = BoundedChannel(config.queue_capacity, pool.cancelled)
        results: queue.Queue[RunReport] = queue.Queue(maxsize=1)

        pool.submit("producer", self._produce, channel, results, run_timestamp, logger)
        if config.target is not None:
            consumer = BatchConsumer(
                channel,
                partial(self.writer_factory, config.target, run_timestamp),
                logger=logger,
            )
            pool.submit("consumer", consumer.run)

        try:
            report = self._await_report(results, pool)
            cancelled = pool.shutdown(config.shutdown_timeout)
        except KeyboardInterrupt as exc:
            pool.cancel()
            logger.error("run_interrupted")
            raise InterruptedWaitError("Interrupted while waiting for workers to finish") from exc

        failure = pool.failure
        if failure is not None:
            raise failure
        if cancelled:
            logger.warning("run_complete_with_cancellations", workers=cancelled)
        logger.info("run_complete", **report.as_dict())
        return report

    def _produce(
        self,
        channel: BoundedChannel[Batch],
        results: queue.Queue[RunReport],
        run_timestamp: str,
        logger: structlog.BoundLogger,
    ) -> None:
        config = self.config
        statistics = StatisticsAggregator()
        emit = channel.put if config.persist else None
        logger.info("fuzzy_matching_started")
        with self.source_opener(config.source) as cursor:
            summary = RowComparator(cursor, config, statistics, emit=emit, logger=logger).scan()
        channel.put(Batch())

        logger.info("statistics_started")
        report = RunReport(
            row_count=summary.row_count,
            comparison_count=summary.comparison_count,
            match_count=summary.match_count,
            duplicate_count=summary.duplicate_count,
            per_algorithm_stats=statistics.summarize(),
            run_timestamp=run_timestamp,
        )
        logger.info("statistics_complete")
        results.put(report)

    def _await_report(self, results: queue.Queue[RunReport], pool: ThreadPoolManager) -> RunReport:
        while True:
            try:
                return results.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                pass
            failure = pool.failure
            if failure is not None:
                pool.cancel()
                raise failure
            producer = pool.futures()["producer"]
            if producer.done():
                try:
                    return results.get_nowait()
                except queue.Empty:
                    pool.cancel()
                    raise FuzzyRowMatcherError("Producer finished without publishing a report") from None

    # ------------------------------------------------------------------
    def _bootstrap_sqlite(self, target: TargetConfig, run_timestamp: str) -> bool:
        conn = self.storage.connect(target.path)
        try:
            return run_script(conn, run_timestamp, vendor=target.vendor)
        finally:
            conn.close()

    def _sqlite_writer(self, target: TargetConfig, run_timestamp: str) -> BaseBatchWriter:
        return SQLiteBatchWriter(target.path, run_timestamp, storage=self.storage)


def run(config: RunConfiguration, **kwargs) -> RunReport:
    """Run a fuzzy match for ``config`` and return its report."""

    run_timestamp = kwargs.pop("run_timestamp", None)
    return Orchestrator(config, **kwargs).run(run_timestamp)


__all__ = ["Orchestrator", "new_run_timestamp", "run"]
