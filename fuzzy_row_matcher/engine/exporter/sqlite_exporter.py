"""Write row snapshots and match scores into the per-run SQLite tables."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import structlog

from ...errors import PersistenceError
from ...infra.storage import SQLiteManager, table_suffix
from ..algorithms import AlgorithmKind
from ..records import Batch, MatchRecord
from .base import BaseBatchWriter

_SCORE_COLUMNS = tuple(kind.value for kind in AlgorithmKind)


class SQLiteBatchWriter(BaseBatchWriter):
    """Persist each batch in one transaction; duplicate row ids are ignored."""

    def __init__(
        self,
        path: Path,
        run_timestamp: str,
        storage: SQLiteManager | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.path = path
        suffix = table_suffix(run_timestamp)
        self.rows_table = f"json_data_{suffix}"
        self.scores_table = f"scores_{suffix}"
        self.logger = logger or structlog.get_logger("fuzzy_row_matcher.writer")
        try:
            self.conn = (storage or SQLiteManager()).connect(path)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot open target store {path}: {exc}") from exc
        self._row_insert = f"INSERT OR IGNORE INTO {self.rows_table}(id, json_data) VALUES (?, ?)"
        columns = ", ".join(_SCORE_COLUMNS)
        placeholders = ", ".join("?" for _ in range(3 + len(_SCORE_COLUMNS)))
        self._score_insert = (
            f"INSERT INTO {self.scores_table}"
            f"(id, json_data_current_id, json_data_compare_id, {columns}) VALUES ({placeholders})"
        )
        self.batches_written = 0

    def write(self, batch: Batch) -> None:
        try:
            with self.conn:
                self.conn.executemany(
                    self._row_insert,
                    [(snapshot.id, snapshot.serialized_data) for snapshot in batch.row_snapshots],
                )
                self.conn.executemany(
                    self._score_insert,
                    [self._score_params(record) for record in batch.match_records],
                )
        except sqlite3.Error as exc:
            self.logger.error(
                "batch_write_failed",
                rows=len(batch.row_snapshots),
                matches=len(batch.match_records),
                error=str(exc),
            )
            raise PersistenceError(f"Error while inserting batch: {exc}") from exc
        self.batches_written += 1
        self.logger.debug(
            "batch_written",
            rows=len(batch.row_snapshots),
            matches=len(batch.match_records),
        )

    @staticmethod
    def _score_params(record: MatchRecord) -> tuple[object, ...]:
        values: list[object] = [record.id, record.anchor_row_id, record.compared_row_id]
        for kind in AlgorithmKind:
            score = record.scores.get(kind)
            if score is None:
                values.append(None)
            elif kind.integral:
                values.append(int(score))
            else:
                values.append(float(score))
        return tuple(values)

    def close(self) -> None:
        self.conn.close()


__all__ = ["SQLiteBatchWriter"]
