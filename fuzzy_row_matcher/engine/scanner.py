"""Pairwise row scan: every row is compared with every row after it."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Mapping, Sequence

import structlog

from .filters import check_str_len, content_hash, serialize_row, stringify_row
from .records import AlgorithmResult, Batch, MatchRecord, RowSnapshot
from .statistics import StatisticsAggregator

if TYPE_CHECKING:
    from ..config.models import RunConfiguration
    from ..infra.cursors import RowCursor


class AggregationMode(str, Enum):
    """How per-algorithm qualifications combine into one match decision."""

    ANY = "any"
    ALL = "all"


def aggregate_qualifies(results: Sequence[AlgorithmResult], mode: AggregationMode) -> bool:
    """Combine per-algorithm decisions.

    In ALL mode an empty result set qualifies.
    """

    if mode is AggregationMode.ALL:
        return all(result.qualifies for result in results)
    return any(result.qualifies for result in results)


@dataclass(frozen=True, slots=True)
class ScannedRow:
    id: str
    data: str
    snapshot: RowSnapshot


@dataclass(slots=True)
class ScanSummary:
    row_count: int = 0
    comparison_count: int = 0
    match_count: int = 0
    duplicate_count: int = 0


class RowComparator:
    """Drive the upper-triangular scan over a repositionable row cursor.

    When ``emit`` is given, row snapshots and match records are collected into
    batches of ``commit_size`` and handed to it; the final partial batch is
    emitted when the scan ends.
    """

    def __init__(
        self,
        cursor: "RowCursor",
        config: "RunConfiguration",
        statistics: StatisticsAggregator | None = None,
        emit: Callable[[Batch], None] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.cursor = cursor
        self.config = config
        self.statistics = statistics or StatisticsAggregator()
        self.emit = emit
        self.logger = logger or structlog.get_logger("fuzzy_row_matcher.scanner")
        self.hash_keys = frozenset(config.source.hash_keys)
        self._seen_ids: set[str] = set()
        self._pending = Batch()

    def scan(self) -> ScanSummary:
        summary = ScanSummary()
        algorithm_names = [algorithm.kind.value for algorithm in self.config.algorithms]
        self.logger.info("scan_started", algorithms=algorithm_names)
        position = 0
        while True:
            self.cursor.seek(position)
            anchor_row = self.cursor.fetch()
            if anchor_row is None:
                break
            summary.row_count += 1
            anchor = self._prepare(anchor_row)
            self._remember(anchor)
            while (candidate_row := self.cursor.fetch()) is not None:
                candidate = self._prepare(candidate_row)
                self._remember(candidate)
                self._compare(anchor, candidate, summary)
            position += 1
        self._flush()
        self.logger.info(
            "scan_complete",
            rows=summary.row_count,
            comparisons=summary.comparison_count,
            matches=summary.match_count,
            duplicates=summary.duplicate_count,
        )
        return summary

    def _prepare(self, row: Mapping[str, object]) -> ScannedRow:
        data = stringify_row(row, self.hash_keys)
        row_id = content_hash(data)
        return ScannedRow(row_id, data, RowSnapshot(row_id, serialize_row(row)))

    def _compare(self, anchor: ScannedRow, candidate: ScannedRow, summary: ScanSummary) -> None:
        if self.config.ignore_duplicates and anchor.id == candidate.id:
            summary.duplicate_count += 1
            self.logger.debug("duplicate_skipped", anchor=anchor.id, candidate=candidate.id)
            return
        if not check_str_len(candidate.data, anchor.data, self.config.str_len_delta_pct):
            self.logger.debug(
                "length_filtered",
                anchor_length=len(anchor.data),
                candidate_length=len(candidate.data),
            )
            return

        results = []
        for algorithm in self.config.algorithms:
            score = algorithm.apply(candidate.data, anchor.data)
            results.append(
                AlgorithmResult(algorithm.kind, algorithm.qualifies(score), score, anchor.id, candidate.id)
            )
        summary.comparison_count += len(results)
        self.statistics.record_many(results)

        if aggregate_qualifies(results, self.config.aggregation_mode):
            summary.match_count += 1
            if self.emit is not None:
                record = MatchRecord(
                    id=str(uuid.uuid4()),
                    anchor_row_id=anchor.id,
                    compared_row_id=candidate.id,
                    scores={result.kind: result.score for result in results},
                )
                self._pending.match_records.append(record)
                self._maybe_flush()

    def _remember(self, row: ScannedRow) -> None:
        if self.emit is None or row.id in self._seen_ids:
            return
        self._seen_ids.add(row.id)
        self._pending.row_snapshots.append(row.snapshot)
        self._maybe_flush()

    def _maybe_flush(self) -> None:
        commit_size = self.config.commit_size
        if (
            len(self._pending.row_snapshots) >= commit_size
            or len(self._pending.match_records) >= commit_size
        ):
            self._flush()

    def _flush(self) -> None:
        if self.emit is None or self._pending.is_empty:
            return
        batch, self._pending = self._pending, Batch()
        self.emit(batch)


__all__ = [
    "AggregationMode",
    "RowComparator",
    "ScanSummary",
    "ScannedRow",
    "aggregate_qualifies",
]
