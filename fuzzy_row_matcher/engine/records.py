"""Value objects flowing between the scanner, the writer and the report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .algorithms import AlgorithmKind, Score


@dataclass(frozen=True, slots=True)
class RowSnapshot:
    """A source row keyed by its content hash, with all columns as JSON."""

    id: str
    serialized_data: str


@dataclass(frozen=True, slots=True)
class AlgorithmResult:
    kind: AlgorithmKind
    qualifies: bool
    score: Score
    left_row_id: str
    right_row_id: str


@dataclass(frozen=True, slots=True)
class MatchRecord:
    """A qualifying pair with the score of every algorithm run against it."""

    id: str
    anchor_row_id: str
    compared_row_id: str
    scores: Mapping[AlgorithmKind, Score]


@dataclass(slots=True)
class Batch:
    """Transfer unit between producer and consumer; empty means end of stream."""

    row_snapshots: list[RowSnapshot] = field(default_factory=list)
    match_records: list[MatchRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.row_snapshots and not self.match_records

    def __len__(self) -> int:
        return len(self.row_snapshots) + len(self.match_records)


@dataclass(frozen=True, slots=True)
class AlgoStats:
    min: float
    p25: float
    median: float
    p75: float
    max: float
    mean: float
    stddev: float

    def as_dict(self) -> dict[str, float]:
        return {
            "min": self.min,
            "p25": self.p25,
            "median": self.median,
            "p75": self.p75,
            "max": self.max,
            "mean": self.mean,
            "stddev": self.stddev,
        }


@dataclass(frozen=True, slots=True)
class RunReport:
    """Summary of a finished run.

    ``run_timestamp`` is also the suffix of the tables written for the run.
    """

    row_count: int
    comparison_count: int
    match_count: int
    duplicate_count: int
    per_algorithm_stats: Mapping[AlgorithmKind, AlgoStats]
    run_timestamp: str

    def as_dict(self) -> dict[str, object]:
        return {
            "row_count": self.row_count,
            "comparison_count": self.comparison_count,
            "match_count": self.match_count,
            "duplicate_count": self.duplicate_count,
            "per_algorithm_stats": {
                kind.value: stats.as_dict() for kind, stats in self.per_algorithm_stats.items()
            },
            "run_timestamp": self.run_timestamp,
        }


__all__ = [
    "AlgoStats",
    "AlgorithmResult",
    "Batch",
    "MatchRecord",
    "RowSnapshot",
    "RunReport",
]
