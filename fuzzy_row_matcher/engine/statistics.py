"""Per-algorithm score accumulation and the end-of-run summary statistics."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

import numpy as np

from .algorithms import AlgorithmKind, Score
from .records import AlgoStats, AlgorithmResult


class StatisticsAggregator:
    """Keep every score of the run, grouped by algorithm kind.

    Memory grows with the number of comparisons; the full population is needed
    for exact percentiles.
    """

    def __init__(self) -> None:
        self._scores: dict[AlgorithmKind, list[Score]] = defaultdict(list)

    def record(self, result: AlgorithmResult) -> None:
        self._scores[result.kind].append(result.score)

    def record_many(self, results: Iterable[AlgorithmResult]) -> None:
        for result in results:
            self.record(result)

    def count(self, kind: AlgorithmKind) -> int:
        return len(self._scores.get(kind, ()))

    def summarize(self) -> dict[AlgorithmKind, AlgoStats]:
        """Return stats for each kind with at least one score, in kind order."""

        summary: dict[AlgorithmKind, AlgoStats] = {}
        for kind in AlgorithmKind:
            scores = self._scores.get(kind)
            if scores:
                summary[kind] = compute_stats(scores)
        return summary


def compute_stats(scores: Iterable[Score]) -> AlgoStats:
    values = np.asarray(list(scores), dtype=float)
    if values.size == 0:
        raise ValueError("Cannot compute statistics over an empty score list")
    p25, median, p75 = np.percentile(values, [25.0, 50.0, 75.0], method="weibull")
    return AlgoStats(
        min=float(values.min()),
        p25=float(p25),
        median=float(median),
        p75=float(p75),
        max=float(values.max()),
        mean=float(values.mean()),
        stddev=float(values.std(ddof=0)),
    )


__all__ = ["StatisticsAggregator", "compute_stats"]
