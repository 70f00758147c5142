from __future__ import annotations

import math

import pytest

from fuzzy_row_matcher.engine import AlgorithmKind, AlgorithmResult, StatisticsAggregator
from fuzzy_row_matcher.engine.statistics import compute_stats


def _result(kind: AlgorithmKind, score) -> AlgorithmResult:
    return AlgorithmResult(kind, True, score, "L", "R")


def test_compute_stats_uses_population_deviation() -> None:
    stats = compute_stats([1, 2, 3, 4])
    assert stats.min == 1.0
    assert stats.max == 4.0
    assert stats.mean == pytest.approx(2.5)
    assert stats.median == pytest.approx(2.5)
    assert stats.p25 == pytest.approx(1.25)
    assert stats.p75 == pytest.approx(3.75)
    assert stats.stddev == pytest.approx(math.sqrt(1.25))


def test_compute_stats_single_value() -> None:
    stats = compute_stats([7])
    assert stats.as_dict() == {
        "min": 7.0,
        "p25": 7.0,
        "median": 7.0,
        "p75": 7.0,
        "max": 7.0,
        "mean": 7.0,
        "stddev": 0.0,
    }


def test_compute_stats_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        compute_stats([])


def test_summarize_orders_kinds_and_omits_unscored() -> None:
    aggregator = StatisticsAggregator()
    aggregator.record_many(
        [
            _result(AlgorithmKind.JARO_DISTANCE, 90.0),
            _result(AlgorithmKind.LEVENSHTEIN_DISTANCE, 2),
            _result(AlgorithmKind.JARO_DISTANCE, 80.0),
        ]
    )
    summary = aggregator.summarize()
    assert list(summary) == [AlgorithmKind.LEVENSHTEIN_DISTANCE, AlgorithmKind.JARO_DISTANCE]
    assert summary[AlgorithmKind.JARO_DISTANCE].mean == pytest.approx(85.0)
    assert aggregator.count(AlgorithmKind.COSINE_DISTANCE) == 0
    assert StatisticsAggregator().summarize() == {}
