from __future__ import annotations

import queue
import sqlite3
from pathlib import Path

import pytest
import structlog

from fuzzy_row_matcher import Orchestrator, run
from fuzzy_row_matcher.engine import AlgorithmKind, BaseBatchWriter, Batch, BoundedChannel
from fuzzy_row_matcher.errors import PersistenceError
from fuzzy_row_matcher.orchestrator import new_run_timestamp


class RecordingWriter(BaseBatchWriter):
    def __init__(self, fail: bool = False) -> None:
        self.batches: list[Batch] = []
        self.fail = fail
        self.closed = False

    def write(self, batch: Batch) -> None:
        if self.fail:
            raise PersistenceError("target unavailable")
        self.batches.append(batch)

    def close(self) -> None:
        self.closed = True


def test_run_without_target_reports_counts(make_config, values_opener) -> None:
    config = make_config(algorithms={"LevenshteinDistance": 1})
    report = Orchestrator(config, source_opener=values_opener(["abc", "abd", "xyz"])).run("1700000000")

    assert report.row_count == 3
    assert report.comparison_count == 3
    assert report.match_count == 1
    assert report.duplicate_count == 0
    assert report.run_timestamp == "1700000000"
    stats = report.per_algorithm_stats[AlgorithmKind.LEVENSHTEIN_DISTANCE]
    assert (stats.min, stats.max) == (1.0, 3.0)


def test_producer_always_sends_end_of_stream(make_config, values_opener) -> None:
    config = make_config()
    orchestrator = Orchestrator(config, source_opener=values_opener(["abc", "abd"]))
    channel: BoundedChannel[Batch] = BoundedChannel(1)
    results: queue.Queue = queue.Queue(maxsize=1)

    orchestrator._produce(channel, results, "1", structlog.get_logger("test"))

    assert channel.get(timeout=1).is_empty
    assert results.get_nowait().match_count == 1


def test_run_hands_batches_to_writer(make_config, values_opener) -> None:
    writer = RecordingWriter()
    config = make_config(target={"path": "unused.db"}, commit_size=2, queue_capacity=1)
    report = Orchestrator(
        config,
        source_opener=values_opener(["abc", "abd", "xyz"]),
        bootstrapper=lambda target, run_timestamp: True,
        writer_factory=lambda target, run_timestamp: writer,
    ).run("1700000000")

    assert report.match_count == 1
    assert sum(len(batch.row_snapshots) for batch in writer.batches) == 3
    assert sum(len(batch.match_records) for batch in writer.batches) == 1
    assert writer.closed


def test_failed_bootstrap_aborts_run(make_config, values_opener) -> None:
    config = make_config(target={"path": "unused.db"})
    orchestrator = Orchestrator(
        config,
        source_opener=values_opener(["abc"]),
        bootstrapper=lambda target, run_timestamp: False,
    )
    with pytest.raises(PersistenceError, match="Failed to build database tables"):
        orchestrator.run("1700000000")


def test_consumer_failure_fails_the_run(make_config, values_opener) -> None:
    config = make_config(target={"path": "unused.db"}, commit_size=1, queue_capacity=1)
    values = [f"row{index:03d}" for index in range(40)]
    orchestrator = Orchestrator(
        config,
        source_opener=values_opener(values),
        bootstrapper=lambda target, run_timestamp: True,
        writer_factory=lambda target, run_timestamp: RecordingWriter(fail=True),
    )
    with pytest.raises(PersistenceError, match="target unavailable"):
        orchestrator.run("1700000000")


def test_source_failure_surfaces(make_config) -> None:
    def _broken(source):
        raise FileNotFoundError("rows.csv")

    with pytest.raises(FileNotFoundError):
        Orchestrator(make_config(), source_opener=_broken).run("1700000000")


def test_end_to_end_sqlite_run(tmp_path: Path, source_db: Path, make_config) -> None:
    target = tmp_path / "matches.db"
    config = make_config(
        source={"kind": "sqlite", "path": source_db, "table_query": "people", "hash_keys": ["name"]},
        target={"path": target},
        algorithms={"LevenshteinDistance": 1, "JaroDistance": 99.0},
        commit_size=2,
    )
    report = run(config, run_timestamp="1700000000")
    assert report.row_count == 3
    assert report.comparison_count == 6
    assert report.match_count == 1

    conn = sqlite3.connect(target)
    try:
        assert conn.execute("SELECT COUNT(*) FROM json_data_1700000000").fetchone() == (3,)
        scores = conn.execute(
            "SELECT LevenshteinDistance, HammingDistance, JaroDistance FROM scores_1700000000"
        ).fetchall()
        assert len(scores) == 1
        assert scores[0][0] == 1
        assert scores[0][1] is None
        assert scores[0][2] == pytest.approx(82.2222, abs=1e-3)
        view = conn.execute(
            "SELECT current_json_data, compare_json_data FROM final_scores_1700000000"
        ).fetchone()
        assert view == ('{"name": "abc", "city": "Lisbon"}', '{"name": "abd", "city": "Porto"}')
    finally:
        conn.close()


def test_new_run_timestamp_is_epoch_seconds() -> None:
    stamp = new_run_timestamp()
    assert stamp.isdigit()
    assert int(stamp) > 1_600_000_000


def test_partial_batch_precedes_end_of_stream(make_config, values_opener) -> None:
    config = make_config(target={"path": "unused.db"}, commit_size=2)
    orchestrator = Orchestrator(config, source_opener=values_opener(["abc", "abd", "xyz"]))
    channel: BoundedChannel[Batch] = BoundedChannel(10)
    results: queue.Queue = queue.Queue(maxsize=1)

    orchestrator._produce(channel, results, "1", structlog.get_logger("test"))

    received = [channel.get(timeout=1) for _ in range(channel.qsize())]
    assert len(received) == 3
    assert received[-1].is_empty
    partial = received[-2]
    assert len(partial.row_snapshots) == 1
    assert len(partial.match_records) == 1
    assert not received[0].is_empty
    assert results.get_nowait().match_count == 1
