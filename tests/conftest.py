"""Shared fixtures for the fuzzy row matcher test-suite."""

from __future__ import annotations

import sqlite3
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from fuzzy_row_matcher.config import RunConfiguration, build_config
from fuzzy_row_matcher.infra import ListRowCursor


@pytest.fixture
def make_config() -> Callable[..., RunConfiguration]:
    def _builder(**overrides: Any) -> RunConfiguration:
        base: dict[str, Any] = {
            "source": {"kind": "csv", "path": "rows.csv"},
            "algorithms": {"LevenshteinDistance": 1},
        }
        base.update(overrides)
        return build_config(**base)

    return _builder


@pytest.fixture
def values_opener() -> Callable[[Iterable[object]], Callable[..., Any]]:
    """Build a source opener yielding an in-memory cursor over single-column rows."""

    def _factory(values: Iterable[object]) -> Callable[..., Any]:
        materialised = list(values)
        return lambda source: nullcontext(ListRowCursor.from_values(materialised))

    return _factory


@pytest.fixture
def source_db(tmp_path: Path) -> Path:
    path = tmp_path / "source.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE people (name TEXT, city TEXT)")
    conn.executemany(
        "INSERT INTO people(name, city) VALUES (?, ?)",
        [("abc", "Lisbon"), ("abd", "Porto"), ("xyz", "Faro")],
    )
    conn.commit()
    conn.close()
    return path


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("FUZZY_ROW_MATCHER_HOME", str(tmp_path))
    return tmp_path
