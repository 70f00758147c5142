"""Row sources: ordered cursors that can be repositioned to any row index."""

from __future__ import annotations

import csv
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping, Protocol, Sequence

from .storage import SQLiteManager

if TYPE_CHECKING:
    from ..config.models import SourceConfig

Row = dict[str, object]


class RowCursor(Protocol):
    """Ordered row source.

    ``seek(n)`` positions the cursor so that the next ``fetch()`` returns the
    row at zero-based index ``n``; ``fetch()`` returns ``None`` once exhausted.
    """

    @property
    def columns(self) -> Sequence[str]: ...

    def seek(self, position: int) -> None: ...

    def fetch(self) -> Row | None: ...

    def close(self) -> None: ...


class ListRowCursor:
    """Cursor over rows already held in memory."""

    def __init__(self, rows: Iterable[Mapping[str, object]], columns: Sequence[str] | None = None) -> None:
        self._rows = [dict(row) for row in rows]
        if columns is None:
            columns = list(self._rows[0].keys()) if self._rows else []
        self._columns = list(columns)
        self._position = 0

    @classmethod
    def from_values(cls, values: Iterable[object], column: str = "value") -> "ListRowCursor":
        return cls(({column: value} for value in values), columns=[column])

    @property
    def columns(self) -> Sequence[str]:
        return self._columns

    def __len__(self) -> int:
        return len(self._rows)

    def seek(self, position: int) -> None:
        if position < 0:
            raise ValueError("Cursor position must be >= 0")
        self._position = position

    def fetch(self) -> Row | None:
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return dict(row)

    def close(self) -> None:
        self._rows = []


class CsvRowCursor(ListRowCursor):
    """CSV file with a header row, loaded once."""

    def __init__(self, path: Path, encoding: str = "utf-8") -> None:
        if not path.exists():
            raise FileNotFoundError(f"CSV source not found: {path}")
        with path.open("r", encoding=encoding, newline="") as stream:
            reader = csv.DictReader(stream)
            rows = list(reader)
            columns = list(reader.fieldnames or [])
        super().__init__(rows, columns=columns)
        self.path = path


class SQLiteRowCursor:
    """Query result over SQLite; repositioning re-runs the query at an offset."""

    def __init__(self, conn: sqlite3.Connection, sql: str, *, owns_connection: bool = False) -> None:
        self.conn = conn
        self.sql = sql.strip().rstrip(";")
        self._owns_connection = owns_connection
        probe = self.conn.execute(f"SELECT * FROM ({self.sql}) LIMIT 0")
        self._columns = [description[0] for description in probe.description]
        probe.close()
        self._cursor: sqlite3.Cursor | None = None
        self.seek(0)

    @property
    def columns(self) -> Sequence[str]:
        return self._columns

    def seek(self, position: int) -> None:
        if position < 0:
            raise ValueError("Cursor position must be >= 0")
        if self._cursor is not None:
            self._cursor.close()
        self._cursor = self.conn.execute(
            f"SELECT * FROM ({self.sql}) LIMIT -1 OFFSET ?", (position,)
        )

    def fetch(self) -> Row | None:
        if self._cursor is None:
            return None
        record = self._cursor.fetchone()
        if record is None:
            return None
        return dict(zip(self._columns, tuple(record)))

    def close(self) -> None:
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
        if self._owns_connection:
            self.conn.close()


@contextmanager
def open_source(source: "SourceConfig", storage: SQLiteManager | None = None) -> Iterator[RowCursor]:
    """Resolve a source descriptor into an open cursor, closed on exit."""

    if source.kind == "csv":
        cursor: RowCursor = CsvRowCursor(source.path)
    elif source.kind == "sqlite":
        conn = (storage or SQLiteManager()).connect(source.path, read_only=True)
        try:
            cursor = SQLiteRowCursor(conn, source.sql, owns_connection=True)
        except sqlite3.Error:
            conn.close()
            raise
    else:
        raise ValueError(f"Unsupported source kind: {source.kind}")
    try:
        yield cursor
    finally:
        cursor.close()


__all__ = ["CsvRowCursor", "ListRowCursor", "Row", "RowCursor", "SQLiteRowCursor", "open_source"]
