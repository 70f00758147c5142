"""SQLite connection helpers shared by row sources, bootstrap and the writer."""

from __future__ import annotations

import sqlite3
from pathlib import Path


class SQLiteManager:
    """Open SQLite connections with the settings the matcher relies on."""

    def connect(self, path: Path, *, read_only: bool = False) -> sqlite3.Connection:
        if read_only:
            if not path.exists():
                raise FileNotFoundError(f"SQLite database not found: {path}")
            conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(path)
            conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row
        return conn


def database_vendor(conn: object) -> str:
    """Lower-case product name of the database behind ``conn``."""

    if isinstance(conn, sqlite3.Connection):
        return "sqlite"
    vendor = getattr(conn, "vendor", None)
    if vendor:
        return str(vendor).lower()
    return type(conn).__module__.split(".")[0].lower()


def table_suffix(run_timestamp: str) -> str:
    """Validate a run timestamp before it is spliced into table names."""

    if not run_timestamp or not run_timestamp.replace("_", "").isalnum():
        raise ValueError(f"Invalid run timestamp for table names: {run_timestamp!r}")
    return run_timestamp


__all__ = ["SQLiteManager", "database_vendor", "table_suffix"]
