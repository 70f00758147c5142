"""Create the per-run target tables from the bundled, versioned SQL scripts."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import structlog

from ..errors import UnsupportedSourceError
from .storage import database_vendor, table_suffix

SCRIPTS_DIR = Path(__file__).resolve().parent / "dbscripts"
TIMESTAMP_PLACEHOLDER = "**TIMESTAMP**"

_VENDOR_SCRIPTS = {
    "sqlite": "bootstrap_sqlite.sql",
}


def prepare_script(vendor: str, run_timestamp: str) -> str:
    """Return the vendor's bootstrap script with the run timestamp filled in."""

    script_name = _VENDOR_SCRIPTS.get(vendor.lower())
    if script_name is None:
        raise UnsupportedSourceError(f"Database vendor not recognized: {vendor}")
    content = (SCRIPTS_DIR / script_name).read_text(encoding="utf-8")
    return content.replace(TIMESTAMP_PLACEHOLDER, table_suffix(run_timestamp))


def run_script(conn: sqlite3.Connection, run_timestamp: str, vendor: str | None = None) -> bool:
    """Create the run tables on ``conn``; ``False`` when the script fails."""

    logger = structlog.get_logger("fuzzy_row_matcher.bootstrap")
    script = prepare_script(vendor or database_vendor(conn), run_timestamp)
    logger.info("bootstrap_started", run_timestamp=run_timestamp)
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.executescript(script)
        conn.commit()
    except sqlite3.Error as exc:
        logger.error("bootstrap_failed", run_timestamp=run_timestamp, error=str(exc))
        return False
    logger.info("bootstrap_complete", run_timestamp=run_timestamp)
    return True


__all__ = ["SCRIPTS_DIR", "TIMESTAMP_PLACEHOLDER", "prepare_script", "run_script"]
