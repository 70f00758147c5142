"""Infra layer utilities (storage, row sources, schema bootstrap)."""

from .bootstrap import prepare_script, run_script
from .cursors import CsvRowCursor, ListRowCursor, RowCursor, SQLiteRowCursor, open_source
from .storage import SQLiteManager, database_vendor

__all__ = [
    "CsvRowCursor",
    "ListRowCursor",
    "RowCursor",
    "SQLiteManager",
    "SQLiteRowCursor",
    "database_vendor",
    "open_source",
    "prepare_script",
    "run_script",
]
