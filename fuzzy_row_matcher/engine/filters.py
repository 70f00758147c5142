"""Cheap per-row and per-pair helpers applied before any algorithm runs."""

from __future__ import annotations

import hashlib
import json
from typing import AbstractSet, Mapping


def length_ratio(left: str, right: str) -> float:
    """Shorter length over longer length; two empty strings count as equal."""

    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return min(len(left), len(right)) / longest


def check_str_len(left: str, right: str, str_len_delta_pct: float) -> bool:
    """Whether the two strings are close enough in length to be compared."""

    return length_ratio(left, right) * 100 >= str_len_delta_pct


def stringify_row(row: Mapping[str, object], hash_keys: AbstractSet[str] = frozenset()) -> str:
    """Concatenate the hash-key column values in the row's own column order.

    With no hash keys every column participates.
    """

    parts: list[str] = []
    for column, value in row.items():
        if hash_keys and column not in hash_keys:
            continue
        parts.append("" if value is None else str(value))
    return "".join(parts)


def content_hash(row_data: str) -> str:
    return hashlib.md5(row_data.encode("utf-8")).hexdigest().upper()


def serialize_row(row: Mapping[str, object]) -> str:
    return json.dumps(dict(row), ensure_ascii=False, default=str)


__all__ = ["check_str_len", "content_hash", "length_ratio", "serialize_row", "stringify_row"]
