"""Reductions of query results to a single table, row or scalar.

Scalar reads run a command that yields one or more result sets and keep only
one value: the first column of the first row of the first set
(``read_first_value``) or of the last row of the last set
(``read_last_value``).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, Mapping))


def first_row(result: Any) -> Any:
    """Element 0 of a sequence (None if empty); a non-sequence is returned as is."""
    if _is_sequence(result):
        return result[0] if len(result) > 0 else None
    return result


def last_row(result: Any) -> Any:
    """Last element of a sequence (None if empty); a non-sequence is returned as is."""
    if _is_sequence(result):
        return result[-1] if len(result) > 0 else None
    return result


def first_table(tables: Sequence[Any]) -> Any:
    """First result set of a batch, or an empty list if there was none."""
    return tables[0] if tables else []


def last_table(tables: Sequence[Any]) -> Any:
    """Last result set of a batch, or an empty list if there was none."""
    return tables[-1] if tables else []


def single_property(row: Any) -> Any:
    """
    Value of the only column of ``row``.

    Callers request exactly one column; when there are more, the first is
    returned.  Raw (positional) rows yield their first element.
    """
    if row is None:
        return None
    if isinstance(row, Mapping):
        for value in row.values():
            return value
        return None
    if _is_sequence(row):
        return row[0] if len(row) > 0 else None
    return row


def first_value(tables: Sequence[Any]) -> Any:
    return single_property(first_row(first_table(tables)))


def last_value(tables: Sequence[Any]) -> Any:
    return single_property(last_row(last_table(tables)))


__all__ = [
    "first_row",
    "last_row",
    "first_table",
    "last_table",
    "single_property",
    "first_value",
    "last_value",
]
