"""
Row filters (predicates) passed between callers, the security provider and
drivers.

The data-access core treats a filter as opaque except for one property,
``is_false``: a filter statically known to match nothing.  Drivers render
``sql``/``params`` into their commands.

Examples:
    >>> f = and_(eq("idcustomer", 1), None, raw("active = 1"))
    >>> f.sql
    '(idcustomer = ?) AND (active = 1)'
    >>> and_(f, FALSE).is_false
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Filter:
    """A boolean SQL condition with positional parameters."""

    sql: str
    params: tuple[Any, ...] = ()
    is_false: bool = False

    def __str__(self) -> str:
        return self.sql


FALSE = Filter("1 = 0", is_false=True)


def raw(sql: str, *params: Any) -> Filter:
    """Filter from a literal condition (``?`` placeholders)."""
    return Filter(sql, tuple(params))


def eq(column: str, value: Any) -> Filter:
    """``column = value``; ``None`` renders as ``IS NULL``."""
    if value is None:
        return is_null(column)
    return Filter(f"{column} = ?", (value,))


def is_null(column: str) -> Filter:
    return Filter(f"{column} IS NULL")


def and_(*filters: Filter | None) -> Filter | None:
    """
    Conjunction of ``filters``.

    ``None`` operands are ignored, any false operand makes the result
    ``FALSE``, and a single remaining operand is returned unchanged.
    """
    operands = [f for f in filters if f is not None]
    if any(f.is_false for f in operands):
        return FALSE
    if not operands:
        return None
    if len(operands) == 1:
        return operands[0]
    sql = " AND ".join(f"({f.sql})" for f in operands)
    params: tuple[Any, ...] = ()
    for f in operands:
        params += f.params
    return Filter(sql, params)


def match_all(values: dict[str, Any]) -> Filter | None:
    """AND of ``eq`` over every column/value pair."""
    return and_(*(eq(column, value) for column, value in values.items()))


__all__ = ["Filter", "FALSE", "raw", "eq", "is_null", "and_", "match_all"]
