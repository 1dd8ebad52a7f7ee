"""
Value types exchanged between drivers, the data-access core and callers.

Driver notification streams are made of tagged variants:

    ┌────────────────────────────────────────────────────────────┐
    │ MetaMarker(set_index, meta)   a result set starts          │
    │ RowChunk(set_index, rows)     up to packet_size rows       │
    │ RowLine(set_index, row)       one row (line streaming)     │
    └────────────────────────────────────────────────────────────┘

and the core re-emits ``Packet`` objects labelled with a table name.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from datagate.core.filters import Filter

Row = Any
"""A row: ``dict`` when objectified, positional ``list``/``tuple`` when raw."""


@dataclass(frozen=True)
class ColumnDescriptor:
    """Result column; position in the meta list maps to raw row positions."""

    name: str
    type_name: str | None = None
    table_name: str | None = None


@dataclass(frozen=True)
class MetaMarker:
    set_index: int
    meta: tuple[ColumnDescriptor, ...]


@dataclass(frozen=True)
class RowChunk:
    set_index: int
    rows: list[Row]


@dataclass(frozen=True)
class RowLine:
    set_index: int
    row: Row


Notification = MetaMarker | RowChunk | RowLine


@dataclass(frozen=True)
class Packet:
    """
    Rows from one result set, labelled with the table (or alias) they belong to.

    ``meta`` is only set in raw mode, where it describes every packet so
    each one can be consumed on its own.
    """

    table_name: str
    rows: list[Row]
    set_index: int = 0
    meta: tuple[ColumnDescriptor, ...] | None = None


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a data-modifying command."""

    rowcount: int
    last_row_id: Any = None


@dataclass
class SqlParameter:
    """
    Stored procedure parameter.

    Output parameters need ``name`` and ``sql_type``; the driver stores the
    returned value in ``out_value``.
    """

    value: Any = None
    name: str | None = None
    out: bool = False
    sql_type: str | None = None
    out_value: Any = None


@dataclass(frozen=True)
class SelectSpec:
    """A read request against one table or view.

    ``alias`` names the result when it should differ from ``table_name``.
    """

    table_name: str
    columns: str | tuple[str, ...] = "*"
    filter: Filter | None = None
    top: int | None = None
    alias: str | None = None
    order_by: str | None = None
    environment: Any = None
    apply_security: bool = True

    @property
    def result_name(self) -> str:
        return self.alias or self.table_name

    def with_filter(self, new_filter: Filter | None) -> SelectSpec:
        return replace(self, filter=new_filter)


class ResultTable(list):
    """Rows of one result set, tagged with the table name they were read as."""

    def __init__(self, rows=(), table_name: str | None = None, meta=None):
        super().__init__(rows)
        self.table_name = table_name
        self.meta = meta

    def __repr__(self) -> str:
        return f"ResultTable(table_name={self.table_name!r}, rows={list.__repr__(self)})"


def objectify(columns, rows) -> list[dict[str, Any]]:
    """
    Turn raw positional rows into dicts keyed by column name.

    ``columns`` may be names or ``ColumnDescriptor`` objects.
    """
    names = [c.name if isinstance(c, ColumnDescriptor) else c for c in columns]
    return [dict(zip(names, row)) for row in rows]


__all__ = [
    "Row",
    "ColumnDescriptor",
    "MetaMarker",
    "RowChunk",
    "RowLine",
    "Notification",
    "Packet",
    "UpdateResult",
    "SqlParameter",
    "SelectSpec",
    "ResultTable",
    "objectify",
]
