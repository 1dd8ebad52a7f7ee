"""
Canonical protocol definitions for datagate.

The data-access core depends on the *shape* of its collaborators, never on a
concrete class: the SQL driver, the security provider, the in-memory data
set it merges into, and the select grouping strategy.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── Formatter          — renders expressions for the driver's dialect
        ├── Driver             — async SQL execution + command building
        ├── Security           — per-table security condition lookup
        ├── SecurityProvider   — async factory for Security
        ├── DataRow            — change-tracked row (for post commands)
        ├── OptimisticLocking  — builds the optimistic lock filter of a row
        ├── DataTable/DataSet  — in-memory tables fed by merges
        └── SelectGrouper      — normalises multi-select lists

Guardrails:
    ❌ DON'T: Import a concrete driver in the access layer
    ✅ DO: Depend on ``Driver`` and let callers inject one

Tags:
    protocol, driver, security, datagate, contracts
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from datagate.core.enums import AccessMode, IsolationLevel, RowState
from datagate.core.filters import Filter
from datagate.core.types import (
    MetaMarker,
    RowChunk,
    RowLine,
    SelectSpec,
    SqlParameter,
    UpdateResult,
)

# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


@runtime_checkable
class Formatter(Protocol):
    """Formats values and expressions for one SQL dialect."""

    def to_sql(self, expr: Any, environment: Any = None) -> str:
        """Render an expression as SQL text usable as a select column."""
        ...

    def quote(self, value: Any) -> str:
        """Render a literal value."""
        ...


@runtime_checkable
class Driver(Protocol):
    """
    Asynchronous SQL driver.

    Command objects returned by the ``get_*_command`` builders are opaque to
    the core: it only hands them back to the same driver.  Streaming queries
    return async generators of notifications in server order; the core
    closes them with ``aclose()`` when a consumer stops early.
    """

    @property
    def is_open(self) -> bool: ...

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    def destroy(self) -> None: ...

    def clone(self) -> Driver: ...

    def get_formatter(self) -> Formatter: ...

    def get_select_command(self, spec: SelectSpec) -> Any: ...

    def get_select_count(self, spec: SelectSpec) -> Any: ...

    def get_insert_command(
        self, table_name: str, columns: Sequence[str], values: Sequence[Any]
    ) -> Any: ...

    def get_update_command(
        self,
        table_name: str,
        filter: Filter | None,
        columns: Sequence[str],
        values: Sequence[Any],
        environment: Any = None,
    ) -> Any: ...

    def get_delete_command(
        self, table_name: str, filter: Filter | None, environment: Any = None
    ) -> Any: ...

    def append_commands(self, commands: Sequence[Any]) -> Any: ...

    def query_batch(self, command: Any, raw: bool = False) -> AsyncIterator[list]:
        """Yield every result set of ``command`` as a list of rows."""
        ...

    def query_lines(
        self, command: Any, raw: bool = False
    ) -> AsyncIterator[MetaMarker | RowLine]:
        """Yield a ``MetaMarker`` per result set followed by one ``RowLine`` per row."""
        ...

    def query_packets(
        self, command: Any, raw: bool = False, packet_size: int = 0
    ) -> AsyncIterator[MetaMarker | RowChunk]:
        """Yield a ``MetaMarker`` per result set followed by chunks of at most
        ``packet_size`` rows (0 = one chunk per set)."""
        ...

    async def update_batch(self, command: Any) -> UpdateResult: ...

    async def call_sp_with_named_params(
        self, sp_name: str, params: Sequence[SqlParameter], raw: bool = False
    ) -> list[list]: ...

    async def begin_transaction(self, isolation_level: IsolationLevel) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


class Security(Protocol):
    """Supplies the read/write security condition of a table."""

    async def security_condition(
        self, table_name: str, access_mode: AccessMode, environment: Any
    ) -> Filter | None: ...


SecurityProvider = Callable[[Any, Formatter], Awaitable[Security]]
"""``async (data_access, formatter) -> Security``."""


# ---------------------------------------------------------------------------
# In-memory data
# ---------------------------------------------------------------------------


class DataRow(Protocol):
    """A change-tracked row belonging to a named table."""

    @property
    def state(self) -> RowState: ...

    @property
    def table_name(self) -> str: ...

    def values(self) -> dict[str, Any]: ...

    def modified_fields(self) -> list[str]: ...

    def detach(self) -> None: ...


class OptimisticLocking(Protocol):
    def get_optimistic_lock(self, row: DataRow) -> Filter | None: ...


class DataTable(Protocol):
    name: str
    rows: list[DataRow]

    def column_list(self) -> str | tuple[str, ...]: ...

    def table_for_reading(self) -> str: ...

    def skip_security(self) -> bool: ...

    def key(self) -> list[str]: ...

    def load(self, row: dict[str, Any], is_added: bool = False) -> DataRow: ...

    def merge_array(self, rows: list[dict[str, Any]], overwrite: bool = True) -> None: ...


class DataSet(Protocol):
    tables: dict[str, DataTable]


SelectGrouper = Callable[[Sequence[SelectSpec]], Sequence[SelectSpec]]
"""Normalises (e.g. merges compatible) select specifications, preserving order."""


__all__ = [
    "Formatter",
    "Driver",
    "Security",
    "SecurityProvider",
    "DataRow",
    "OptimisticLocking",
    "DataTable",
    "DataSet",
    "SelectGrouper",
]
