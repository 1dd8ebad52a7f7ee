"""Driver base class.

Manifesto:
    All bundled drivers share command building (select, count, insert,
    update, delete, append) and the derivation of batch and line streams
    from one packet stream.  A concrete driver only implements the
    connection lifecycle, packetised execution and transactions.

Features:
    - Command builders over a ``Dialect``, producing ``Command`` objects
    - ``query_batch`` and ``query_lines`` derived from ``query_packets``
    - Stored procedure calls rejected unless a driver overrides them

Tags:
    datagate, driver, abstract-base, adapter-pattern
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing
from typing import Any

from datagate.core.dialect import Dialect
from datagate.core.enums import IsolationLevel
from datagate.core.errors import DriverError
from datagate.core.filters import Filter
from datagate.core.types import (
    MetaMarker,
    ResultTable,
    RowChunk,
    RowLine,
    SelectSpec,
    SqlParameter,
    UpdateResult,
)

from .types import Command

# Rows fetched per round-trip when streaming line by line
LINE_FETCH_SIZE = 256


class DriverBase(ABC):
    """
    Abstract base class for datagate drivers.

    Satisfies the ``Driver`` protocol once the abstract methods are
    implemented.
    """

    def __init__(self, dialect: Dialect):
        self._dialect = dialect

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def get_formatter(self) -> Dialect:
        return self._dialect

    # -- Lifecycle -----------------------------------------------------------

    @property
    @abstractmethod
    def is_open(self) -> bool: ...

    @abstractmethod
    async def open(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    def destroy(self) -> None: ...

    @abstractmethod
    def clone(self) -> DriverBase: ...

    # -- Command building ----------------------------------------------------

    @staticmethod
    def _columns(columns: str | Sequence[str]) -> str:
        if isinstance(columns, str):
            return columns
        return ", ".join(columns)

    @staticmethod
    def _where(filter: Filter | None) -> tuple[str, tuple[Any, ...]]:
        if filter is None:
            return "", ()
        return f" WHERE {filter.sql}", filter.params

    def get_select_command(self, spec: SelectSpec) -> Command:
        where, params = self._where(spec.filter)
        sql = f"SELECT {self._columns(spec.columns)} FROM {spec.table_name}{where}"
        if spec.order_by:
            sql += f" ORDER BY {spec.order_by}"
        if spec.top is not None:
            sql += self._dialect.limit_clause(spec.top)
        return Command.single(sql, params)

    def get_select_count(self, spec: SelectSpec) -> Command:
        where, params = self._where(spec.filter)
        return Command.single(f"SELECT COUNT(*) FROM {spec.table_name}{where}", params)

    def get_insert_command(
        self, table_name: str, columns: Sequence[str], values: Sequence[Any]
    ) -> Command:
        if len(columns) != len(values):
            raise DriverError(
                f"Insert into {table_name}: {len(columns)} columns but {len(values)} values"
            )
        placeholders = self._dialect.placeholders(len(values))
        sql = f"INSERT INTO {table_name} ({self._columns(columns)}) VALUES ({placeholders})"
        return Command.single(sql, values)

    def get_update_command(
        self,
        table_name: str,
        filter: Filter | None,
        columns: Sequence[str],
        values: Sequence[Any],
        environment: Any = None,
    ) -> Command:
        if len(columns) != len(values):
            raise DriverError(
                f"Update of {table_name}: {len(columns)} columns but {len(values)} values"
            )
        assignments = ", ".join(
            f"{c} = {self._dialect.placeholder(i)}" for i, c in enumerate(columns)
        )
        where, params = self._where(filter)
        return Command.single(f"UPDATE {table_name} SET {assignments}{where}", tuple(values) + params)

    def get_delete_command(
        self, table_name: str, filter: Filter | None, environment: Any = None
    ) -> Command:
        where, params = self._where(filter)
        return Command.single(f"DELETE FROM {table_name}{where}", params)

    def append_commands(self, commands: Sequence[Command]) -> Command:
        return Command.concat(commands)

    # -- Queries -------------------------------------------------------------

    @abstractmethod
    def query_packets(
        self, command: Command, raw: bool = False, packet_size: int = 0
    ) -> AsyncIterator[MetaMarker | RowChunk]: ...

    async def query_batch(self, command: Command, raw: bool = False) -> AsyncIterator[ResultTable]:
        current: ResultTable | None = None
        async with aclosing(self.query_packets(command, raw, 0)) as notifications:
            async for notification in notifications:
                match notification:
                    case MetaMarker(meta=meta):
                        if current is not None:
                            yield current
                        current = ResultTable([], meta=meta)
                    case RowChunk(rows=rows):
                        if current is None:
                            current = ResultTable([])
                        current.extend(rows)
        if current is not None:
            yield current

    async def query_lines(
        self, command: Command, raw: bool = False
    ) -> AsyncIterator[MetaMarker | RowLine]:
        async with aclosing(self.query_packets(command, raw, LINE_FETCH_SIZE)) as notifications:
            async for notification in notifications:
                match notification:
                    case MetaMarker():
                        yield notification
                    case RowChunk(set_index=set_index, rows=rows):
                        for row in rows:
                            yield RowLine(set_index, row)

    @abstractmethod
    async def update_batch(self, command: Command) -> UpdateResult: ...

    async def call_sp_with_named_params(
        self, sp_name: str, params: Sequence[SqlParameter], raw: bool = False
    ) -> list[list]:
        raise DriverError(f"{self._dialect.name} driver does not support stored procedures")

    # -- Transactions --------------------------------------------------------

    @abstractmethod
    async def begin_transaction(self, isolation_level: IsolationLevel) -> None: ...

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...


__all__ = ["DriverBase"]
