"""SQLite driver (stdlib ``sqlite3``).

Blocking sqlite3 calls run in worker threads via ``asyncio.to_thread`` so
the event loop is never blocked.  The connection is opened in autocommit
mode; ``begin_transaction``/``commit``/``rollback`` issue explicit
statements.

Suitable for:
- Development and testing
- Single-process applications

Note: every ``open()`` of ``":memory:"`` creates a fresh database, so use a
persisting ``DataAccess`` (the default) or a file path / shared-cache URI
when the connection is opened and closed per operation.
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import AsyncIterator, Callable
from typing import Any, TypeVar

from datagate.core.dialect import get_dialect
from datagate.core.enums import IsolationLevel
from datagate.core.errors import DatabaseConnectionError, DriverError
from datagate.core.logging import get_logger
from datagate.core.settings import DataAccessSettings
from datagate.core.types import ColumnDescriptor, MetaMarker, RowChunk, UpdateResult

from .base import DriverBase
from .types import Command

logger = get_logger(__name__)

T = TypeVar("T")


class SQLiteDriver(DriverBase):
    """
    SQLite driver.

    Each row-returning statement of a ``Command`` is one result set.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        readonly: bool = False,
        timeout: float | None = None,
        settings: DataAccessSettings | None = None,
    ):
        super().__init__(get_dialect("sqlite"))
        self._path = path
        self._readonly = readonly
        if timeout is None:
            timeout = (settings or DataAccessSettings()).sqlite_timeout
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    # -- Lifecycle -----------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self._path,
            timeout=self._timeout,
            check_same_thread=False,
            uri=self._path.startswith("file:"),
            isolation_level=None,
        )
        conn.execute("PRAGMA foreign_keys = ON")
        if self._readonly:
            conn.execute("PRAGMA query_only = ON")
        return conn

    async def open(self) -> None:
        """Connect to the SQLite database (no-op when already open)."""
        if self._conn is not None:
            return
        try:
            self._conn = await asyncio.to_thread(self._connect)
        except sqlite3.Error as e:
            raise DatabaseConnectionError(f"Failed to connect to SQLite: {e}", cause=e) from e
        logger.debug("sqlite_opened", path=self._path)

    async def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            await asyncio.to_thread(conn.close)

    def destroy(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    def clone(self) -> SQLiteDriver:
        return SQLiteDriver(self._path, readonly=self._readonly, timeout=self._timeout)

    # -- Execution -----------------------------------------------------------

    def _require(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DriverError("SQLite connection is not open")
        return self._conn

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as e:
            raise DriverError(f"SQLite error: {e}", cause=e) from e

    @staticmethod
    def _shape(rows: list[tuple], names: list[str], raw: bool) -> list:
        if raw:
            return [list(row) for row in rows]
        return [dict(zip(names, row)) for row in rows]

    async def query_packets(
        self, command: Command, raw: bool = False, packet_size: int = 0
    ) -> AsyncIterator[MetaMarker | RowChunk]:
        conn = self._require()
        set_index = 0
        for statement in command.statements:
            cursor = await self._call(conn.execute, statement.sql, statement.params)
            try:
                if cursor.description is None:
                    continue
                meta = tuple(ColumnDescriptor(d[0]) for d in cursor.description)
                names = [c.name for c in meta]
                yield MetaMarker(set_index, meta)
                while True:
                    if packet_size > 0:
                        rows = await self._call(cursor.fetchmany, packet_size)
                    else:
                        rows = await self._call(cursor.fetchall)
                    if not rows:
                        break
                    yield RowChunk(set_index, self._shape(rows, names, raw))
                    if packet_size <= 0:
                        break
                set_index += 1
            finally:
                cursor.close()

    async def update_batch(self, command: Command) -> UpdateResult:
        conn = self._require()
        rowcount = 0
        last_row_id = None
        for statement in command.statements:
            cursor = await self._call(conn.execute, statement.sql, statement.params)
            if cursor.rowcount > 0:
                rowcount += cursor.rowcount
            last_row_id = cursor.lastrowid
            cursor.close()
        return UpdateResult(rowcount=rowcount, last_row_id=last_row_id)

    async def run_script(self, sql: str) -> None:
        """Run a multi-statement SQL script (schema setup, fixtures)."""
        await self._call(self._require().executescript, sql)

    # -- Transactions --------------------------------------------------------

    async def begin_transaction(self, isolation_level: IsolationLevel) -> None:
        conn = self._require()
        for sql in self._dialect.begin_transaction(isolation_level):
            await self._call(conn.execute, sql)

    async def commit(self) -> None:
        await self._call(self._require().execute, "COMMIT")

    async def rollback(self) -> None:
        await self._call(self._require().execute, "ROLLBACK")


__all__ = ["SQLiteDriver"]
