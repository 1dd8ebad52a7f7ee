"""
DataAccess: a database-agnostic façade over an injected ``Driver``.

Manifesto:
    Application code reads and writes relational data through one object
    that knows nothing about the engine behind it.  ``DataAccess`` adds
    what drivers do not provide themselves:

    - **Lifecycle:** nested open/close over one connection (``ConnectionHandle``)
    - **Scoping:** every round-trip runs inside ``ensure_open``
    - **Security:** read filters are ANDed with the table's security condition
    - **Streaming:** rows, packets and multi-select packets as async iterators
    - **Reductions:** first/last table, row and scalar of a batch

Architecture:
    ::

        DataAccess
        ├── ConnectionHandle      (lifecycle.py)   open/close nesting
        ├── ensure_open*          (scoped.py)      acquire / run / release
        ├── get_filter_secured    (security.py)    caller filter ∧ security
        ├── PacketAssembler       (packets.py)     notifications → packets
        ├── multi_select          (multiselect.py) N selects, one command
        └── first_value, ...      (results.py)     scalar reductions

Examples:
    >>> access = await DataAccess.create(SQLiteDriver("app.db"), security_provider=provider)
    >>> customers = await access.select(SelectSpec("customer", filter=eq("city", "Rome")))
    >>> async for packet in access.query_packets(SelectSpec("orders"), packet_size=500):
    ...     handle(packet.rows)
    >>> await access.select_count(SelectSpec("orders"))
    1200

Guardrails:
    ❌ DON'T: call driver methods directly when a DataAccess exists
    ✅ DO: go through DataAccess so the open/close pairing holds

    ❌ DON'T: pass apply_security=False to "make a query work"
    ✅ DO: fix the security condition or the environment

Tags:
    data-access, facade, connection, streaming, security, datagate
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import aclosing
from typing import Any

from datagate.access import multiselect
from datagate.access.lifecycle import ConnectionHandle
from datagate.access.packets import PacketAssembler, single_table
from datagate.access.results import first_table, first_value, last_table, last_value
from datagate.access.rows import get_post_command, merge_row_into_table
from datagate.access.scoped import ensure_open, ensure_open_stream
from datagate.access.security import get_filter_secured
from datagate.core.enums import IsolationLevel
from datagate.core.errors import (
    CommandError,
    ConfigError,
    DataAccessError,
    SecurityError,
    driver_errors,
)
from datagate.core.filters import Filter
from datagate.core.logging import LogContext, get_logger
from datagate.core.protocols import (
    DataRow,
    DataSet,
    DataTable,
    Driver,
    Formatter,
    OptimisticLocking,
    Security,
    SecurityProvider,
    SelectGrouper,
)
from datagate.core.settings import DataAccessSettings
from datagate.core.types import (
    MetaMarker,
    Packet,
    ResultTable,
    RowLine,
    SelectSpec,
    SqlParameter,
    UpdateResult,
)

logger = get_logger(__name__)


async def _collect(stream: AsyncIterator[Any]) -> list[Any]:
    return [item async for item in stream]


class DataAccess:
    """
    Rich connection to a database.

    With ``persisting=True`` (the default) the physical connection is opened
    by ``connect()`` and stays open until ``destroy()``; otherwise it is
    opened and closed around each operation.

    Construct with ``await DataAccess.create(driver, ...)`` or call
    ``connect()`` yourself after ``DataAccess(driver, ...)``.
    """

    def __init__(
        self,
        driver: Driver,
        *,
        persisting: bool | None = None,
        security_provider: SecurityProvider | None = None,
        error_callback: Callable[[Exception], None] | None = None,
        success_callback: Callable[[DataAccess], None] | None = None,
        select_grouper: SelectGrouper | None = None,
        settings: DataAccessSettings | None = None,
    ):
        if driver is None:
            raise ConfigError("DataAccess requires a driver")
        self.settings = settings or DataAccessSettings()
        if persisting is None:
            persisting = self.settings.persisting
        self._handle = ConnectionHandle(driver, persisting=persisting)
        self._security_provider = security_provider
        self._error_callback = error_callback
        self._success_callback = success_callback
        self._grouper = select_grouper or multiselect.keep_order
        self._last_error: str | None = None
        self.security: Security | None = None
        self.external_user: str | None = None

    @classmethod
    async def create(cls, driver: Driver, **options: Any) -> DataAccess:
        """Build a ``DataAccess`` and run ``connect()`` on it."""
        access = cls(driver, **options)
        await access.connect()
        return access

    # -- Session -----------------------------------------------------------

    async def connect(self) -> DataAccess:
        """
        Open the connection (when persisting) and load security.

        Raises:
            DatabaseConnectionError: the driver could not be opened
            SecurityError: the security provider failed
        """
        if self.persisting:
            try:
                await self._handle.open()
            except DataAccessError as e:
                self._fail(e.message, e)
                raise
            try:
                await self._load_security()
            finally:
                await self._handle.close()
        else:
            await self._load_security()
        if self._success_callback is not None:
            self._success_callback(self)
        return self

    async def _load_security(self) -> None:
        if self._security_provider is None:
            return
        try:
            self.security = await self._security_provider(self, self.get_formatter())
        except SecurityError as e:
            self._fail(e.message, e)
            raise
        except Exception as e:
            error = SecurityError(f"Error getting security information: {e}", cause=e)
            self._fail(error.message, error)
            raise error from e
        logger.info("security_loaded", persisting=self.persisting)

    def _fail(self, message: str, error: Exception) -> None:
        self._last_error = message
        if self._error_callback is not None:
            self._error_callback(error)

    @property
    def last_error(self) -> str | None:
        """Last connection/security error; reading it clears it."""
        message, self._last_error = self._last_error, None
        return message

    @last_error.setter
    def last_error(self, value: str | None) -> None:
        self._last_error = value

    def peek_last_error(self) -> str | None:
        """Last error, without clearing it."""
        return self._last_error

    @property
    def driver(self) -> Driver:
        return self._handle.driver

    @property
    def handle(self) -> ConnectionHandle:
        return self._handle

    @property
    def persisting(self) -> bool:
        return self._handle.persisting

    @property
    def nesting(self) -> int:
        return self._handle.nesting

    async def open(self) -> None:
        """Acquire an open reference (see ``ConnectionHandle.open``)."""
        await self._handle.open()

    async def close(self) -> None:
        """Release an open reference (see ``ConnectionHandle.close``)."""
        await self._handle.close()

    def destroy(self) -> None:
        """Destroy the underlying connection."""
        self._handle.destroy()

    async def clone(self) -> DataAccess:
        """New ``DataAccess`` on a clone of the driver, same user and options."""
        twin = await DataAccess.create(
            self.driver.clone(),
            persisting=self.persisting,
            security_provider=self._security_provider,
            select_grouper=self._grouper,
            settings=self.settings,
        )
        twin.external_user = self.external_user
        return twin

    def get_formatter(self) -> Formatter:
        return self.driver.get_formatter()

    def __str__(self) -> str:
        return "DataAccess"

    def __repr__(self) -> str:
        return f"DataAccess({self._handle!r})"

    # -- Transactions --------------------------------------------------------

    async def begin_transaction(
        self, isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED
    ) -> None:
        with driver_errors("begin_transaction"):
            await self.driver.begin_transaction(isolation_level)

    async def commit(self) -> None:
        with driver_errors("commit"):
            await self.driver.commit()

    async def rollback(self) -> None:
        with driver_errors("rollback"):
            await self.driver.rollback()

    # -- Batches and scalars -------------------------------------------------

    async def _read_tables(self, command: Any, raw: bool) -> list[Any]:
        async def run() -> list[Any]:
            with driver_errors("query_batch", command=str(command)):
                return await _collect(self.driver.query_batch(command, raw))

        return await ensure_open(self._handle, run)

    async def read_first_table(self, command: Any, raw: bool = False) -> Any:
        """First result set produced by ``command``."""
        return first_table(await self._read_tables(command, raw))

    async def read_last_table(self, command: Any, raw: bool = False) -> Any:
        """Last result set produced by ``command``."""
        return last_table(await self._read_tables(command, raw))

    async def read_first_value(self, command: Any) -> Any:
        """Single column of the first row of the first result set."""
        return first_value(await self._read_tables(command, False))

    async def read_last_value(self, command: Any) -> Any:
        """Single column of the last row of the last result set."""
        return last_value(await self._read_tables(command, False))

    async def run_cmd(self, command: Any) -> Any:
        """Run a command returning one value; anything else it returns is ignored."""
        return await self.read_first_value(command)

    async def run_sql(self, command: Any, raw: bool = False) -> Any:
        """Run a command returning a table; only the first table is kept."""
        return await self.read_first_table(command, raw)

    async def read_single_value(
        self,
        table_name: str,
        expr: Any,
        *,
        filter: Filter | None = None,
        top: int | None = None,
        order_by: str | None = None,
        environment: Any = None,
    ) -> Any:
        """Read ``expr`` from ``table_name``; with several rows the first wins."""
        column = self.get_formatter().to_sql(expr, environment)
        spec = SelectSpec(
            table_name,
            columns=(column,),
            filter=filter,
            top=top,
            order_by=order_by,
            environment=environment,
        )
        return await self.read_first_value(self.driver.get_select_command(spec))

    # -- Data modification ---------------------------------------------------

    async def do_generic_update(self, command: Any) -> UpdateResult:
        """Run a data-modifying command with the connection open."""

        async def run() -> UpdateResult:
            with driver_errors("update_batch", command=str(command)):
                return await self.driver.update_batch(command)

        return await ensure_open(self._handle, run)

    async def _do_single(self, command: Any, message: str, table_name: str) -> UpdateResult:
        async with LogContext(table_name=table_name):
            result = await self.do_generic_update(command)
            if result is None or not getattr(result, "rowcount", 0):
                logger.warning("single_row_command_failed", command=str(command))
                raise CommandError(message).with_context(
                    table_name=table_name, command=str(command), result=result
                )
        return result

    async def do_single_insert(
        self, table_name: str, columns: Sequence[str], values: Sequence[Any]
    ) -> UpdateResult:
        """Insert exactly one row; fails with ``CommandError`` if none was inserted."""
        command = self.driver.get_insert_command(table_name, columns, values)
        return await self._do_single(command, f"Error running command {command}", table_name)

    async def do_single_update(
        self,
        table_name: str,
        filter: Filter | None,
        columns: Sequence[str],
        values: Sequence[Any],
        environment: Any = None,
    ) -> UpdateResult:
        """Update one row; fails with ``CommandError`` if no row matched."""
        command = self.driver.get_update_command(table_name, filter, columns, values, environment)
        return await self._do_single(
            command, f"There was no row in table {table_name} to update with condition {filter}", table_name
        )

    async def do_single_delete(
        self, table_name: str, filter: Filter | None, environment: Any = None
    ) -> UpdateResult:
        """Delete one row; fails with ``CommandError`` if no row matched."""
        command = self.driver.get_delete_command(table_name, filter, environment)
        return await self._do_single(
            command, f"There was no row in table {table_name} to delete with condition {filter}", table_name
        )

    def get_post_command(
        self, row: DataRow, optimistic_locking: OptimisticLocking, environment: Any = None
    ) -> Any:
        """Insert/update/delete command for ``row``'s change state, or None."""
        return get_post_command(self.driver, row, optimistic_locking, environment)

    # -- Stored procedures ---------------------------------------------------

    async def call_sp(self, sp_name: str, params: Sequence[Any], raw: bool = False) -> list[list]:
        """Call ``sp_name`` with positional values; returns its result tables."""
        return await self.call_sp_with_named_params(
            sp_name, [SqlParameter(value=p) for p in params], raw
        )

    async def call_sp_with_named_params(
        self, sp_name: str, params: Sequence[SqlParameter], raw: bool = False
    ) -> list[list]:
        """
        Call ``sp_name`` with ``SqlParameter`` objects.

        Output parameters (``out=True``, with ``name`` and ``sql_type``) get
        their ``out_value`` filled in once the procedure has run.
        """

        async def run() -> list[list]:
            with driver_errors("call_sp", sp_name=sp_name):
                return await self.driver.call_sp_with_named_params(sp_name, params, raw)

        return await ensure_open(self._handle, run)

    # -- Reads ---------------------------------------------------------------

    async def get_filter_secured(
        self,
        filter: Filter | None,
        apply_security: bool,
        table_name: str,
        environment: Any = None,
    ) -> Filter | None:
        """Caller filter merged with the table's read security condition."""
        return await get_filter_secured(self.security, filter, apply_security, table_name, environment)

    async def _secured_spec(self, spec: SelectSpec) -> SelectSpec:
        filter_sec = await self.get_filter_secured(
            spec.filter, spec.apply_security, spec.table_name, spec.environment
        )
        return spec.with_filter(filter_sec)

    async def select(self, spec: SelectSpec, raw: bool = False) -> ResultTable:
        """
        Read a whole table.

        The result is tagged with ``spec.alias`` or ``spec.table_name``.  A
        filter that is statically false returns an empty table without any
        round-trip.
        """
        if spec.filter is not None and spec.filter.is_false:
            return ResultTable([], table_name=spec.result_name)
        async with LogContext(table_name=spec.table_name):
            secured = await self._secured_spec(spec)
            data = await self.run_sql(self.driver.get_select_command(secured), raw)
        return ResultTable(data, table_name=spec.result_name, meta=getattr(data, "meta", None))

    async def select_rows(
        self, spec: SelectSpec, raw: bool = False
    ) -> AsyncIterator[MetaMarker | RowLine]:
        """Stream a table row by row: one ``MetaMarker`` then one ``RowLine`` per row."""

        async def lines() -> AsyncIterator[MetaMarker | RowLine]:
            secured = await self._secured_spec(spec)
            command = self.driver.get_select_command(secured)
            with driver_errors("query_lines", table_name=spec.table_name):
                async with aclosing(self.driver.query_lines(command, raw)) as rows:
                    async for item in rows:
                        yield item

        async with aclosing(ensure_open_stream(self._handle, lines)) as stream:
            async for item in stream:
                yield item

    async def query_packets(
        self, spec: SelectSpec, packet_size: int | None = None, raw: bool = False
    ) -> AsyncIterator[Packet]:
        """
        Stream a table in packets of at most ``packet_size`` rows.

        ``packet_size`` 0 means one packet per result set; None uses the
        configured default.  In raw mode each packet also carries the column
        descriptors.
        """
        if packet_size is None:
            packet_size = self.settings.packet_size

        async def packets() -> AsyncIterator[Packet]:
            secured = await self._secured_spec(spec)
            command = self.driver.get_select_command(secured)
            assembler = PacketAssembler(single_table(spec.result_name), raw=raw)
            notifications = self.driver.query_packets(command, raw, packet_size)
            with driver_errors("query_packets", table_name=spec.table_name):
                async with aclosing(assembler.reassemble(notifications)) as reassembled:
                    async for packet in reassembled:
                        yield packet

        async with aclosing(ensure_open_stream(self._handle, packets)) as stream:
            async for packet in stream:
                yield packet

    async def select_count(self, spec: SelectSpec) -> Any:
        """Count the rows of a table; 0 without a round-trip if the filter is false."""
        async with LogContext(table_name=spec.table_name):
            secured = await self._secured_spec(spec)
            if secured.filter is not None and secured.filter.is_false:
                return 0
            return await self.run_cmd(self.driver.get_select_count(secured))

    async def select_into_table(
        self,
        table: DataTable,
        *,
        columns: str | tuple[str, ...] | None = None,
        filter: Filter | None = None,
        top: int | None = None,
        order_by: str | None = None,
        environment: Any = None,
    ) -> DataTable:
        """Merge rows read from the database into ``table``, overwriting by primary key."""
        spec = SelectSpec(
            table.table_for_reading(),
            columns=columns or table.column_list(),
            filter=filter,
            top=top,
            order_by=order_by,
            environment=environment,
            apply_security=not table.skip_security(),
        )
        for row in await self.select(spec):
            merge_row_into_table(table, row)
        return table

    async def multi_select(
        self,
        selects: Sequence[SelectSpec],
        *,
        packet_size: int | None = None,
        raw: bool = False,
        apply_security: bool = True,
        environment: Any = None,
    ) -> AsyncIterator[Packet]:
        """
        Run several selects as one command and stream packets per alias.

        ``environment`` is used for selects that do not carry their own.
        """
        if packet_size is None:
            packet_size = self.settings.packet_size
        packets = multiselect.multi_select(
            self._handle,
            self.security,
            selects,
            grouper=self._grouper,
            packet_size=packet_size,
            raw=raw,
            apply_security=apply_security,
            environment=environment,
        )
        with driver_errors("multi_select"):
            async with aclosing(packets) as stream:
                async for packet in stream:
                    yield packet

    async def merge_multi_select(
        self, selects: Sequence[SelectSpec], data_set: DataSet, environment: Any = None
    ) -> DataSet:
        """
        Multi-select straight into ``data_set``, merging rows by primary key.

        Security is applied only when an ``environment`` is given.
        """
        packets = self.multi_select(
            selects, apply_security=environment is not None, environment=environment
        )
        async with aclosing(packets) as stream:
            async for packet in stream:
                table = data_set.tables.get(packet.table_name)
                if table is None:
                    raise ConfigError(f"Table {packet.table_name} is not in the data set")
                table.merge_array(packet.rows, True)
        return data_set


__all__ = ["DataAccess"]
