"""Tests for ``datagate.adapters.sqlite`` — SQLite reference driver."""

from __future__ import annotations

import sqlite3
from unittest.mock import patch

import pytest
import pytest_asyncio

from datagate.adapters.sqlite import SQLiteDriver
from datagate.adapters.types import Command
from datagate.core.enums import IsolationLevel
from datagate.core.errors import DatabaseConnectionError, DriverError
from datagate.core.filters import eq
from datagate.core.types import MetaMarker, RowChunk, RowLine, SelectSpec, SqlParameter

SCHEMA = """
CREATE TABLE customer (idcustomer INTEGER PRIMARY KEY, name TEXT, city TEXT);
INSERT INTO customer (name, city) VALUES ('Ada', 'London'), ('Grace', 'NYC'), ('Linus', 'Helsinki');
"""


@pytest_asyncio.fixture
async def driver():
    d = SQLiteDriver(":memory:")
    await d.open()
    await d.run_script(SCHEMA)
    yield d
    await d.close()


async def _collect(stream):
    return [item async for item in stream]


class TestLifecycle:
    def test_initial_state(self):
        d = SQLiteDriver()
        assert d.is_open is False
        assert d.path == ":memory:"
        assert d.get_formatter().name == "sqlite"

    @pytest.mark.asyncio
    async def test_open_close(self):
        d = SQLiteDriver()
        await d.open()
        assert d.is_open is True
        await d.close()
        assert d.is_open is False

    @pytest.mark.asyncio
    async def test_close_when_not_open(self):
        await SQLiteDriver().close()  # Should not raise

    @pytest.mark.asyncio
    @patch("sqlite3.connect", side_effect=sqlite3.OperationalError("unable to open database"))
    async def test_open_failure(self, mock_connect):
        with pytest.raises(DatabaseConnectionError):
            await SQLiteDriver("/nonexistent/x.db").open()

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self):
        d = SQLiteDriver()
        await d.open()
        tables = await _collect(d.query_batch(Command.single("PRAGMA foreign_keys")))
        assert tables[0][0]["foreign_keys"] == 1
        d.destroy()
        assert d.is_open is False

    @pytest.mark.asyncio
    async def test_readonly_rejects_writes(self, tmp_path):
        path = str(tmp_path / "ro.db")
        writer = SQLiteDriver(path)
        await writer.open()
        await writer.run_script("CREATE TABLE t (x INTEGER);")
        await writer.close()
        reader = SQLiteDriver(path, readonly=True)
        await reader.open()
        with pytest.raises(DriverError):
            await reader.update_batch(Command.single("INSERT INTO t VALUES (1)"))
        await reader.close()

    def test_clone_keeps_options(self):
        d = SQLiteDriver("x.db", readonly=True, timeout=1.0)
        twin = d.clone()
        assert twin is not d
        assert twin.path == "x.db"
        assert twin.is_open is False

    @pytest.mark.asyncio
    async def test_query_when_closed(self):
        with pytest.raises(DriverError, match="not open"):
            await _collect(SQLiteDriver().query_batch(Command.single("SELECT 1")))


class TestCommandBuilding:
    def setup_method(self):
        self.d = SQLiteDriver()

    def test_select(self):
        spec = SelectSpec("customer", columns=("idcustomer", "name"), filter=eq("city", "NYC"),
                          order_by="name", top=5)
        (stmt,) = self.d.get_select_command(spec).statements
        assert stmt.sql == "SELECT idcustomer, name FROM customer WHERE city = ? ORDER BY name LIMIT 5"
        assert stmt.params == ("NYC",)

    def test_count(self):
        (stmt,) = self.d.get_select_count(SelectSpec("customer")).statements
        assert stmt.sql == "SELECT COUNT(*) FROM customer"

    def test_insert(self):
        (stmt,) = self.d.get_insert_command("customer", ["name", "city"], ["Ada", "London"]).statements
        assert stmt.sql == "INSERT INTO customer (name, city) VALUES (?, ?)"
        assert stmt.params == ("Ada", "London")

    def test_insert_length_mismatch(self):
        with pytest.raises(DriverError):
            self.d.get_insert_command("customer", ["name"], [])

    def test_update_params_order(self):
        (stmt,) = self.d.get_update_command("customer", eq("idcustomer", 2), ["name"], ["Bob"]).statements
        assert stmt.sql == "UPDATE customer SET name = ? WHERE idcustomer = ?"
        assert stmt.params == ("Bob", 2)

    def test_delete(self):
        (stmt,) = self.d.get_delete_command("customer", eq("idcustomer", 2)).statements
        assert stmt.sql == "DELETE FROM customer WHERE idcustomer = ?"

    def test_append(self):
        a = self.d.get_select_command(SelectSpec("a"))
        b = self.d.get_select_command(SelectSpec("b"))
        combined = self.d.append_commands([a, b])
        assert [s.sql for s in combined.statements] == ["SELECT * FROM a", "SELECT * FROM b"]
        assert str(combined) == "SELECT * FROM a;\nSELECT * FROM b"


class TestQueries:
    @pytest.mark.asyncio
    async def test_query_packets_sizes(self, driver):
        items = await _collect(driver.query_packets(Command.single("SELECT * FROM customer"), False, 2))
        assert isinstance(items[0], MetaMarker)
        assert [c.name for c in items[0].meta] == ["idcustomer", "name", "city"]
        chunks = [i for i in items if isinstance(i, RowChunk)]
        assert [len(c.rows) for c in chunks] == [2, 1]

    @pytest.mark.asyncio
    async def test_packet_size_zero_single_chunk(self, driver):
        items = await _collect(driver.query_packets(Command.single("SELECT * FROM customer"), False, 0))
        assert [len(i.rows) for i in items if isinstance(i, RowChunk)] == [3]

    @pytest.mark.asyncio
    async def test_raw_rows(self, driver):
        items = await _collect(
            driver.query_packets(Command.single("SELECT name FROM customer ORDER BY name"), True, 0)
        )
        assert items[1].rows == [["Ada"], ["Grace"], ["Linus"]]

    @pytest.mark.asyncio
    async def test_multi_statement_sets(self, driver):
        cmd = Command.concat(
            [
                Command.single("SELECT 1 AS a"),
                Command.single("UPDATE customer SET city = city"),
                Command.single("SELECT 2 AS b"),
            ]
        )
        tables = await _collect(driver.query_batch(cmd))
        assert tables == [[{"a": 1}], [{"b": 2}]]
        assert [c.name for c in tables[1].meta] == ["b"]

    @pytest.mark.asyncio
    async def test_empty_set_still_reported(self, driver):
        tables = await _collect(driver.query_batch(Command.single("SELECT * FROM customer WHERE 1 = 0")))
        assert tables == [[]]

    @pytest.mark.asyncio
    async def test_query_lines(self, driver):
        items = await _collect(driver.query_lines(Command.single("SELECT idcustomer FROM customer")))
        lines = [i for i in items if isinstance(i, RowLine)]
        assert [line.row["idcustomer"] for line in lines] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_syntax_error(self, driver):
        with pytest.raises(DriverError):
            await _collect(driver.query_batch(Command.single("SELEC 1")))

    @pytest.mark.asyncio
    async def test_update_batch(self, driver):
        result = await driver.update_batch(
            Command.concat(
                [
                    Command.single("UPDATE customer SET city = ? WHERE idcustomer = ?", ["Rome", 1]),
                    Command.single("DELETE FROM customer WHERE idcustomer = ?", [3]),
                ]
            )
        )
        assert result.rowcount == 2

    @pytest.mark.asyncio
    async def test_insert_last_row_id(self, driver):
        result = await driver.update_batch(driver.get_insert_command("customer", ["name"], ["Barbara"]))
        assert result.rowcount == 1
        assert result.last_row_id == 4

    @pytest.mark.asyncio
    async def test_stored_procedures_unsupported(self, driver):
        with pytest.raises(DriverError, match="stored procedures"):
            await driver.call_sp_with_named_params("compute", [SqlParameter(1)])


class TestTransactions:
    @pytest.mark.asyncio
    async def test_rollback(self, driver):
        await driver.begin_transaction(IsolationLevel.READ_COMMITTED)
        await driver.update_batch(Command.single("DELETE FROM customer"))
        await driver.rollback()
        tables = await _collect(driver.query_batch(Command.single("SELECT COUNT(*) AS n FROM customer")))
        assert tables[0][0]["n"] == 3

    @pytest.mark.asyncio
    async def test_commit(self, driver):
        await driver.begin_transaction(IsolationLevel.SERIALIZABLE)
        await driver.update_batch(Command.single("DELETE FROM customer WHERE idcustomer = 1"))
        await driver.commit()
        tables = await _collect(driver.query_batch(Command.single("SELECT COUNT(*) AS n FROM customer")))
        assert tables[0][0]["n"] == 2
