"""Tests for ``datagate.access.rows`` — post commands and merges."""

from _support.fakes import FakeDriver, FakeRow, FakeTable, KeyLocking
from datagate.access.rows import get_post_command, merge_row_into_table
from datagate.core.enums import RowState


class TestGetPostCommand:
    def setup_method(self):
        self.driver = FakeDriver()
        self.locking = KeyLocking(["id"])

    def test_added_row_inserts_all_fields(self):
        row = FakeRow("customer", {"id": 1, "name": "Ada"}, RowState.ADDED)
        assert get_post_command(self.driver, row, self.locking) == (
            "INSERT customer ['id', 'name'] [1, 'Ada']"
        )

    def test_modified_row_updates_modified_fields(self):
        row = FakeRow("customer", {"id": 1, "name": "Ada", "city": "Rome"}, RowState.MODIFIED, ["city"])
        assert get_post_command(self.driver, row, self.locking) == (
            "UPDATE customer ['city'] ['Rome'] WHERE id = ?"
        )

    def test_deleted_row(self):
        row = FakeRow("customer", {"id": 1}, RowState.DELETED)
        assert get_post_command(self.driver, row, self.locking) == "DELETE customer WHERE id = ?"

    def test_unchanged_and_detached_rows(self):
        for state in (RowState.UNCHANGED, RowState.DETACHED):
            row = FakeRow("customer", {"id": 1}, state)
            assert get_post_command(self.driver, row, self.locking) is None


class TestMergeRowIntoTable:
    def test_replaces_row_with_same_key(self):
        table = FakeTable("customer", keys=["id"])
        old = table.load({"id": 1, "name": "old"})
        table.load({"id": 2, "name": "other"})
        merge_row_into_table(table, {"id": 1, "name": "new"})
        assert old.state == RowState.DETACHED
        assert sorted(r.values()["name"] for r in table.rows) == ["new", "other"]

    def test_new_key_is_appended(self):
        table = FakeTable("customer", keys=["id"])
        table.load({"id": 1})
        merge_row_into_table(table, {"id": 2})
        assert len(table.rows) == 2
        assert table.rows[-1].state == RowState.UNCHANGED

    def test_table_without_key_always_appends(self):
        table = FakeTable("log")
        table.load({"msg": "a"})
        merge_row_into_table(table, {"msg": "a"})
        assert len(table.rows) == 2
