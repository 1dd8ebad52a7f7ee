"""Tests for datagate.core.types."""

from datagate.core.filters import eq
from datagate.core.types import ColumnDescriptor, ResultTable, SelectSpec, objectify


class TestSelectSpec:
    def test_result_name(self):
        assert SelectSpec("customer").result_name == "customer"
        assert SelectSpec("customer", alias="c").result_name == "c"

    def test_with_filter_copies(self):
        spec = SelectSpec("customer", top=3)
        secured = spec.with_filter(eq("id", 1))
        assert spec.filter is None
        assert secured.filter == eq("id", 1)
        assert secured.top == 3

    def test_apply_security_default(self):
        assert SelectSpec("t").apply_security is True


class TestResultTable:
    def test_is_a_list(self):
        table = ResultTable([{"a": 1}], table_name="t")
        assert table == [{"a": 1}]
        assert table.table_name == "t"
        assert table.meta is None
        assert "table_name='t'" in repr(table)


class TestObjectify:
    def test_names(self):
        assert objectify(["a", "b"], [[1, 2], [3, 4]]) == [{"a": 1, "b": 2}, {"a": 3, "b": 4}]

    def test_descriptors(self):
        meta = (ColumnDescriptor("id"), ColumnDescriptor("name"))
        assert objectify(meta, [(1, "x")]) == [{"id": 1, "name": "x"}]
