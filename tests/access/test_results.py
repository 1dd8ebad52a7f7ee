"""Tests for ``datagate.access.results`` — scalar/table reductions."""

from datagate.access.results import (
    first_row,
    first_table,
    first_value,
    last_row,
    last_table,
    last_value,
    single_property,
)

BATCH = [
    [{"n": 1}, {"n": 2}],
    [{"n": 3}],
    [{"n": 4}, {"n": 5}, {"n": 6}],
]


class TestTables:
    def test_first_and_last(self):
        assert first_table(BATCH) is BATCH[0]
        assert last_table(BATCH) is BATCH[2]

    def test_empty_batch(self):
        assert first_table([]) == []
        assert last_table([]) == []


class TestRows:
    def test_sequence(self):
        assert first_row([1, 2, 3]) == 1
        assert last_row([1, 2, 3]) == 3

    def test_empty_sequence(self):
        assert first_row([]) is None
        assert last_row([]) is None

    def test_non_sequence_returned_as_is(self):
        assert first_row({"a": 1}) == {"a": 1}
        assert last_row("text") == "text"


class TestSingleProperty:
    def test_mapping_first_column(self):
        assert single_property({"a": 1, "b": 2}) == 1

    def test_raw_row(self):
        assert single_property([9, 8]) == 9

    def test_none_and_empty(self):
        assert single_property(None) is None
        assert single_property({}) is None
        assert single_property([]) is None

    def test_scalar(self):
        assert single_property(5) == 5


class TestValues:
    def test_first_value_from_first_set(self):
        assert first_value(BATCH) == 1

    def test_last_value_from_last_set(self):
        assert last_value(BATCH) == 6

    def test_no_rows(self):
        assert first_value([[]]) is None
        assert last_value([]) is None
