"""Row-level helpers: post commands for changed rows and key-based merges."""

from __future__ import annotations

from typing import Any

from datagate.core.enums import RowState
from datagate.core.protocols import DataRow, DataTable, Driver, OptimisticLocking


def get_post_command(
    driver: Driver,
    row: DataRow,
    optimistic_locking: OptimisticLocking,
    environment: Any = None,
) -> Any:
    """
    Command that writes ``row``'s pending change, or None if it has none.

    Modified rows update only their modified fields and, like deleted rows,
    are guarded by the optimistic lock filter.
    """
    match row.state:
        case RowState.ADDED:
            values = row.values()
            return driver.get_insert_command(row.table_name, list(values), list(values.values()))
        case RowState.MODIFIED:
            values = row.values()
            fields = row.modified_fields()
            return driver.get_update_command(
                row.table_name,
                optimistic_locking.get_optimistic_lock(row),
                fields,
                [values[f] for f in fields],
                environment,
            )
        case RowState.DELETED:
            return driver.get_delete_command(
                row.table_name,
                optimistic_locking.get_optimistic_lock(row),
                environment,
            )
        case _:
            return None


def merge_row_into_table(table: DataTable, row: dict[str, Any]) -> None:
    """Load ``row`` into ``table``, detaching an existing row with the same key."""
    key = table.key()
    if key:
        for existing in table.rows:
            current = existing.values()
            if all(current.get(k) == row.get(k) for k in key):
                existing.detach()
                break
    table.load(row, False)


__all__ = ["get_post_command", "merge_row_into_table"]
