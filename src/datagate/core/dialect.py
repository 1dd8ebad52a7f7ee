"""SQL dialect abstraction used by datagate's drivers.

A ``Dialect`` renders the fragments that differ between engines: literal
values, select expressions, row limits and transaction starts.  It is also
the ``Formatter`` that ``DataAccess.get_formatter()`` hands to security
providers and to ``read_single_value``.

Architecture::

    DriverBase.get_select_command(spec)
        │  f"SELECT {cols} FROM {table} WHERE {filter.sql}{d.limit_clause(top)}"
        ▼
    ┌──────────────────────────────────────┐
    │ SQLiteDialect                        │
    │ ?  placeholders, LIMIT n, BEGIN ...  │
    └──────────────────────────────────────┘

Examples:
    >>> from datagate.core.dialect import get_dialect
    >>> d = get_dialect("sqlite")
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> d.quote("O'Hara")
    "'O''Hara'"

Guardrails:
    ❌ DON'T: Interpolate caller values with ``quote()`` when a parameter works
    ✅ DO: Use placeholders and pass values as parameters

Tags:
    dialect, sql, abstraction, portability, datagate
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from datagate.core.enums import IsolationLevel


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a **SQL fragment** valid for the target database.
    """

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    def quote(self, value: Any) -> str:
        """Literal SQL rendering of a Python value."""
        ...

    def to_sql(self, expr: Any, environment: Any = None) -> str:
        """Render a select expression.

        Strings are taken as SQL text, objects exposing
        ``to_sql(dialect, environment)`` render themselves, and anything
        else is quoted as a literal.
        """
        ...

    def limit_clause(self, top: int) -> str:
        """Clause appended to a select to keep at most ``top`` rows."""
        ...

    def begin_transaction(self, isolation_level: IsolationLevel) -> list[str]:
        """Statements that start a transaction at ``isolation_level``."""
        ...


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, ``LIMIT n``."""

    @property
    def name(self) -> str:
        return "sqlite"

    # -- Placeholders ------------------------------------------------------

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    # -- Values and expressions --------------------------------------------

    def quote(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, (int, float)):
            return repr(value)
        if isinstance(value, (bytes, bytearray)):
            return f"X'{bytes(value).hex()}'"
        if isinstance(value, (datetime, date)):
            value = value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
        text = str(value).replace("'", "''")
        return f"'{text}'"

    def to_sql(self, expr: Any, environment: Any = None) -> str:
        if isinstance(expr, str):
            return expr
        render = getattr(expr, "to_sql", None)
        if callable(render):
            return render(self, environment)
        return self.quote(expr)

    # -- Clauses -----------------------------------------------------------

    def limit_clause(self, top: int) -> str:
        return f" LIMIT {int(top)}"

    def begin_transaction(self, isolation_level: IsolationLevel) -> list[str]:
        # SQLite transactions are always serializable; the level only picks
        # when the write lock is taken and whether dirty reads are allowed.
        match isolation_level:
            case IsolationLevel.READ_UNCOMMITTED:
                return ["PRAGMA read_uncommitted = 1", "BEGIN DEFERRED"]
            case IsolationLevel.SERIALIZABLE:
                return ["PRAGMA read_uncommitted = 0", "BEGIN IMMEDIATE"]
            case _:
                return ["PRAGMA read_uncommitted = 0", "BEGIN DEFERRED"]


# =========================================================================
# Registry / Factory
# =========================================================================

# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}")
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "get_dialect",
    "register_dialect",
]
