"""datagate: database-agnostic data access with nested connection
lifecycle, security filters and streamed (packetised) results.

Quick start::

    from datagate import DataAccess, SelectSpec, eq
    from datagate.adapters import SQLiteDriver

    access = await DataAccess.create(SQLiteDriver("app.db"))
    table = await access.select(SelectSpec("customer", filter=eq("city", "Rome")))
"""

from datagate.access import DataAccess
from datagate.core import (
    FALSE,
    AccessMode,
    CommandError,
    ConfigError,
    DataAccessError,
    DatabaseConnectionError,
    DriverError,
    Filter,
    IsolationLevel,
    Packet,
    ResultTable,
    RowState,
    SecurityError,
    SelectSpec,
    SqlParameter,
    UpdateResult,
    and_,
    eq,
    objectify,
    raw,
)
from datagate.core.settings import DataAccessSettings

__version__ = "0.1.0"

__all__ = [
    "DataAccess",
    "DataAccessSettings",
    "SelectSpec",
    "Packet",
    "ResultTable",
    "SqlParameter",
    "UpdateResult",
    "Filter",
    "FALSE",
    "and_",
    "eq",
    "raw",
    "objectify",
    "AccessMode",
    "IsolationLevel",
    "RowState",
    "DataAccessError",
    "DatabaseConnectionError",
    "SecurityError",
    "CommandError",
    "DriverError",
    "ConfigError",
]
