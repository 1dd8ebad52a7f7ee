"""Core building blocks shared by the access layer and the drivers.

Modules
-------
errors      Typed error hierarchy
enums       IsolationLevel, RowState, AccessMode
filters     Filter predicates with the ``is_false`` marker
types       Notifications, packets, select specifications
protocols   Driver / security / data-set contracts
dialect     SQL dialects used by the bundled drivers
settings    pydantic-settings configuration
logging     structlog configuration
"""

from datagate.core.enums import AccessMode, IsolationLevel, RowState
from datagate.core.errors import (
    CommandError,
    ConfigError,
    DataAccessError,
    DatabaseConnectionError,
    DriverError,
    ErrorCategory,
    ErrorContext,
    SecurityError,
)
from datagate.core.filters import FALSE, Filter, and_, eq, raw
from datagate.core.types import (
    ColumnDescriptor,
    MetaMarker,
    Packet,
    ResultTable,
    RowChunk,
    RowLine,
    SelectSpec,
    SqlParameter,
    UpdateResult,
    objectify,
)

__all__ = [
    "AccessMode",
    "IsolationLevel",
    "RowState",
    "CommandError",
    "ConfigError",
    "DataAccessError",
    "DatabaseConnectionError",
    "DriverError",
    "ErrorCategory",
    "ErrorContext",
    "SecurityError",
    "FALSE",
    "Filter",
    "and_",
    "eq",
    "raw",
    "ColumnDescriptor",
    "MetaMarker",
    "Packet",
    "ResultTable",
    "RowChunk",
    "RowLine",
    "SelectSpec",
    "SqlParameter",
    "UpdateResult",
    "objectify",
]
