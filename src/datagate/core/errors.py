"""
Structured error types for datagate.

Every failure surfaced by the data-access core is a ``DataAccessError``
subclass carrying a category, a retryable flag, structured context and the
chained driver exception (if any).  The core itself never retries; the
flags exist so callers can decide.

Manifesto:
    - **Typed Error Hierarchy:** one class per failure domain
    - **Explicit Retry Semantics:** each error knows if a retry may help
    - **Rich Context:** errors carry table/command metadata for logging
    - **Error Chaining:** the original driver exception is preserved

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                    DataAccessError                        │
        │  (category, retryable, context, cause)                    │
        ├──────────────────────────────────────────────────────────┤
        │  DatabaseConnectionError   open/close of the driver       │
        │  SecurityError             security provider lookups      │
        │  CommandError              single-row DML touched 0 rows  │
        │  DriverError               opaque driver passthrough      │
        │  ConfigError               invalid construction options   │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = CommandError("No row deleted").with_context(table_name="customer")
    >>> error.context.table_name
    'customer'
    >>> error.to_dict()["category"]
    'COMMAND'

Tags:
    error-handling, exception-hierarchy, error-context, datagate
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONNECTION = "CONNECTION"     # Driver open/close
    SECURITY = "SECURITY"         # Security condition lookup
    COMMAND = "COMMAND"           # Command had no effect where one was required
    DRIVER = "DRIVER"             # Anything raised by the driver layer
    CONFIG = "CONFIG"             # Invalid options
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are serialised by ``to_dict()``; anything that has no
    dedicated field goes to ``metadata``.
    """

    table_name: str | None = None
    command: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table_name", "command", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DataAccessError(Exception):
    """
    Base exception for all datagate errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    raising sites only need a message and, when wrapping, the ``cause``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DataAccessError:
        """
        Add context to this error (fluent API).

        Usage:
            raise CommandError("No row updated").with_context(
                table_name="customer", command=str(cmd)
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class DatabaseConnectionError(DataAccessError):
    """Opening (or closing) the underlying driver connection failed."""

    default_category = ErrorCategory.CONNECTION
    default_retryable = True


class SecurityError(DataAccessError):
    """The security provider, or one of its condition lookups, failed."""

    default_category = ErrorCategory.SECURITY


class CommandError(DataAccessError):
    """
    A single-row insert/update/delete affected no rows.

    The caller asked for exactly one row, so a silent no-op is reported
    as a failure carrying the command and the driver result.
    """

    default_category = ErrorCategory.COMMAND


class DriverError(DataAccessError):
    """Failure raised by the driver layer, passed through with its cause."""

    default_category = ErrorCategory.DRIVER


class ConfigError(DataAccessError):
    """Invalid construction options or settings."""

    default_category = ErrorCategory.CONFIG


@contextmanager
def driver_errors(operation: str, **context: Any) -> Iterator[None]:
    """
    Re-raise anything the driver throws as ``DriverError``.

    datagate errors pass through unchanged so their category survives.

    Usage:
        with driver_errors("update_batch", command=str(cmd)):
            result = await driver.update_batch(cmd)
    """
    try:
        yield
    except DataAccessError:
        raise
    except Exception as e:
        raise DriverError(f"{operation} failed: {e}", cause=e).with_context(
            operation=operation, **context
        ) from e


def is_retryable(error: BaseException) -> bool:
    """Check if an error is flagged retryable."""
    if isinstance(error, DataAccessError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DataAccessError",
    "DatabaseConnectionError",
    "SecurityError",
    "CommandError",
    "DriverError",
    "ConfigError",
    "driver_errors",
    "is_retryable",
]
