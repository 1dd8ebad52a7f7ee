"""
Shared enums for datagate.

STDLIB ONLY - NO PYDANTIC.
"""

from enum import Enum


class IsolationLevel(str, Enum):
    """
    Transaction isolation levels.

    Symbolic only: a driver whose database lacks a level falls back to the
    closest one it supports.
    """

    READ_UNCOMMITTED = "READ_UNCOMMITTED"
    READ_COMMITTED = "READ_COMMITTED"
    REPEATABLE_READ = "REPEATABLE_READ"
    SNAPSHOT = "SNAPSHOT"
    SERIALIZABLE = "SERIALIZABLE"


class RowState(str, Enum):
    """Change state of an in-memory data row."""

    DETACHED = "detached"
    DELETED = "deleted"
    ADDED = "added"
    UNCHANGED = "unchanged"
    MODIFIED = "modified"


class AccessMode(str, Enum):
    """Access mode passed to the security provider's condition lookup."""

    SELECT = "S"
    INSERT = "I"
    UPDATE = "U"
    DELETE = "D"


__all__ = ["IsolationLevel", "RowState", "AccessMode"]
