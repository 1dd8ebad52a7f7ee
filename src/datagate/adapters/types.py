"""Command types shared by the bundled drivers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Statement:
    """One SQL statement with positional parameters."""

    sql: str
    params: tuple[Any, ...] = ()

    def __str__(self) -> str:
        return self.sql


@dataclass(frozen=True)
class Command:
    """
    An ordered batch of statements sent as one unit.

    Each statement that returns rows produces one result set, so appending
    commands concatenates their result sets in order.
    """

    statements: tuple[Statement, ...]

    @classmethod
    def single(cls, sql: str, params: Iterable[Any] = ()) -> Command:
        return cls((Statement(sql, tuple(params)),))

    @classmethod
    def concat(cls, commands: Iterable[Command]) -> Command:
        statements: tuple[Statement, ...] = ()
        for command in commands:
            statements += command.statements
        return cls(statements)

    def __str__(self) -> str:
        return ";\n".join(s.sql for s in self.statements)


__all__ = ["Statement", "Command"]
