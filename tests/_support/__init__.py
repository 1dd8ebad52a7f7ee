"""
Test support utilities for datagate tests.

Shared doubles that don't fit as pytest fixtures: a scripted driver, a static
security provider and minimal in-memory tables for merges.
"""

from _support.fakes import (
    FakeDataSet,
    FakeDriver,
    FakeRow,
    FakeTable,
    KeyLocking,
    ResultSet,
    StaticSecurity,
    provider_for,
    result_set,
)

__all__ = [
    "FakeDataSet",
    "FakeDriver",
    "FakeRow",
    "FakeTable",
    "KeyLocking",
    "ResultSet",
    "StaticSecurity",
    "provider_for",
    "result_set",
]
