"""Bundled drivers.

Modules
-------
types       Statement / Command
base        DriverBase: command building, batch and line streams
sqlite      SQLiteDriver (stdlib sqlite3, always available)
registry    DriverRegistry + create_driver() factory
"""

from .base import DriverBase
from .registry import DriverRegistry, create_driver, driver_registry
from .sqlite import SQLiteDriver
from .types import Command, Statement

__all__ = [
    "Command",
    "Statement",
    "DriverBase",
    "SQLiteDriver",
    "DriverRegistry",
    "driver_registry",
    "create_driver",
]
