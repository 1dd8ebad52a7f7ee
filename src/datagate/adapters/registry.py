"""Driver registry and factory.

Consumers should not hard-code driver classes: ``create_driver()`` picks
one from a URL or a registered name.

Supported URLs::

    None / "memory" / ":memory:"     in-memory SQLite
    "sqlite:///path/to/file.db"      SQLite file
    "path/to/file.db"                SQLite file

Tags:
    datagate, driver, registry, factory
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from datagate.core.errors import ConfigError

from .base import DriverBase
from .sqlite import SQLiteDriver

DriverFactory = Callable[..., DriverBase]


class DriverRegistry:
    """Maps driver names to factories; ``sqlite`` is pre-registered."""

    def __init__(self):
        self._factories: dict[str, DriverFactory] = {"sqlite": SQLiteDriver}

    def register(self, name: str, factory: DriverFactory) -> None:
        self._factories[name.lower()] = factory

    def create(self, name: str, **kwargs: Any) -> DriverBase:
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown driver: {name}")
        return self._factories[name](**kwargs)

    def list_drivers(self) -> list[str]:
        return sorted(self._factories)


driver_registry = DriverRegistry()


def _parse_url(url: str | None) -> tuple[str, dict[str, Any]]:
    if url is None or url in ("", "memory", ":memory:"):
        return "sqlite", {"path": ":memory:"}
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            path = url[len(prefix):]
            return "sqlite", {"path": path or ":memory:"}
    if "://" in url:
        scheme = url.split("://", 1)[0]
        return scheme, {"url": url}
    return "sqlite", {"path": url}


def create_driver(url: str | None = None, **kwargs: Any) -> DriverBase:
    """
    Create a driver from a URL or path.

    Usage:
        driver = create_driver("sqlite:///app.db")
        driver = create_driver()  # in-memory SQLite
    """
    name, options = _parse_url(url)
    return driver_registry.create(name, **options, **kwargs)


__all__ = ["DriverRegistry", "driver_registry", "create_driver"]
