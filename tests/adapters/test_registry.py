"""Tests for ``datagate.adapters.registry``."""

import pytest

from datagate.adapters.registry import DriverRegistry, create_driver
from datagate.adapters.sqlite import SQLiteDriver
from datagate.core.errors import ConfigError


class TestCreateDriver:
    @pytest.mark.parametrize("url", [None, "", "memory", ":memory:", "sqlite://"])
    def test_in_memory(self, url):
        driver = create_driver(url)
        assert isinstance(driver, SQLiteDriver)
        assert driver.path == ":memory:"

    def test_sqlite_url(self):
        assert create_driver("sqlite:///data/app.db").path == "data/app.db"

    def test_bare_path(self):
        assert create_driver("app.db").path == "app.db"

    def test_kwargs_forwarded(self):
        driver = create_driver("app.db", readonly=True)
        assert driver.clone().path == "app.db"

    def test_unknown_scheme(self):
        with pytest.raises(ConfigError, match="Unknown driver"):
            create_driver("oracle://host/db")


class TestDriverRegistry:
    def test_sqlite_preregistered(self):
        assert DriverRegistry().list_drivers() == ["sqlite"]

    def test_register_custom(self):
        registry = DriverRegistry()
        registry.register("Memory", lambda **kw: SQLiteDriver(":memory:"))
        assert "memory" in registry.list_drivers()
        assert isinstance(registry.create("MEMORY"), SQLiteDriver)
