"""
Shared pytest fixtures for datagate tests.

Usage:
    def test_something(fake_driver, settings):
        ...
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from _support.fakes import FakeDriver, result_set  # noqa: E402
from datagate.core.settings import DataAccessSettings  # noqa: E402


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def settings() -> DataAccessSettings:
    """Settings isolated from the environment and any .env file."""
    return DataAccessSettings(_env_file=None, persisting=True, packet_size=0)


@pytest.fixture
def customers():
    return result_set(
        ["idcustomer", "name"],
        (1, "Ada"),
        (2, "Grace"),
        (3, "Linus"),
    )


@pytest.fixture
def fake_driver(customers) -> FakeDriver:
    return FakeDriver([customers])
