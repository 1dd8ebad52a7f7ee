"""Tests for datagate.core.settings."""

import pytest
from pydantic import ValidationError

from datagate.core.settings import DataAccessSettings


class TestDataAccessSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PERSISTING", "PACKET_SIZE", "LOG_LEVEL", "LOG_JSON", "SQLITE_TIMEOUT"):
            monkeypatch.delenv(f"DATAGATE_{name}", raising=False)
        s = DataAccessSettings(_env_file=None)
        assert s.persisting is True
        assert s.packet_size == 0
        assert s.log_level == "INFO"
        assert s.log_json is None
        assert s.sqlite_timeout == 5.0

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DATAGATE_PERSISTING", "false")
        monkeypatch.setenv("DATAGATE_PACKET_SIZE", "500")
        s = DataAccessSettings(_env_file=None)
        assert s.persisting is False
        assert s.packet_size == 500

    def test_negative_packet_size_rejected(self):
        with pytest.raises(ValidationError):
            DataAccessSettings(_env_file=None, packet_size=-1)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            DataAccessSettings(_env_file=None, sqlite_timeout=0)

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("DATAGATE_LOG_LEVEL=DEBUG\n")
        assert DataAccessSettings(_env_file=env).log_level == "DEBUG"
