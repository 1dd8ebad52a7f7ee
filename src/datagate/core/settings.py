"""Settings for the datagate data-access core.

Defaults for every construction option that is not passed explicitly come
from here, so deployments can tune them through ``DATAGATE_*`` environment
variables or a ``.env`` file.

Examples:
    >>> from datagate.core.settings import DataAccessSettings
    >>> DataAccessSettings(packet_size=500).packet_size
    500

Tags:
    settings, configuration, pydantic, environment, datagate
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataAccessSettings(BaseSettings):
    """Environment-driven defaults for ``DataAccess``.

    Fields
    ──────
    persisting      : Keep the physical connection open between operations
    packet_size     : Default maximum rows per packet (0 = one packet per set)
    log_level       : Structlog log level
    log_json        : JSON logs (None = auto-detect from tty)
    sqlite_timeout  : Busy timeout, in seconds, for the SQLite driver
    """

    model_config = SettingsConfigDict(
        env_prefix="DATAGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    persisting: bool = True

    # ── Reads ────────────────────────────────────────────────────
    packet_size: int = Field(default=0, ge=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    # ── SQLite driver ────────────────────────────────────────────
    sqlite_timeout: float = Field(default=5.0, gt=0)


__all__ = ["DataAccessSettings"]
