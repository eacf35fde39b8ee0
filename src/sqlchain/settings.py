"""Environment-driven configuration for sqlchain sessions.

``DatabaseSettings`` collects everything needed to open a session: which
backend to use, where it lives, and how verbose logging should be.  Values
come from ``SQLCHAIN_*`` environment variables or a ``.env`` file.

Examples:
    >>> import os
    >>> os.environ["SQLCHAIN_BACKEND"] = "mysql"
    >>> os.environ["SQLCHAIN_DATABASE"] = "shop"
    >>> settings = DatabaseSettings()
    >>> settings.port
    3306

    Opening a session from the environment::

        from sqlchain import Session
        session = Session.from_settings(DatabaseSettings())

Tags:
    settings, configuration, pydantic, environment, sqlchain
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqlchain.errors import MissingConfigError
from sqlchain.logging import configure_logging


class DatabaseSettings(BaseSettings):
    """Connection and logging settings.

    Fields
    ──────
    backend        : ``sqlite`` | ``mysql`` | ``sqlalchemy``
    path           : SQLite database file (``:memory:`` by default)
    url            : SQLAlchemy engine URL (``sqlalchemy`` backend only)
    host/port      : MySQL server address
    database       : MySQL schema name
    username       : MySQL user
    password       : MySQL password (kept out of reprs)
    charset        : Connection charset
    set_names_utf8 : Issue ``SET NAMES utf8`` right after connecting
    history_limit  : Max statements kept in ``Session.history`` (None = unbounded)
    log_level      : structlog level
    log_json       : JSON log output (None = auto-detect from tty)
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["sqlite", "mysql", "sqlalchemy"] = "sqlite"

    # ── SQLite ───────────────────────────────────────────────────
    path: str = ":memory:"

    # ── SQLAlchemy ───────────────────────────────────────────────
    url: str | None = None

    # ── MySQL ────────────────────────────────────────────────────
    host: str = "localhost"
    port: int = Field(default=3306, ge=1, le=65535)
    database: str = ""
    username: str | None = None
    password: SecretStr | None = None
    charset: str = "utf8mb4"
    set_names_utf8: bool = False

    # ── Session ──────────────────────────────────────────────────
    history_limit: int | None = Field(default=None, ge=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return value

    def adapter_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :func:`sqlchain.adapters.get_adapter`.

        Raises:
            MissingConfigError: ``backend`` is ``sqlalchemy`` and no ``url`` is set.
        """
        if self.backend == "sqlite":
            return {"path": self.path}
        if self.backend == "sqlalchemy":
            if not self.url:
                raise MissingConfigError(
                    "SQLCHAIN_URL", "The sqlalchemy backend needs SQLCHAIN_URL"
                )
            return {"url": self.url}
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "username": self.username,
            "password": self.password.get_secret_value() if self.password else None,
            "charset": self.charset,
            "set_names_utf8": self.set_names_utf8,
        }

    def configure_logging(self) -> None:
        """Apply ``log_level`` and ``log_json`` to structlog."""
        configure_logging(self.log_level, json_format=self.log_json)


__all__ = [
    "DatabaseSettings",
]
