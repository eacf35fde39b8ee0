"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy.engine import make_url

from sqlchain.errors import ConfigError, MissingConfigError


class DatabaseType(str, Enum):
    """Supported adapter backends."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    SQLALCHEMY = "sqlalchemy"


@dataclass
class DatabaseConfig:
    """
    Configuration for a database connection.

    Different fields are used by different backends.
    """

    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # MySQL
    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = None
    charset: str = "utf8mb4"
    set_names_utf8: bool = False

    # SQLAlchemy
    url: str | None = None

    connect_timeout: int = 10
    readonly: bool = False

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def to_connection_string(self) -> str:
        """Connection string for logs; the password is masked."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return self.path or ":memory:"
            case DatabaseType.MYSQL:
                auth = self.username or ""
                if self.password:
                    auth += ":***"
                if auth:
                    auth += "@"
                return f"mysql://{auth}{self.host}:{self.port}/{self.database}"
            case DatabaseType.SQLALCHEMY:
                if not self.url:
                    raise MissingConfigError("url", "SQLAlchemy backend requires a url")
                return make_url(self.url).render_as_string(hide_password=True)
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
