"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
from typing import Any

from sqlchain.errors import DatabaseConnectionError
from sqlchain.protocols import Cursor

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module. Suitable for:
    - Development and testing
    - Single-process applications

    The connection runs in autocommit mode; ``begin()`` issues an explicit
    ``BEGIN`` so transactions follow the same begin/commit/rollback shape as
    MySQL.
    """

    integrity_errors = (sqlite3.IntegrityError,)
    driver_errors = (sqlite3.Error,)

    def __init__(
        self,
        path: str = ":memory:",
        *,
        readonly: bool = False,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            readonly=readonly,
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Connect to SQLite database."""
        if self._conn is not None:
            return

        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                isolation_level=None,
                uri=uri,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")

            if self._config.readonly:
                self._conn.execute("PRAGMA query_only = ON")

            self._connected = True

        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Close SQLite connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
        self._connected = False
        self._in_transaction = False

    def get_connection(self) -> sqlite3.Connection:
        """Get the SQLite connection."""
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    def _execute(self, sql: str, params: tuple[Any, ...]) -> Cursor:
        return self.get_connection().execute(sql, params)

    def _begin(self) -> None:
        self.get_connection().execute("BEGIN")

    def _commit(self) -> None:
        conn = self.get_connection()
        if conn.in_transaction:
            conn.execute("COMMIT")

    def _rollback(self) -> None:
        conn = self.get_connection()
        if conn.in_transaction:
            conn.execute("ROLLBACK")


__all__ = [
    "SQLiteAdapter",
]
