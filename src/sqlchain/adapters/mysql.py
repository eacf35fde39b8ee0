"""MySQL database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.
Statements run on server-side prepared cursors, which take the same ``?``
placeholders as every other backend.

Install the driver::

    pip install mysql-connector-python
    # or:  pip install sqlchain[mysql]

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~sqlchain.errors.ConfigError` is raised at ``connect()``
time.
"""

from __future__ import annotations

from typing import Any

from sqlchain.errors import ConfigError, DatabaseConnectionError
from sqlchain.logging import get_logger
from sqlchain.protocols import Cursor

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter.

    Holds a single ``mysql.connector`` connection in autocommit mode;
    ``begin()`` maps to ``start_transaction()``.  The connection consumes
    unread results, so a caller may read one row and drop the rest before
    running the next statement.  Only the latest prepared cursor stays open;
    running a statement closes the one before it.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "utf8mb4",
        set_names_utf8: bool = False,
        connect_timeout: int = 10,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            charset=charset,
            set_names_utf8=set_names_utf8,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._conn: Any = None
        self._cursor: Any = None

    def connect(self) -> None:
        """Connect to MySQL database."""
        if self._conn is not None:
            return

        try:
            import mysql.connector
            from mysql.connector import errors
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install mysql-connector-python"
            ) from None

        self.connection_errors = (errors.InterfaceError,)
        self.integrity_errors = (errors.IntegrityError,)
        self.driver_errors = (errors.Error,)

        try:
            self._conn = mysql.connector.connect(
                host=self._config.host,
                port=self._config.port,
                database=self._config.database,
                user=self._config.username,
                password=self._config.password,
                charset=self._config.charset,
                connect_timeout=self._config.connect_timeout,
                autocommit=True,
                consume_results=True,
                **self._config.options,
            )
        except errors.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ).with_context(backend="mysql") from e

        self._connected = True

        if self._config.set_names_utf8:
            cursor = self._conn.cursor()
            cursor.execute(self.dialect.set_names_query("utf8"))
            cursor.close()

        logger.debug("mysql_connected", target=self._config.to_connection_string())

    def disconnect(self) -> None:
        """Close the MySQL connection."""
        self._close_cursor()
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._connected = False
        self._in_transaction = False

    def get_connection(self) -> Any:
        """Get the MySQL connection."""
        if self._conn is None:
            self.connect()
        return self._conn

    def _close_cursor(self) -> None:
        # Closing a prepared cursor deallocates its server-side statement
        cursor, self._cursor = self._cursor, None
        if cursor is not None:
            cursor.close()

    def _execute(self, sql: str, params: tuple[Any, ...]) -> Cursor:
        conn = self.get_connection()
        self._close_cursor()
        self._cursor = conn.cursor(prepared=True)
        self._cursor.execute(sql, params)
        return self._cursor

    def _begin(self) -> None:
        self.get_connection().start_transaction()

    def _commit(self) -> None:
        self.get_connection().commit()

    def _rollback(self) -> None:
        self.get_connection().rollback()


__all__ = [
    "MySQLAdapter",
]
