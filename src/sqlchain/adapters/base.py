"""Database adapter base class.

An adapter owns exactly one driver connection and exposes the handful of
operations a :class:`~sqlchain.session.Session` needs: run one statement and
get a cursor back, and begin/commit/roll back a transaction.  Driver
exceptions are translated here, so nothing above the adapter ever imports a
driver module.

Translation:
    - ``connection_errors``  → :class:`DatabaseConnectionError` (raised)
    - ``integrity_errors``   → :class:`IntegrityError`
    - ``driver_errors``      → :class:`QueryError`

Tags:
    sqlchain, database, abstract-base, adapter-pattern
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from sqlchain.dialect import Dialect, get_dialect
from sqlchain.errors import (
    DatabaseConnectionError,
    IntegrityError,
    QueryError,
    SqlChainError,
)
from sqlchain.protocols import Cursor

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Subclasses implement the underscore hooks; the public methods add
    connection checks, transaction bookkeeping and error translation.
    """

    connection_errors: tuple[type[BaseException], ...] = ()
    integrity_errors: tuple[type[BaseException], ...] = ()
    driver_errors: tuple[type[BaseException], ...] = ()

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._in_transaction = False
        self._dialect: Dialect | None = None

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        if self._dialect is None:
            self._dialect = get_dialect(self._config.db_type.value)
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @property
    def in_transaction(self) -> bool:
        """Whether an explicit transaction is open."""
        return self._in_transaction

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to database."""
        ...

    @abstractmethod
    def get_connection(self) -> Any:
        """Return the underlying driver connection, connecting if needed."""
        ...

    @abstractmethod
    def _execute(self, sql: str, params: tuple[Any, ...]) -> Cursor:
        ...

    @abstractmethod
    def _begin(self) -> None:
        ...

    @abstractmethod
    def _commit(self) -> None:
        ...

    @abstractmethod
    def _rollback(self) -> None:
        ...

    # -- Statements --------------------------------------------------------

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Cursor:
        """Prepare and execute one statement, returning its cursor.

        Raises:
            DatabaseConnectionError: The connection is unusable.
            IntegrityError: A constraint was violated.
            QueryError: Any other driver-reported failure.
        """
        if not self._connected:
            self.connect()
        params = tuple(params)
        try:
            return self._execute(sql, params)
        except SqlChainError:
            raise
        except Exception as e:
            raise self.translate_error(e).with_context(
                sql=sql, params=params, backend=self.db_type.value
            ) from e

    def translate_error(self, error: BaseException) -> SqlChainError:
        """Map a driver exception onto the sqlchain error hierarchy."""
        if self.connection_errors and isinstance(error, self.connection_errors):
            return DatabaseConnectionError(f"Connection lost: {error}", cause=error)
        if self.integrity_errors and isinstance(error, self.integrity_errors):
            return IntegrityError(str(error), cause=error)
        if self.driver_errors and isinstance(error, self.driver_errors):
            return QueryError(str(error), cause=error)
        return QueryError(f"{type(error).__name__}: {error}", cause=error)

    # -- Transactions ------------------------------------------------------

    def begin(self) -> None:
        """Start an explicit transaction."""
        if not self._connected:
            self.connect()
        if self._in_transaction:
            raise QueryError("A transaction is already active").with_context(
                backend=self.db_type.value
            )
        self._guard(self._begin)
        self._in_transaction = True

    def commit(self) -> None:
        """Commit the active transaction."""
        try:
            self._guard(self._commit)
        finally:
            self._in_transaction = False

    def rollback(self) -> None:
        """Roll back the active transaction."""
        try:
            self._guard(self._rollback)
        finally:
            self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator[DatabaseAdapter]:
        """Run the block in a transaction; roll back and re-raise on error."""
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def _guard(self, hook: Any) -> None:
        try:
            hook()
        except SqlChainError:
            raise
        except Exception as e:
            raise self.translate_error(e).with_context(backend=self.db_type.value) from e

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()

    def __repr__(self) -> str:
        state = "connected" if self._connected else "disconnected"
        return f"{type(self).__name__}({self._config.to_connection_string()!r}, {state})"


__all__ = [
    "DatabaseAdapter",
]
