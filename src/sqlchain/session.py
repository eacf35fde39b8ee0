"""Database session: the collaborator statements execute through.

A :class:`Session` owns one adapter (and so one connection) and exposes the
small surface the builder needs:

    ┌──────────────────────────────────────────────────────────────────┐
    │ Session                                                          │
    │                                                                  │
    │   run(sql, params)          → cursor   (history recorded)        │
    │   fetch_one / fetch_all / fetch_scalar(cursor)                   │
    │   begin / commit / rollback / transaction()                      │
    │   last_insert_id() / found_rows()                                │
    │   select() / insert() / update() / delete()  → bound Statement   │
    └──────────────────────────────────────────────────────────────────┘

Usage:
    >>> from sqlchain import create_session
    >>> session = create_session("memory")
    >>> session.run("CREATE TABLE t (id INTEGER PRIMARY KEY, a TEXT)")
    >>> session.insert().into("t").columns("a").values(["x"]).execute()
    >>> session.last_insert_id()
    1
"""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlchain.adapters import DatabaseAdapter, get_adapter
from sqlchain.compiler import StatementKind
from sqlchain.dialect import Dialect
from sqlchain.errors import QueryError
from sqlchain.logging import get_logger
from sqlchain.protocols import Cursor
from sqlchain.settings import DatabaseSettings
from sqlchain.statement import Statement

logger = get_logger(__name__)

_INSERT_RE = re.compile(r"^\s*(INSERT|REPLACE)\b", re.IGNORECASE)


@dataclass(frozen=True)
class HistoryEntry:
    """One statement sent to the database."""

    sql: str
    params: tuple[Any, ...] = ()


class Session:
    """Runs SQL on a single adapter connection.

    Parameters:
        adapter: The database adapter to run statements on.
        history_limit: Keep at most this many :class:`HistoryEntry` records
            (``None`` keeps all of them).
    """

    def __init__(self, adapter: DatabaseAdapter, *, history_limit: int | None = None):
        self._adapter = adapter
        self._history: deque[HistoryEntry] = deque(maxlen=history_limit)
        self._last_insert_id: Any = None

    @classmethod
    def from_settings(cls, settings: DatabaseSettings | None = None) -> Session:
        """Build an unconnected session from :class:`DatabaseSettings`."""
        settings = settings or DatabaseSettings()
        adapter = get_adapter(settings.backend, **settings.adapter_kwargs())
        return cls(adapter, history_limit=settings.history_limit)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def dialect(self) -> Dialect:
        return self._adapter.dialect

    @property
    def is_connected(self) -> bool:
        return self._adapter.is_connected

    @property
    def in_transaction(self) -> bool:
        return self._adapter.in_transaction

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def connect(self) -> Session:
        """Open the connection (no-op when already open)."""
        if not self._adapter.is_connected:
            self._adapter.connect()
            logger.info(
                "session_connected",
                backend=self._adapter.db_type.value,
                target=self._adapter.config.to_connection_string(),
            )
        return self

    def close(self) -> None:
        if self._adapter.is_connected:
            self._adapter.disconnect()
            logger.info("session_closed", backend=self._adapter.db_type.value)

    def __enter__(self) -> Session:
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Execution
    # =========================================================================

    def run(self, sql: str, params: Sequence[Any] = ()) -> Cursor:
        """Execute one statement and return its cursor.

        The statement is recorded in :attr:`history` before it runs.

        Raises:
            QueryError: The database rejected the statement.
            IntegrityError: A constraint was violated.
            DatabaseConnectionError: The database could not be reached.
        """
        params = tuple(params)
        self._history.append(HistoryEntry(sql, params))
        logger.debug("statement_executed", sql=sql, params=len(params))
        cursor = self._adapter.execute(sql, params)
        if _INSERT_RE.match(sql):
            self._last_insert_id = cursor.lastrowid
        return cursor

    def fetch_one(self, cursor: Cursor) -> dict[str, Any] | None:
        row = cursor.fetchone()
        if row is None:
            return None
        return _row_to_dict(cursor, row)

    def fetch_all(self, cursor: Cursor) -> list[dict[str, Any]]:
        return [_row_to_dict(cursor, row) for row in cursor.fetchall()]

    def fetch_scalar(self, cursor: Cursor, index: int = 0) -> Any:
        """Value at *index* of the next row, ``None`` when there is no row."""
        row = cursor.fetchone()
        if row is None:
            return None
        return row[index]

    # =========================================================================
    # Transactions
    # =========================================================================

    def begin(self) -> None:
        self._adapter.begin()
        logger.debug("transaction_started")

    def commit(self) -> None:
        self._adapter.commit()
        logger.debug("transaction_committed")

    def rollback(self) -> None:
        self._adapter.rollback()
        logger.debug("transaction_rolled_back")

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success, roll back and re-raise on error."""
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        else:
            self.commit()

    # =========================================================================
    # Generated ids and row counts
    # =========================================================================

    def last_insert_id(self) -> Any:
        """Id generated by the most recent INSERT run on this session."""
        return self._last_insert_id

    def found_rows(self) -> int:
        """Row count of the last ``SQL_CALC_FOUND_ROWS`` select.

        Raises:
            QueryError: The dialect has no FOUND_ROWS() facility.
        """
        query = self.dialect.found_rows_query()
        if query is None:
            raise QueryError(
                f"FOUND_ROWS() is not supported by the {self.dialect.name} dialect"
            ).with_context(backend=self._adapter.db_type.value)
        return int(self.fetch_scalar(self.run(query)) or 0)

    # =========================================================================
    # History
    # =========================================================================

    @property
    def history(self) -> list[HistoryEntry]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    # =========================================================================
    # Statement factories
    # =========================================================================

    def select(self) -> Statement:
        return Statement(StatementKind.SELECT, self)

    def insert(self) -> Statement:
        return Statement(StatementKind.INSERT, self)

    def update(self) -> Statement:
        return Statement(StatementKind.UPDATE, self)

    def delete(self) -> Statement:
        return Statement(StatementKind.DELETE, self)

    def __repr__(self) -> str:
        return f"Session(adapter={self._adapter!r}, history={len(self._history)})"


def _row_to_dict(cursor: Cursor, row: Any) -> dict[str, Any]:
    if hasattr(row, "_mapping"):
        return dict(row._mapping)
    if hasattr(row, "keys"):
        return dict(row)
    columns = [desc[0] for desc in cursor.description or ()]
    return dict(zip(columns, row))


__all__ = [
    "HistoryEntry",
    "Session",
]
