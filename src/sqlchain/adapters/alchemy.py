"""SQLAlchemy-backed adapter.

Runs compiled statements over any SQLAlchemy engine URL, e.g.
``mysql+pymysql://user:pw@host/db`` or ``sqlite://``.  Positional ``?``
placeholders are rewritten to named ``:p0, :p1`` binds for ``text()``, so the
same SQL runs whatever paramstyle the driver uses.  The dialect is chosen
from the engine's dialect name rather than from configuration.

Outside an explicit transaction every statement is committed right after it
runs ("commit as you go").  Rows are buffered before that commit, which is
why :class:`ResultCursor` holds a list rather than a live result.
"""

from __future__ import annotations

import re
from typing import Any

from sqlalchemy import TextClause, create_engine, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, CursorResult, Engine

from sqlchain.dialect import Dialect, get_dialect
from sqlchain.errors import ConfigError, DatabaseConnectionError, MissingConfigError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

# Same pattern text() uses to find bind parameters
_COLON_NAME_RE = re.compile(r"(?<![:\w\\])(:\w+)(?!:)")


def to_named_binds(sql: str, params: tuple[Any, ...]) -> tuple[TextClause, dict[str, Any]]:
    """Rewrite ``?`` placeholders to ``:p0, :p1, ...`` for ``text()``.

    Any ``:name`` already in *sql* (a quoted ``':draft'`` literal, say) is
    escaped first so ``text()`` passes it through verbatim.  Every ``?`` is
    treated as a placeholder, including one inside a quoted literal; bind the
    value instead of inlining it.
    """
    sql = _COLON_NAME_RE.sub(r"\\\1", sql)
    if not params:
        return text(sql), {}
    rewritten, idx = [], 0
    for ch in sql:
        if ch == "?":
            rewritten.append(f":p{idx}")
            idx += 1
        else:
            rewritten.append(ch)
    return text("".join(rewritten)), {f"p{i}": v for i, v in enumerate(params)}


class ResultCursor:
    """DB-API style cursor over a buffered ``CursorResult``."""

    def __init__(self, result: CursorResult) -> None:
        # rowcount/lastrowid must be read before fetchall() releases the cursor
        self.rowcount: int = result.rowcount
        try:
            self.lastrowid: Any = result.lastrowid
        except sa_exc.InvalidRequestError:
            self.lastrowid = None
        self._keys: list[str] = list(result.keys()) if result.returns_rows else []
        self._rows: list[Any] = list(result.fetchall()) if result.returns_rows else []

    @property
    def description(self) -> list[tuple[Any, ...]] | None:
        if not self._keys:
            return None
        return [(k, None, None, None, None, None, None) for k in self._keys]

    def fetchone(self) -> Any:
        if not self._rows:
            return None
        return self._rows.pop(0)

    def fetchall(self) -> list[Any]:
        rows, self._rows = self._rows, []
        return rows


class SQLAlchemyAdapter(DatabaseAdapter):
    """Adapter over a SQLAlchemy :class:`~sqlalchemy.engine.Engine`."""

    connection_errors = (sa_exc.DisconnectionError,)
    integrity_errors = (sa_exc.IntegrityError,)
    driver_errors = (sa_exc.SQLAlchemyError,)

    def __init__(self, url: str | None = None, *, echo: bool = False, **kwargs: Any):
        if not url:
            raise MissingConfigError("url", "SQLAlchemyAdapter requires a database url")
        config = DatabaseConfig(
            db_type=DatabaseType.SQLALCHEMY,
            url=url,
            options={"echo": echo, **kwargs},
        )
        super().__init__(config)
        self._engine: Engine | None = None
        self._conn: Connection | None = None
        self._tx: Any = None

    @property
    def dialect(self) -> Dialect:
        if self._dialect is None:
            if self._engine is None:
                self.connect()
            assert self._engine is not None
            try:
                self._dialect = get_dialect(self._engine.dialect.name)
            except ValueError as e:
                raise ConfigError(
                    f"Unsupported SQLAlchemy dialect: {self._engine.dialect.name}",
                    cause=e,
                ) from e
        return self._dialect

    @property
    def engine(self) -> Engine | None:
        return self._engine

    def connect(self) -> None:
        """Create the engine and open one connection."""
        if self._conn is not None:
            return
        try:
            self._engine = create_engine(self._config.url, **self._config.options)
            self._conn = self._engine.connect()
        except sa_exc.SQLAlchemyError as e:
            raise DatabaseConnectionError(
                f"Failed to connect: {e}",
                cause=e,
            ).with_context(backend="sqlalchemy") from e
        self._connected = True

    def disconnect(self) -> None:
        """Close the connection and dispose of the engine."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._tx = None
        self._connected = False
        self._in_transaction = False

    def get_connection(self) -> Connection:
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    def _execute(self, sql: str, params: tuple[Any, ...]) -> ResultCursor:
        conn = self.get_connection()
        stmt, bindings = to_named_binds(sql, params)
        try:
            cursor = ResultCursor(conn.execute(stmt, bindings))
        except sa_exc.SQLAlchemyError:
            if self._tx is None and conn.in_transaction():
                conn.rollback()
            raise
        if self._tx is None:
            conn.commit()
        return cursor

    def _begin(self) -> None:
        conn = self.get_connection()
        if conn.in_transaction():
            conn.commit()
        self._tx = conn.begin()

    def _commit(self) -> None:
        tx, self._tx = self._tx, None
        if tx is not None:
            tx.commit()

    def _rollback(self) -> None:
        tx, self._tx = self._tx, None
        if tx is not None:
            tx.rollback()


__all__ = [
    "ResultCursor",
    "SQLAlchemyAdapter",
    "to_named_binds",
]
