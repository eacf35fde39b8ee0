"""SQL dialect details for the builder and the session.

The builder emits MySQL syntax (backtick identifiers, ``SQL_CALC_FOUND_ROWS``,
``WITH ROLLUP``, ``LIMIT offset,count``) with ``?`` positional placeholders,
the same placeholders callers write into ``where()`` fragments.  Every
adapter accepts ``?``: sqlite3 natively, mysql-connector through
server-side prepared statements, SQLAlchemy through bind rewriting.

What still differs between backends is captured here:

    ┌──────────────────┐   ┌──────────────────────────────┐
    │ SQLiteDialect    │   │ MySQLDialect                 │
    │ no FOUND_ROWS()  │   │ SELECT FOUND_ROWS()          │
    │ no SET NAMES     │   │ SET NAMES <charset>          │
    └──────────────────┘   └──────────────────────────────┘

SQLite is the in-process backend used for development and tests; it accepts
the SQL the compiler produces except for the MySQL-only modifiers.

Examples:
    >>> from sqlchain.dialect import get_dialect
    >>> get_dialect("mysql").placeholders(3)
    '?,?,?'
    >>> get_dialect("mysql").found_rows_query()
    'SELECT FOUND_ROWS()'
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'mysql'``)."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list, no spaces (``?,?,?``)."""
        ...

    def quote_identifier(self, identifier: str) -> str:
        """Quote a column identifier."""
        ...

    def found_rows_query(self) -> str | None:
        """Query returning the row count of the last ``SQL_CALC_FOUND_ROWS``
        select, or ``None`` when the backend has no such facility."""
        ...

    def set_names_query(self, charset: str) -> str | None:
        """Statement selecting the connection charset, or ``None``."""
        ...


class _QmarkDialect:
    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ",".join("?" for _ in range(count))

    def quote_identifier(self, identifier: str) -> str:
        return f"`{identifier}`"


class SQLiteDialect(_QmarkDialect):
    """SQLite dialect.

    SQLite accepts MySQL-style backtick identifiers for compatibility.
    """

    @property
    def name(self) -> str:
        return "sqlite"

    def found_rows_query(self) -> str | None:
        return None

    def set_names_query(self, charset: str) -> str | None:  # noqa: ARG002
        return None


class MySQLDialect(_QmarkDialect):
    """MySQL / MariaDB dialect."""

    @property
    def name(self) -> str:
        return "mysql"

    def found_rows_query(self) -> str | None:
        return "SELECT FOUND_ROWS()"

    def set_names_query(self, charset: str) -> str | None:
        return f"SET NAMES {charset}"


# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}"
        )
    return _DIALECTS[key]


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
]
