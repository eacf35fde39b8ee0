"""
sqlchain - fluent SQL statement builder.

Build SELECT / INSERT / UPDATE / DELETE statements by chaining clause calls,
compile them to SQL text plus ordered positional params, and run them on an
injected :class:`Session`.

- sqlchain.statement: Statement builder and factories
- sqlchain.compiler: Per-kind renderers
- sqlchain.session: Database session (run, fetch, transactions, history)
- sqlchain.adapters: SQLite / MySQL / SQLAlchemy drivers
"""

__version__ = "0.1.0"

from sqlchain.compiler import CompiledStatement, StatementKind
from sqlchain.connection import create_adapter, create_session
from sqlchain.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    IntegrityError,
    QueryError,
    SessionNotBoundError,
    SqlChainError,
)
from sqlchain.session import HistoryEntry, Session
from sqlchain.settings import DatabaseSettings
from sqlchain.statement import Statement, delete, insert, select, update

__all__ = [
    "__version__",
    "Statement",
    "StatementKind",
    "CompiledStatement",
    "select",
    "insert",
    "update",
    "delete",
    "Session",
    "HistoryEntry",
    "create_session",
    "create_adapter",
    "DatabaseSettings",
    "SqlChainError",
    "ConfigError",
    "SessionNotBoundError",
    "DatabaseError",
    "QueryError",
    "IntegrityError",
    "DatabaseConnectionError",
]
