"""
Structured error types for sqlchain.

Provides a small hierarchy of typed errors carrying the metadata needed to
log a failed statement and decide what to do next: a category, a retryable
flag, structured context (table, statement kind, SQL, bound values) and the
chained driver exception.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      SqlChainError                           │
        │        (category, retryable, context, cause)                 │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  TransientError            ConfigError        DatabaseError  │
        │  (retryable=True)          (CONFIG)           (DATABASE)     │
        │       │                        │                   │         │
        │  DatabaseConnectionError   MissingConfigError  QueryError    │
        │                            InvalidConfigError  IntegrityError│
        │                            SessionNotBoundError              │
        └─────────────────────────────────────────────────────────────┘

Propagation:
    - Connection and configuration errors are raised to the caller.
    - Driver execution failures are translated by the adapters into
      ``QueryError`` / ``IntegrityError``.  ``Session.run()`` raises them;
      ``Statement.execute()`` records them in ``Statement.errors`` and
      returns a failure indicator instead.
    - Nothing is retried.

Examples:
    >>> error = QueryError("no such table: users")
    >>> error.retryable
    False
    >>> error.with_context(table="users", sql="SELECT * FROM users").context.table
    'users'

Tags:
    error-handling, exception-hierarchy, error-context, sqlchain
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    NETWORK = "NETWORK"
    DATABASE = "DATABASE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields end up in :meth:`to_dict`, so an error raised before
    compilation does not log empty ``sql``/``params`` keys.

    Attributes:
        table: Target table / from-expression of the failing statement
        kind: Statement kind (``SELECT``, ``INSERT``, ...)
        sql: Compiled SQL sent to the driver
        params: Bound values sent with ``sql``
        backend: Adapter backend name (``sqlite``, ``mysql``, ...)
        metadata: Additional key-value pairs
    """

    table: str | None = None
    kind: str | None = None
    sql: str | None = None
    params: tuple[Any, ...] | None = None
    backend: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["table", "kind", "sql", "params", "backend"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = list(value) if key == "params" else value
        if self.metadata:
            result.update(self.metadata)
        return result


class SqlChainError(Exception):
    """
    Base exception for all sqlchain errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can
    be overridden per instance.  When ``cause`` is given it is also chained
    as ``__cause__`` so tracebacks show the driver exception.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SqlChainError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("syntax error").with_context(
                table="users",
                sql="SELEC * FROM users",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS
# =============================================================================


class TransientError(SqlChainError):
    """Temporary error that may succeed if the caller tries again later."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class DatabaseConnectionError(TransientError):
    """The database could not be reached or the connection was lost."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(SqlChainError):
    """Invalid or missing configuration, or a missing optional driver."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required configuration value is missing."""

    def __init__(self, key: str, message: str | None = None):
        super().__init__(message or f"Missing required configuration: {key}")
        self.with_context(config_key=key)


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        super().__init__(message or f"Invalid configuration value for {key}: {value!r}")
        self.with_context(config_key=key, config_value=str(value))


class SessionNotBoundError(ConfigError):
    """A statement was executed without a session to run it on."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Statement is not bound to a session; pass session= or use Session.select()/insert()/update()/delete()"
        )


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(SqlChainError):
    """Driver-reported failure while running a statement."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class QueryError(DatabaseError):
    """SQL rejected by the driver (syntax error, unknown table, malformed statement)."""

    pass


class IntegrityError(DatabaseError):
    """Constraint violation (duplicate key, foreign key, NOT NULL)."""

    pass


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SqlChainError",
    "TransientError",
    "DatabaseConnectionError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "SessionNotBoundError",
    "DatabaseError",
    "QueryError",
    "IntegrityError",
]
