"""Fluent statement builder.

A :class:`Statement` accumulates clause fragments through chained calls and
compiles them into SQL text plus an ordered tuple of positional params::

    from sqlchain import select

    stmt = (
        select()
        .columns("id", "title")
        .from_("posts")
        .where("author_id = ?", 7)
        .and_where("status = ?", "publish")
        .order_by("id desc")
        .page(2, 20)
    )
    stmt.compile().sql
    # SELECT id,title FROM posts WHERE author_id = ? and status = ?
    #   ORDER BY id desc LIMIT 20,20

Clause fragments are inserted verbatim; only values travel as params.
Statements bound to a :class:`~sqlchain.session.Session` can also be run.
Execution failures reported by the database are recorded on the statement
(:attr:`Statement.errors`) and signalled with a ``None`` result rather than
raised.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlchain.compiler import CompiledStatement, StatementKind, compile_statement
from sqlchain.dialect import Dialect, MySQLDialect
from sqlchain.errors import DatabaseError, SessionNotBoundError
from sqlchain.logging import get_logger
from sqlchain.protocols import Cursor

if TYPE_CHECKING:
    from sqlchain.session import Session

logger = get_logger(__name__)

_DEFAULT_DIALECT = MySQLDialect()


class Statement:
    """One SQL statement under construction.

    Every clause method mutates the statement and returns it, so calls chain.
    A statement is not meant to be shared across threads.
    """

    def __init__(self, kind: StatementKind, session: Session | None = None):
        self.kind = StatementKind(kind)
        self.session = session

        self.table_expr: str | None = None
        self.column_list: list[str] = ["*"]
        self.join_clauses: list[str] = []
        self.predicates: list[str] = []
        self.predicate_values: list[Any] = []
        self.write_values: list[Any] = []
        self.group_by_expr: str | None = None
        self.with_rollup = False
        self.having_expr: str | None = None
        self.having_values: list[Any] = []
        self.order_by_expr: str | None = None
        self.limit_clause: str | None = None
        self.is_explain = False
        self.is_calc_found_rows = False
        self.is_count = False

        self.errors: list[DatabaseError] = []
        self.query_string: str | None = None

    # =========================================================================
    # Target
    # =========================================================================

    def table(self, table: str) -> Statement:
        """Set the target table (may carry an alias or joins)."""
        self.table_expr = table
        return self

    def from_(self, table: str) -> Statement:
        return self.table(table)

    def into(self, table: str) -> Statement:
        return self.table(table)

    # =========================================================================
    # Columns and values
    # =========================================================================

    def columns(self, *columns: str | Sequence[str]) -> Statement:
        """Replace the column list.

        Accepts either one list/tuple or the column names as arguments:
        ``columns(["a", "b"])`` and ``columns("a", "b")`` are equivalent.
        """
        if len(columns) == 1 and isinstance(columns[0], (list, tuple)):
            names = list(columns[0])
        else:
            names = list(columns)
        if not names:
            raise ValueError("columns() requires at least one column")
        self.column_list = names
        return self

    def values(self, values: Sequence[Any] | Any) -> Statement:
        """Append write values for INSERT/UPDATE.

        Repeated calls accumulate; INSERT emits one placeholder per value.
        """
        if isinstance(values, (list, tuple)):
            self.write_values.extend(values)
        else:
            self.write_values.append(values)
        return self

    # =========================================================================
    # Predicates
    # =========================================================================

    def where(self, condition: str | Sequence[str], *params: Any) -> Statement:
        """Start a fresh predicate list with *condition*.

        Earlier predicates and their bound values are discarded.  A
        list/tuple of fragments replaces the predicate list as given.
        """
        self.predicates = []
        self.predicate_values = []
        if isinstance(condition, (list, tuple)):
            self.predicates = list(condition)
        else:
            self.predicates.append(condition)
        self.predicate_values.extend(params)
        return self

    def and_where(self, condition: str, *params: Any) -> Statement:
        self.predicates.append(f"and {condition}")
        self.predicate_values.extend(params)
        return self

    def or_where(self, condition: str, *params: Any) -> Statement:
        self.predicates.append(f"or {condition}")
        self.predicate_values.extend(params)
        return self

    # =========================================================================
    # Joins
    # =========================================================================

    def join(self, expr: str) -> Statement:
        self.join_clauses.append(f"join {expr}")
        return self

    def left_join(self, expr: str) -> Statement:
        self.join_clauses.append(f"left join {expr}")
        return self

    def right_join(self, expr: str) -> Statement:
        self.join_clauses.append(f"right join {expr}")
        return self

    def inner_join(self, expr: str) -> Statement:
        self.join_clauses.append(f"inner join {expr}")
        return self

    # =========================================================================
    # Grouping, ordering, paging
    # =========================================================================

    def group_by(self, expr: str, with_rollup: bool = False) -> Statement:
        self.group_by_expr = expr
        self.with_rollup = with_rollup
        return self

    def having(self, condition: str, *params: Any) -> Statement:
        """Set the HAVING condition; emitted only together with GROUP BY."""
        self.having_expr = condition
        self.having_values = list(params)
        return self

    def order_by(self, expr: str) -> Statement:
        self.order_by_expr = expr
        return self

    def limit(self, offset: int | str = 0, count: int | None = None) -> Statement:
        """Set the LIMIT clause.

        ``limit(10)`` renders ``LIMIT 10``; ``limit(20, 10)`` renders
        ``LIMIT 20,10``.  A single falsy argument clears the clause.
        """
        if count is None:
            self.limit_clause = str(offset) if offset else None
        else:
            self.limit_clause = f"{offset},{count}"
        return self

    def page(self, page: int, limit: int) -> Statement:
        """Select page *page* (1-based) of *limit* rows."""
        return self.limit(limit * (page - 1), limit)

    # =========================================================================
    # Flags
    # =========================================================================

    def explain(self, flag: bool = True) -> Statement:
        self.is_explain = flag
        return self

    def calc_found_rows(self, flag: bool = True) -> Statement:
        """Ask MySQL to remember the unlimited row count.

        Read it afterwards with :meth:`Session.found_rows`.
        """
        self.is_calc_found_rows = flag
        return self

    # =========================================================================
    # Compilation
    # =========================================================================

    @property
    def dialect(self) -> Dialect:
        if self.session is None:
            return _DEFAULT_DIALECT
        return self.session.dialect

    def compile(self) -> CompiledStatement:
        """Render the statement; pure with respect to the builder state."""
        return compile_statement(self, self.dialect)

    @property
    def sql(self) -> str:
        return self.compile().sql

    @property
    def params(self) -> tuple[Any, ...]:
        return self.compile().params

    # =========================================================================
    # Execution
    # =========================================================================

    def _require_session(self) -> Session:
        if self.session is None:
            raise SessionNotBoundError()
        return self.session

    def execute(self) -> Cursor | None:
        """Run the statement; return the cursor, or ``None`` on failure.

        Database failures are appended to :attr:`errors` and logged.
        Connection and configuration errors propagate.
        """
        session = self._require_session()
        compiled = self.compile()
        try:
            cursor = session.run(compiled.sql, compiled.params)
        except DatabaseError as e:
            e.with_context(table=self.table_expr, kind=self.kind.value)
            self.errors.append(e)
            logger.warning("statement_failed", **e.to_dict())
            return None
        self.query_string = compiled.sql
        return cursor

    def fetch(self) -> dict[str, Any] | None:
        """First row as a dict, ``None`` when there is no row or on failure."""
        cursor = self.execute()
        if cursor is None:
            return None
        return self._require_session().fetch_one(cursor)

    def fetch_all(self) -> list[dict[str, Any]] | None:
        cursor = self.execute()
        if cursor is None:
            return None
        return self._require_session().fetch_all(cursor)

    def fetch_column(self, index: int = 0) -> Any:
        """Scalar at *index* of the first row."""
        cursor = self.execute()
        if cursor is None:
            return None
        return self._require_session().fetch_scalar(cursor, index)

    def count(self) -> int | None:
        """Run ``SELECT count(<first column>)`` with the current clauses.

        Count mode is switched off again afterwards, so the same statement
        can then fetch the rows themselves.
        """
        previous, self.is_count = self.is_count, True
        try:
            cursor = self.execute()
        finally:
            self.is_count = previous
        if cursor is None:
            return None
        return int(self._require_session().fetch_scalar(cursor) or 0)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def last_error(self) -> DatabaseError | None:
        return self.errors[-1] if self.errors else None

    def __repr__(self) -> str:
        return f"Statement({self.kind.value}, table={self.table_expr!r})"


def select(session: Session | None = None) -> Statement:
    return Statement(StatementKind.SELECT, session)


def insert(session: Session | None = None) -> Statement:
    return Statement(StatementKind.INSERT, session)


def update(session: Session | None = None) -> Statement:
    return Statement(StatementKind.UPDATE, session)


def delete(session: Session | None = None) -> Statement:
    return Statement(StatementKind.DELETE, session)


__all__ = [
    "Statement",
    "StatementKind",
    "CompiledStatement",
    "select",
    "insert",
    "update",
    "delete",
]
