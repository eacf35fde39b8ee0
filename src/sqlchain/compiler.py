"""Render a :class:`~sqlchain.statement.Statement` into SQL text plus params.

One renderer per statement kind, looked up in :data:`RENDERERS`.  Renderers
only read the statement; compiling twice without mutation gives the same
result.

Parameter order always follows placeholder order in the emitted text:

    SELECT  where values, then having values (only when HAVING is emitted)
    INSERT  write values
    UPDATE  write values, then where values
    DELETE  where values
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlchain.dialect import Dialect

if TYPE_CHECKING:
    from sqlchain.statement import Statement


class StatementKind(str, Enum):
    """The four statement kinds the builder produces."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class CompiledStatement:
    """Final SQL text and the positional params bound to its placeholders."""

    kind: StatementKind
    sql: str
    params: tuple[Any, ...] = ()


def _where_tokens(stmt: Statement) -> list[str]:
    if not stmt.predicates:
        return []
    return ["WHERE", " ".join(stmt.predicates)]


def _select_list(stmt: Statement) -> str:
    if stmt.is_count:
        return f"count({stmt.column_list[0]})"
    return ",".join(stmt.column_list)


def render_select(stmt: Statement, dialect: Dialect) -> CompiledStatement:  # noqa: ARG001
    tokens: list[str] = []
    params: list[Any] = list(stmt.predicate_values)

    if stmt.is_explain:
        tokens.append("EXPLAIN")
    tokens.append("SELECT")
    if stmt.is_calc_found_rows:
        tokens.append("SQL_CALC_FOUND_ROWS")
    tokens.append(_select_list(stmt))
    if stmt.table_expr:
        tokens += ["FROM", stmt.table_expr]
    tokens += stmt.join_clauses
    tokens += _where_tokens(stmt)

    if stmt.group_by_expr:
        tokens += ["GROUP BY", stmt.group_by_expr]
        if stmt.with_rollup:
            tokens.append("WITH ROLLUP")
        # HAVING without GROUP BY is never emitted
        if stmt.having_expr:
            tokens += ["HAVING", stmt.having_expr]
            params += stmt.having_values

    if stmt.order_by_expr:
        tokens += ["ORDER BY", stmt.order_by_expr]
    if stmt.limit_clause:
        tokens += ["LIMIT", stmt.limit_clause]

    return CompiledStatement(StatementKind.SELECT, " ".join(tokens), tuple(params))


def render_insert(stmt: Statement, dialect: Dialect) -> CompiledStatement:
    tokens = ["INSERT"]
    if stmt.table_expr:
        tokens += ["INTO", stmt.table_expr]
    columns = ",".join(dialect.quote_identifier(c) for c in stmt.column_list)
    tokens.append(f"({columns})")
    tokens += ["VALUES", f"({dialect.placeholders(len(stmt.write_values))})"]
    return CompiledStatement(
        StatementKind.INSERT, " ".join(tokens), tuple(stmt.write_values)
    )


def render_update(stmt: Statement, dialect: Dialect) -> CompiledStatement:
    tokens = ["UPDATE"]
    if stmt.table_expr:
        tokens.append(stmt.table_expr)
    assignments = ", ".join(
        f"{dialect.quote_identifier(column)} = {dialect.placeholder(i)}"
        for i, column in enumerate(stmt.column_list)
    )
    tokens += ["SET", assignments]
    tokens += _where_tokens(stmt)
    params = (*stmt.write_values, *stmt.predicate_values)
    return CompiledStatement(StatementKind.UPDATE, " ".join(tokens), params)


def render_delete(stmt: Statement, dialect: Dialect) -> CompiledStatement:  # noqa: ARG001
    tokens = ["DELETE"]
    if stmt.table_expr:
        tokens += ["FROM", stmt.table_expr]
    tokens += _where_tokens(stmt)
    return CompiledStatement(
        StatementKind.DELETE, " ".join(tokens), tuple(stmt.predicate_values)
    )


Renderer = Callable[["Statement", Dialect], CompiledStatement]

RENDERERS: dict[StatementKind, Renderer] = {
    StatementKind.SELECT: render_select,
    StatementKind.INSERT: render_insert,
    StatementKind.UPDATE: render_update,
    StatementKind.DELETE: render_delete,
}


def compile_statement(stmt: Statement, dialect: Dialect) -> CompiledStatement:
    """Compile *stmt* with the renderer registered for its kind."""
    return RENDERERS[stmt.kind](stmt, dialect)


__all__ = [
    "StatementKind",
    "CompiledStatement",
    "RENDERERS",
    "compile_statement",
    "render_select",
    "render_insert",
    "render_update",
    "render_delete",
]
