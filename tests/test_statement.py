"""Tests for ``sqlchain.statement``: builder state and execution through a session."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from sqlchain.errors import IntegrityError, QueryError, SessionNotBoundError
from sqlchain.statement import Statement, StatementKind, delete, insert, select, update


class TestFactories:
    @pytest.mark.parametrize(
        "factory, kind",
        [
            (select, StatementKind.SELECT),
            (insert, StatementKind.INSERT),
            (update, StatementKind.UPDATE),
            (delete, StatementKind.DELETE),
        ],
    )
    def test_factory_sets_kind(self, factory, kind) -> None:
        stmt = factory()
        assert stmt.kind is kind
        assert stmt.session is None

    def test_factories_return_fresh_statements(self) -> None:
        assert select() is not select()

    def test_session_factories_bind(self, session) -> None:
        stmt = session.update()
        assert stmt.kind is StatementKind.UPDATE
        assert stmt.session is session

    def test_kind_accepts_string(self) -> None:
        assert Statement("DELETE").kind is StatementKind.DELETE


class TestBuilderState:
    def test_methods_chain(self) -> None:
        stmt = select()
        assert stmt.from_("t") is stmt
        assert stmt.where("a = ?", 1) is stmt
        assert stmt.limit(1) is stmt

    def test_table_aliases_overwrite(self) -> None:
        stmt = select().from_("a").into("b").table("c")
        assert stmt.table_expr == "c"

    def test_columns_variadic_and_list_equivalent(self) -> None:
        assert select().columns("a", "b").column_list == ["a", "b"]
        assert select().columns(["a", "b"]).column_list == ["a", "b"]
        assert select().columns(("a",)).column_list == ["a"]

    def test_single_column_wrapped(self) -> None:
        assert select().columns("id").column_list == ["id"]

    def test_empty_columns_rejected(self) -> None:
        with pytest.raises(ValueError):
            select().columns([])

    def test_scalar_value_appended(self) -> None:
        assert insert().values(1).values([2, 3]).write_values == [1, 2, 3]

    def test_where_resets_predicates(self) -> None:
        stmt = select().from_("t").where("a = ?", 1).and_where("b = ?", 2)
        stmt.where("c = ?", 3)
        assert stmt.predicates == ["c = ?"]
        assert stmt.compile().params == (3,)

    def test_where_with_fragment_list(self) -> None:
        stmt = select().from_("t").where(["a = ?", "and b = ?"], 1, 2)
        assert stmt.compile().sql == "SELECT * FROM t WHERE a = ? and b = ?"
        assert stmt.compile().params == (1, 2)

    def test_and_where_without_where_keeps_prefix(self) -> None:
        assert select().from_("t").and_where("a = 1").sql == "SELECT * FROM t WHERE and a = 1"

    def test_compile_is_idempotent(self) -> None:
        stmt = select().from_("t").where("a = ?", 1).page(3, 10)
        assert stmt.compile() == stmt.compile()
        assert stmt.sql == stmt.sql

    def test_flags_toggle(self) -> None:
        stmt = select().explain().explain(False)
        assert stmt.is_explain is False
        assert stmt.calc_found_rows().is_calc_found_rows is True

    def test_repr(self) -> None:
        assert repr(select().from_("posts")) == "Statement(SELECT, table='posts')"


# =============================================================================
# Execution
# =============================================================================


class TestUnbound:
    @pytest.mark.parametrize("method", ["execute", "fetch", "fetch_all", "fetch_column", "count"])
    def test_requires_session(self, method) -> None:
        with pytest.raises(SessionNotBoundError):
            getattr(select().from_("t"), method)()


class TestExecution:
    def test_fetch_all(self, session) -> None:
        rows = (
            session.select()
            .columns("title")
            .from_("posts")
            .where("status = ?", "publish")
            .order_by("id")
            .fetch_all()
        )
        assert rows == [{"title": "Hello world"}, {"title": "Release 1.0"}]

    def test_fetch_first_row(self, session) -> None:
        row = session.select().from_("posts").where("id = ?", 3).fetch()
        assert row["title"] == "Release 1.0"
        assert row["author_id"] == 2

    def test_fetch_no_row(self, session) -> None:
        assert session.select().from_("posts").where("id = ?", 99).fetch() is None

    def test_fetch_column(self, session) -> None:
        stmt = session.select().columns("id", "title").from_("posts").where("id = ?", 2)
        assert stmt.fetch_column() == 2
        assert stmt.fetch_column(1) == "Draft notes"

    def test_count(self, session) -> None:
        stmt = session.select().columns("id").from_("posts").where("author_id = ?", 2)
        assert stmt.count() == 2

    def test_count_restores_select_mode(self, session) -> None:
        stmt = session.select().columns("id").from_("posts").order_by("id").page(1, 2)
        stmt.count()
        assert stmt.is_count is False
        assert stmt.fetch_all() == [{"id": 1}, {"id": 2}]

    def test_count_with_no_rows(self, session) -> None:
        stmt = session.select().columns("id").from_("posts").where("id > ?", 100)
        assert stmt.count() == 0

    def test_insert_update_delete(self, session) -> None:
        cursor = (
            session.insert()
            .into("posts")
            .columns("title", "status", "author_id")
            .values(["New", "draft", 3])
            .execute()
        )
        assert cursor is not None
        new_id = session.last_insert_id()
        assert new_id == 5

        session.update().table("posts").columns("status").values(["publish"]).where(
            "id = ?", new_id
        ).execute()
        assert session.select().columns("status").from_("posts").where(
            "id = ?", new_id
        ).fetch_column() == "publish"

        session.delete().from_("posts").where("id = ?", new_id).execute()
        assert session.select().from_("posts").count() == 4

    def test_query_string_recorded(self, session) -> None:
        stmt = session.select().from_("posts").where("id = ?", 1)
        assert stmt.query_string is None
        stmt.fetch()
        assert stmt.query_string == "SELECT * FROM posts WHERE id = ?"

    def test_query_string_kept_after_failure(self, session) -> None:
        stmt = session.select().from_("posts").where("id = ?", 1)
        stmt.fetch()
        stmt.from_("missing")
        assert stmt.fetch() is None
        assert stmt.query_string == "SELECT * FROM posts WHERE id = ?"

    def test_group_by_having_executes(self, session) -> None:
        rows = (
            session.select()
            .columns("author_id", "sum(views) AS total")
            .from_("posts")
            .group_by("author_id")
            .having("sum(views) > ?", 20)
            .fetch_all()
        )
        assert rows == [{"author_id": 2, "total": 28}]


class TestFailures:
    def test_bad_table_records_error(self, session) -> None:
        stmt = session.select().from_("missing")
        assert stmt.fetch_all() is None
        assert len(stmt.errors) == 1
        error = stmt.last_error
        assert isinstance(error, QueryError)
        assert error.context.table == "missing"
        assert error.context.kind == "SELECT"
        assert error.context.sql == "SELECT * FROM missing"

    def test_each_failure_appends(self, session) -> None:
        stmt = session.select().from_("missing")
        stmt.fetch()
        stmt.count()
        stmt.fetch_column()
        assert len(stmt.errors) == 3

    def test_missing_table_clause_fails_softly(self, session) -> None:
        stmt = session.delete().where("id = ?", 1)
        assert stmt.execute() is None
        assert isinstance(stmt.last_error, QueryError)

    def test_constraint_violation(self, session) -> None:
        stmt = (
            session.insert()
            .into("posts")
            .columns("title", "status", "author_id")
            .values(["Hello world", "draft", 1])
        )
        assert stmt.execute() is None
        assert isinstance(stmt.last_error, IntegrityError)

    def test_failure_is_logged(self, session) -> None:
        with capture_logs() as logs:
            session.select().from_("missing").fetch()
        failures = [log for log in logs if log["event"] == "statement_failed"]
        assert len(failures) == 1
        assert failures[0]["log_level"] == "warning"
        assert failures[0]["error_type"] == "QueryError"

    def test_no_error_when_successful(self, session) -> None:
        stmt = session.select().from_("posts")
        stmt.fetch_all()
        assert stmt.errors == []
        assert stmt.last_error is None
