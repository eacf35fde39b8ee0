"""Tests for ``sqlchain.adapters.sqlite``: SQLite adapter."""

from __future__ import annotations

import sqlite3
from unittest.mock import patch

import pytest

from sqlchain.adapters.sqlite import SQLiteAdapter
from sqlchain.errors import DatabaseConnectionError, IntegrityError, QueryError


class TestSQLiteAdapterInit:
    def test_default_memory(self):
        adapter = SQLiteAdapter()
        assert adapter.db_type.value == "sqlite"
        assert adapter.is_connected is False
        assert adapter.config.to_connection_string() == ":memory:"

    def test_custom_path(self, tmp_path):
        adapter = SQLiteAdapter(path=str(tmp_path / "shop.db"))
        assert adapter.is_connected is False
        assert adapter.config.path.endswith("shop.db")


class TestSQLiteAdapterConnect:
    def test_connect_sets_row_factory(self):
        with SQLiteAdapter() as adapter:
            assert adapter.get_connection().row_factory is sqlite3.Row

    def test_connect_enables_foreign_keys(self):
        with SQLiteAdapter() as adapter:
            assert adapter.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_readonly_rejects_writes(self):
        with SQLiteAdapter(readonly=True) as adapter:
            with pytest.raises(QueryError):
                adapter.execute("CREATE TABLE t (id INTEGER)")

    def test_execute_connects_lazily(self):
        adapter = SQLiteAdapter()
        assert adapter.execute("SELECT 1").fetchone()[0] == 1
        assert adapter.is_connected
        adapter.disconnect()

    @patch("sqlite3.connect", side_effect=sqlite3.OperationalError("unable to open database"))
    def test_connect_failure_raises(self, mock_connect):
        adapter = SQLiteAdapter(path="/nonexistent/path.db")
        with pytest.raises(DatabaseConnectionError):
            adapter.connect()

    def test_disconnect_when_not_connected(self):
        adapter = SQLiteAdapter()
        adapter.disconnect()
        assert adapter.is_connected is False


class TestSQLiteAdapterErrors:
    @pytest.fixture
    def adapter(self):
        adapter = SQLiteAdapter()
        adapter.connect()
        adapter.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT UNIQUE)")
        yield adapter
        adapter.disconnect()

    def test_syntax_error(self, adapter):
        with pytest.raises(QueryError) as exc_info:
            adapter.execute("SELEC * FROM t")
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        assert exc_info.value.context.sql == "SELEC * FROM t"

    def test_integrity_error(self, adapter):
        adapter.execute("INSERT INTO t (name) VALUES (?)", ("a",))
        with pytest.raises(IntegrityError) as exc_info:
            adapter.execute("INSERT INTO t (name) VALUES (?)", ("a",))
        assert exc_info.value.context.params == ("a",)

    def test_backticks_and_mysql_limit_accepted(self, adapter):
        adapter.execute("INSERT INTO t (`name`) VALUES (?)", ("x",))
        rows = adapter.execute("SELECT name FROM t LIMIT 0,10").fetchall()
        assert [row["name"] for row in rows] == ["x"]


class TestSQLiteAdapterTransactions:
    @pytest.fixture
    def adapter(self):
        adapter = SQLiteAdapter()
        adapter.execute("CREATE TABLE t (id INTEGER)")
        yield adapter
        adapter.disconnect()

    def _count(self, adapter) -> int:
        return adapter.execute("SELECT count(*) FROM t").fetchone()[0]

    def test_transaction_commits(self, adapter):
        with adapter.transaction():
            adapter.execute("INSERT INTO t VALUES (1)")
            assert adapter.in_transaction
        assert not adapter.in_transaction
        assert self._count(adapter) == 1

    def test_transaction_rolls_back(self, adapter):
        with pytest.raises(ValueError):
            with adapter.transaction():
                adapter.execute("INSERT INTO t VALUES (1)")
                raise ValueError("abort")
        assert self._count(adapter) == 0

    def test_commit_without_begin_is_noop(self, adapter):
        adapter.commit()
        assert not adapter.in_transaction
