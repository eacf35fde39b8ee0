"""
Shared pytest fixtures for sqlchain tests.

This module provides:
- An in-memory SQLite session seeded with a ``posts`` table
- A SQLAlchemy-backed session over ``sqlite://`` with the same data
- Isolation for structlog configuration and context variables

Usage:
    def test_something(session):
        assert session.select().from_("posts").count() == 4
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from sqlchain.adapters import SQLAlchemyAdapter, SQLiteAdapter
from sqlchain.session import Session

POSTS_DDL = """
CREATE TABLE posts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL UNIQUE,
    status TEXT NOT NULL,
    author_id INTEGER NOT NULL,
    views INTEGER NOT NULL DEFAULT 0
)
"""

POSTS = [
    ("Hello world", "publish", 1, 10),
    ("Draft notes", "draft", 1, 0),
    ("Release 1.0", "publish", 2, 25),
    ("Old news", "trash", 2, 3),
]


def _seed(session: Session) -> None:
    session.run(POSTS_DDL)
    for row in POSTS:
        session.run(
            "INSERT INTO posts (title, status, author_id, views) VALUES (?, ?, ?, ?)",
            row,
        )
    session.clear_history()


# =============================================================================
# Sessions
# =============================================================================


@pytest.fixture
def session() -> Iterator[Session]:
    """Connected in-memory SQLite session with a seeded ``posts`` table."""
    sess = Session(SQLiteAdapter(":memory:")).connect()
    _seed(sess)
    yield sess
    sess.close()


@pytest.fixture
def alchemy_session() -> Iterator[Session]:
    """Same data behind the SQLAlchemy adapter."""
    sess = Session(SQLAlchemyAdapter("sqlite://")).connect()
    _seed(sess)
    yield sess
    sess.close()


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
