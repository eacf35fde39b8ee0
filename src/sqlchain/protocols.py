"""
Structural protocols shared by the session and the adapters.

Adapters wrap very different drivers (``sqlite3``, ``mysql.connector``,
SQLAlchemy) but all hand back an object shaped like a DB-API 2.0 cursor.
The session only relies on the members listed here.

Architecture:
    ::

        Cursor Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ description   → column metadata of the last result    │
        │ rowcount      → rows affected / returned              │
        │ lastrowid     → id generated by the last INSERT       │
        │ fetchone()    → next row or None                      │
        │ fetchall()    → remaining rows                        │
        └────────────────────────────────────────────────────────┘

        Implementations:
        ┌────────────────────────────────────────────────────────┐
        │ sqlite3.Cursor                (SQLiteAdapter)          │
        │ mysql.connector cursor        (MySQLAdapter)           │
        │ ResultCursor over CursorResult (SQLAlchemyAdapter)     │
        └────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """Minimal DB-API cursor interface consumed by :class:`~sqlchain.session.Session`."""

    @property
    def description(self) -> Any:
        """Sequence of column descriptors; the first item of each is the name."""
        ...

    @property
    def rowcount(self) -> int:
        ...

    @property
    def lastrowid(self) -> Any:
        ...

    def fetchone(self) -> Any:
        ...

    def fetchall(self) -> list[Any]:
        ...


__all__ = [
    "Cursor",
]
