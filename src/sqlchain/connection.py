"""Session factory: build a connected :class:`Session` from a URL string.

Supported URL schemes
---------------------
==========================  ==========================================  ============
Scheme                      Example                                     Adapter
==========================  ==========================================  ============
``memory``                  ``memory`` or ``:memory:`` or ``None``      SQLite RAM
``sqlite``                  ``sqlite:///path/to/file.db``               SQLite file
``(file path)``             ``./data/shop.db``                          SQLite file
``mysql`` / ``mariadb``     ``mysql://user:pw@host:3306/shop``          MySQL
``<backend>+<driver>``      ``mysql+pymysql://user:pw@host/shop``       SQLAlchemy
==========================  ==========================================  ============

Usage
-----
::

    from sqlchain import create_session

    session = create_session()                       # in-memory SQLite
    session = create_session("sqlite:///shop.db")
    session = create_session("mysql://shop:secret@db:3306/shop?charset=utf8mb4")

    rows = session.select().from_("orders").where("status = ?", "paid").fetch_all()
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from sqlchain.adapters import (
    DatabaseAdapter,
    MySQLAdapter,
    SQLAlchemyAdapter,
    SQLiteAdapter,
)
from sqlchain.errors import InvalidConfigError
from sqlchain.logging import get_logger
from sqlchain.session import Session

logger = get_logger(__name__)


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into (scheme, target).

    ``scheme`` is one of ``"memory"``, ``"sqlite"``, ``"file"``,
    ``"mysql"`` or ``"sqlalchemy"``.

    Raises:
        InvalidConfigError: The URL has a scheme no adapter handles.
    """
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    if db.startswith("sqlite://"):
        path = db[len("sqlite:///"):] if db.startswith("sqlite:///") else db[len("sqlite://"):]
        if not path or path == ":memory:":
            return "memory", ":memory:"
        return "sqlite", path

    if db.startswith(("mysql://", "mariadb://")):
        return "mysql", db

    if "://" in db:
        scheme = db.split("://", 1)[0]
        if "+" in scheme:
            return "sqlalchemy", db
        raise InvalidConfigError("url", db, f"Unsupported database URL scheme: {scheme!r}")

    # Bare file path
    return "file", db


def _mysql_adapter(url: str) -> MySQLAdapter:
    try:
        parsed = make_url(url)
    except ArgumentError as e:
        raise InvalidConfigError("url", url, f"Malformed MySQL URL: {e}") from e
    return MySQLAdapter(
        host=parsed.host or "localhost",
        port=parsed.port or 3306,
        database=parsed.database or "",
        username=parsed.username,
        password=parsed.password,
        charset=parsed.query.get("charset", "utf8mb4"),
    )


def create_adapter(db: str | None = None, *, data_dir: str | None = None) -> DatabaseAdapter:
    """Create an (unconnected) adapter for *db*.

    Relative SQLite paths are resolved within *data_dir* when given; the
    parent directory of a SQLite file is created if missing.
    """
    scheme, target = _parse_url(db)

    if scheme == "memory":
        return SQLiteAdapter(":memory:")

    if scheme in ("sqlite", "file"):
        path = Path(target)
        if data_dir and not path.is_absolute():
            path = Path(data_dir) / path
        path.parent.mkdir(parents=True, exist_ok=True)
        return SQLiteAdapter(str(path.resolve()))

    if scheme == "mysql":
        return _mysql_adapter(target)

    return SQLAlchemyAdapter(target)


def create_session(
    db: str | None = None,
    *,
    history_limit: int | None = None,
    data_dir: str | None = None,
    connect: bool = True,
) -> Session:
    """Create a :class:`Session` from a URL, path, or keyword.

    Parameters
    ----------
    db:
        ``None``/``"memory"`` for in-memory SQLite, a SQLite path or
        ``sqlite:///`` URL, a ``mysql://`` URL, or any SQLAlchemy URL with an
        explicit driver (``mysql+pymysql://...``).
    history_limit:
        Forwarded to :class:`Session`.
    data_dir:
        Directory relative SQLite paths are resolved in.
    connect:
        Open the connection before returning (the default).

    Raises
    ------
    InvalidConfigError
        The URL is not understood.
    DatabaseConnectionError
        ``connect`` is true and the database cannot be reached.
    """
    adapter = create_adapter(db, data_dir=data_dir)
    session = Session(adapter, history_limit=history_limit)
    logger.debug("session_created", backend=adapter.db_type.value)
    if connect:
        session.connect()
    return session


__all__ = [
    "create_adapter",
    "create_session",
]
