"""Database adapters -- the driver layer underneath :class:`~sqlchain.session.Session`.

Architecture::

    DatabaseAdapter (base.py)        Abstract base: connect/execute/transactions
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- MySQLAdapter             mysql.connector (optional extra)
        |-- SQLAlchemyAdapter        any SQLAlchemy engine URL

    AdapterRegistry (registry.py)    backend name -> adapter class
    DatabaseConfig (types.py)        connection parameters
    DatabaseType (types.py)          enum of supported backends

Guardrails:
    ❌ ``session.run("SELECT * FROM t WHERE id=" + user_input)``
    ✅ ``session.select().from_("t").where("id = ?", user_input)``
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at ``connect()`` time with clear ``ConfigError``
"""

from .alchemy import ResultCursor, SQLAlchemyAdapter
from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DatabaseAdapter",
    "SQLiteAdapter",
    "MySQLAdapter",
    "SQLAlchemyAdapter",
    "ResultCursor",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
