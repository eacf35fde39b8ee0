"""Database adapter registry and factory.

Consumers should never hard-code adapter class names.  The registry maps
backend names to adapter classes and :func:`get_adapter` creates a
configured (not yet connected) instance.

Tags:
    sqlchain, database, registry, factory
"""

from __future__ import annotations

from typing import Any

from sqlchain.errors import ConfigError

from .alchemy import SQLAlchemyAdapter
from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseType


class AdapterRegistry:
    """
    Registry for database adapter factories.

    Pre-registered adapters:
    - ``sqlite``: :class:`SQLiteAdapter`
    - ``mysql`` / ``mariadb``: :class:`MySQLAdapter`
    - ``sqlalchemy``: :class:`SQLAlchemyAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["mysql"] = MySQLAdapter
        self._factories["mariadb"] = MySQLAdapter  # Alias
        self._factories["sqlalchemy"] = SQLAlchemyAdapter

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter factory."""
        self._factories[name.lower()] = adapter_class

    def create(self, name: str, **kwargs: Any) -> DatabaseAdapter:
        """Create an adapter by name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(
                f"Unknown database adapter: {name}. Registered: {sorted(self._factories)}"
            )
        return self._factories[name](**kwargs)


adapter_registry = AdapterRegistry()


def get_adapter(
    db_type: DatabaseType | str,
    **kwargs: Any,
) -> DatabaseAdapter:
    """
    Get a database adapter by type.

    Usage:
        adapter = get_adapter(DatabaseType.SQLITE, path="data.db")
        adapter = get_adapter("mysql", host="localhost", database="shop")
    """
    name = db_type.value if isinstance(db_type, DatabaseType) else db_type
    return adapter_registry.create(name, **kwargs)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
