"""Driver adapter registry and factory.

Manifesto:
    Consumers should never hard-code adapter class names.  The registry
    maps driver-kind strings to adapter classes and the ``get_driver()``
    factory creates a configured adapter from a ``ConnectionConfig``.

Features:
    - ``DriverRegistry`` singleton with pre-registered defaults
    - ``register()`` for custom / third-party adapters
    - ``get_driver()`` factory: config → adapter

Tags:
    loam-core, database, registry, factory, singleton

Doc-Types:
    api-reference
"""

from __future__ import annotations

from loam.core.errors import UnknownDriverError

from .base import DriverAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .sqlserver import SQLServerAdapter
from .types import ConnectionConfig, DriverKind


class DriverRegistry:
    """
    Registry for driver adapter classes.

    Pre-registered adapters:
    - ``sqlite`` — :class:`SQLiteAdapter`
    - ``postgresql`` / ``postgres`` — :class:`PostgreSQLAdapter`
    - ``mysql`` — :class:`MySQLAdapter`
    - ``sqlserver`` / ``mssql`` — :class:`SQLServerAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DriverAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["postgresql"] = PostgreSQLAdapter
        self._factories["postgres"] = PostgreSQLAdapter  # Alias
        self._factories["mysql"] = MySQLAdapter
        self._factories["sqlserver"] = SQLServerAdapter
        self._factories["mssql"] = SQLServerAdapter  # Alias

    def register(self, name: str, adapter_class: type[DriverAdapter]) -> None:
        """Register an adapter class."""
        self._factories[name.lower()] = adapter_class

    def create(self, config: ConnectionConfig, name: str | None = None) -> DriverAdapter:
        """Create an adapter for *config*; *name* overrides ``config.driver``."""
        key = (name or config.driver.value).lower()
        if key not in self._factories:
            raise UnknownDriverError(key)
        return self._factories[key](config)

    def list_drivers(self) -> list[str]:
        """List registered driver names."""
        return sorted(self._factories.keys())


# Global registry
driver_registry = DriverRegistry()


def get_driver(config: ConnectionConfig, driver: DriverKind | str | None = None) -> DriverAdapter:
    """
    Get a driver adapter for a connection config.

    Usage:
        adapter = get_driver(ConnectionConfig(driver="postgresql", database="app"))
        engine = adapter.create_engine()
    """
    if isinstance(driver, DriverKind):
        driver = driver.value
    return driver_registry.create(config, driver)


__all__ = [
    "DriverRegistry",
    "driver_registry",
    "get_driver",
]
