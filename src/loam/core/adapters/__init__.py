"""Driver adapters -- one SQLAlchemy engine recipe per supported backend.

Architecture::

    DriverAdapter (base.py)          URL building + engine options
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- PostgreSQLAdapter        psycopg (optional extra)
        |-- MySQLAdapter             PyMySQL (optional extra)
        |-- SQLServerAdapter         pyodbc (optional extra)

    DriverRegistry (registry.py)     Singleton: driver name -> adapter class
    ConnectionConfig (types.py)      Pydantic config for one named connection
    DriverKind (types.py)            Enum of supported backends

Each DBAPI is only imported when an engine for that backend is created.
"""

from .base import DriverAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .registry import DriverRegistry, driver_registry, get_driver
from .sqlite import SQLiteAdapter
from .sqlserver import SQLServerAdapter
from .types import ConnectionConfig, DriverKind

__all__ = [
    "DriverKind",
    "ConnectionConfig",
    "DriverAdapter",
    "SQLiteAdapter",
    "PostgreSQLAdapter",
    "MySQLAdapter",
    "SQLServerAdapter",
    "DriverRegistry",
    "driver_registry",
    "get_driver",
]
