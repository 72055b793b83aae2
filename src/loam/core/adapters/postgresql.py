"""PostgreSQL driver adapter.

Uses ``psycopg`` (psycopg 3) by default; set ``dbapi`` to ``psycopg2``
or ``pg8000`` to pick another DBAPI.

Install the driver::

    pip install loam-orm[postgresql]
"""

from __future__ import annotations

from .base import DriverAdapter
from .types import DriverKind


class PostgreSQLAdapter(DriverAdapter):
    """PostgreSQL driver adapter. Suitable for production deployments."""

    driver = DriverKind.POSTGRESQL
    default_dbapi = "psycopg"
    default_port = 5432
    install_extra = "postgresql"


__all__ = [
    "PostgreSQLAdapter",
]
