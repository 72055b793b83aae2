"""Microsoft SQL Server driver adapter.

Uses ``pyodbc`` through SQLAlchemy's ``mssql`` dialect.  The ODBC driver
name defaults to ``ODBC Driver 18 for SQL Server``; override it with
``query={"driver": "..."}``.

Install the driver::

    pip install loam-orm[sqlserver]
"""

from __future__ import annotations

from sqlalchemy.engine import URL

from .base import DriverAdapter
from .types import DriverKind


class SQLServerAdapter(DriverAdapter):
    """SQL Server driver adapter."""

    driver = DriverKind.SQLSERVER
    default_dbapi = "pyodbc"
    default_port = 1433
    install_extra = "sqlserver"

    def default_query(self) -> dict[str, str]:
        return {
            "driver": "ODBC Driver 18 for SQL Server",
            "TrustServerCertificate": "yes",
        }

    def url(self) -> URL:
        # SQLAlchemy names the dialect "mssql", not "sqlserver"
        url = super().url()
        if url.get_backend_name() == "sqlserver":
            url = url.set(drivername=f"mssql+{self.dbapi}")
        return url


__all__ = [
    "SQLServerAdapter",
]
