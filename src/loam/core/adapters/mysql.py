"""MySQL / MariaDB driver adapter.

Uses ``PyMySQL`` by default.  Connections are opened with the
``utf8mb4`` charset unless the config overrides ``query["charset"]``.

Install the driver::

    pip install loam-orm[mysql]
"""

from __future__ import annotations

from .base import DriverAdapter
from .types import DriverKind


class MySQLAdapter(DriverAdapter):
    """MySQL / MariaDB driver adapter."""

    driver = DriverKind.MYSQL
    default_dbapi = "pymysql"
    default_port = 3306
    install_extra = "mysql"

    def default_query(self) -> dict[str, str]:
        return {"charset": "utf8mb4"}


__all__ = [
    "MySQLAdapter",
]
