"""SQLite driver adapter.

Uses the stdlib ``sqlite3`` DBAPI through SQLAlchemy's ``pysqlite``
dialect, so it is always available.  A ``path`` of ``None`` gives an
in-memory database shared by every session of the engine.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import URL, make_url

from .base import DriverAdapter
from .types import DriverKind


class SQLiteAdapter(DriverAdapter):
    """
    SQLite driver adapter.

    Suitable for:
    - Development and testing
    - Single-process applications
    """

    driver = DriverKind.SQLITE
    default_dbapi = "pysqlite"

    def url(self) -> URL:
        if self._config.url:
            return make_url(self._config.url)
        return URL.create(
            drivername=f"sqlite+{self.dbapi}",
            database=self._config.path or ":memory:",
            query=self._config.query,
        )

    def engine_options(self) -> dict[str, Any]:
        # Pool sizing does not apply to SQLite
        return {"echo": self._config.echo, **self._config.options}


__all__ = [
    "SQLiteAdapter",
]
