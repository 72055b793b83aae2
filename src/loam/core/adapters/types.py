"""Driver kinds and per-connection configuration."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, SecretStr

if TYPE_CHECKING:
    from sqlalchemy.engine import URL


class DriverKind(str, Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"


class ConnectionConfig(BaseModel):
    """
    Configuration for one named connection.

    Preference order:
    1) If ``url`` is set, it is used as-is.
    2) Otherwise the adapter builds a SQLAlchemy URL from the components.

    Different fields are used by different drivers; ``path`` only matters
    for SQLite, ``host``/``port``/``username`` only for server backends.
    """

    driver: DriverKind = Field(DriverKind.SQLITE, description="Backend kind.")
    url: str | None = Field(default=None, description="Full SQLAlchemy URL; overrides the components.")

    # Server backends
    host: str = "localhost"
    port: int | None = Field(default=None, description="None uses the driver's default port.")
    database: str = ""
    username: str | None = None
    password: SecretStr | None = None
    dbapi: str | None = Field(
        default=None,
        description="DBAPI suffix, e.g. psycopg2 for postgresql+psycopg2. None uses the adapter default.",
    )
    query: dict[str, str] = Field(default_factory=dict, description="Extra URL query parameters.")

    # SQLite
    path: str | None = Field(default=None, description="SQLite file path. None uses an in-memory database.")

    # Pooling (ignored by SQLite)
    pool_size: int | None = None
    max_overflow: int | None = None
    pool_timeout: int | None = None
    pool_pre_ping: bool = True

    echo: bool = False

    # Extra keyword arguments for sqlalchemy.create_engine
    options: dict[str, Any] = Field(default_factory=dict)

    def sqlalchemy_url(self) -> URL:
        """SQLAlchemy URL the registered adapter for ``driver`` builds."""
        from .registry import get_driver

        return get_driver(self).url()


__all__ = [
    "DriverKind",
    "ConnectionConfig",
]
