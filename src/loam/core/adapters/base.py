"""Driver adapter base class.

Manifesto:
    Every backend turns a ``ConnectionConfig`` into a SQLAlchemy engine.
    What differs per backend is the URL scheme, the DBAPI, the default
    port and a handful of engine options.  The abstract base keeps the
    shared URL building and pooling logic in one place; subclasses only
    declare their defaults.

Features:
    - ``url()`` honours an explicit ``url`` before building from components
    - ``engine_options()`` merges pool settings with driver-specific options
    - ``create_engine()`` returns a ready ``Engine``

Tags:
    loam-core, database, abstract-base, adapter-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import NoSuchModuleError

from loam.core.errors import ConfigError
from loam.core.logging import get_logger
from loam.core.orm.session import create_engine

from .types import ConnectionConfig, DriverKind

logger = get_logger(__name__)


class DriverAdapter:
    """
    Base class for driver adapters.

    Subclasses set ``driver``, ``default_dbapi`` and ``default_port`` and
    may override ``default_query()`` and ``engine_options()``.
    """

    driver: DriverKind
    default_dbapi: str | None = None
    default_port: int | None = None
    install_extra: str = ""

    def __init__(self, config: ConnectionConfig):
        self._config = config

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def dbapi(self) -> str | None:
        """DBAPI suffix used in the URL scheme."""
        return self._config.dbapi or self.default_dbapi

    def default_query(self) -> dict[str, str]:
        """URL query parameters every connection of this kind needs."""
        return {}

    def url(self) -> URL:
        """SQLAlchemy URL for this connection."""
        if self._config.url:
            return make_url(self._config.url)

        cfg = self._config
        drivername = self.driver.value if not self.dbapi else f"{self.driver.value}+{self.dbapi}"
        return URL.create(
            drivername=drivername,
            username=cfg.username,
            password=cfg.password.get_secret_value() if cfg.password else None,
            host=cfg.host,
            port=cfg.port or self.default_port,
            database=cfg.database or None,
            query={**self.default_query(), **cfg.query},
        )

    def engine_options(self) -> dict[str, Any]:
        """Keyword arguments for ``create_engine``."""
        cfg = self._config
        return {
            "echo": cfg.echo,
            "pool_size": cfg.pool_size,
            "max_overflow": cfg.max_overflow,
            "pool_timeout": cfg.pool_timeout,
            "pool_pre_ping": cfg.pool_pre_ping,
            **cfg.options,
        }

    def create_engine(self) -> Engine:
        """Build the engine.

        Raises:
            ConfigError: the DBAPI package for this driver is not installed or unknown
        """
        url = self.url()
        try:
            engine = create_engine(url, **self.engine_options())
        except ImportError as exc:
            raise ConfigError(
                f"{self.dbapi or self.driver.value} is required for {self.driver.value}. "
                f"Install with: pip install loam-orm[{self.install_extra}]",
                cause=exc,
            ).with_context(driver=self.driver.value) from exc
        except NoSuchModuleError as exc:
            raise ConfigError(
                f"Unknown DBAPI {self.dbapi!r} for {self.driver.value}",
                cause=exc,
            ).with_context(driver=self.driver.value) from exc
        logger.debug(
            "engine_created",
            driver=self.driver.value,
            url=url.render_as_string(hide_password=True),
        )
        return engine

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(url={self.url().render_as_string(hide_password=True)!r})"


__all__ = [
    "DriverAdapter",
]
