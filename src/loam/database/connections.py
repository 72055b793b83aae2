"""Named connections, built once from settings.

Manifesto:
    Every connection name an application may ask for is known at startup.
    The registry builds one :class:`Query` per configured connection, installs
    the finished mapping read-only, and from then on only answers lookups.
    Lookups need no locking because nothing writes after construction.

    Engines connect lazily: building the registry opens no sockets, the
    first query against a connection does.

Tags:
    loam, connections, registry, multi-backend

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from loam.core.adapters.registry import get_driver
from loam.core.errors import UnknownConnectionError
from loam.core.logging import get_logger
from loam.core.settings import DatabaseSettings

from .dispatcher import EventDispatcher
from .observers import ObserverRegistry
from .query import Query

logger = get_logger(__name__)


class ConnectionRegistry:
    """Read-only mapping of connection name to :class:`Query`, plus the default name."""

    def __init__(self, queries: Mapping[str, Query], default: str):
        if default not in queries:
            raise UnknownConnectionError(default, list(queries))
        self._queries: Mapping[str, Query] = MappingProxyType(dict(queries))
        self._default = default

    @classmethod
    def from_settings(cls, settings: DatabaseSettings, observers: ObserverRegistry) -> ConnectionRegistry:
        """Create an engine per configured connection, all sharing one dispatcher."""
        dispatcher = EventDispatcher(observers)
        queries: dict[str, Query] = {}
        for name, config in settings.connections.items():
            adapter = get_driver(config)
            engine = adapter.create_engine()
            queries[name] = Query(engine, connection=name, driver=adapter.driver, dispatcher=dispatcher)
            logger.info(
                "connection_registered",
                connection=name,
                driver=adapter.driver.value,
                url=engine.url.render_as_string(hide_password=True),
                default=name == settings.default,
            )
        return cls(queries, settings.default)

    @property
    def default(self) -> str:
        return self._default

    def get(self, name: str | None = None) -> Query:
        """Query for *name* (the default connection when ``None``)."""
        if name is None:
            name = self._default
        try:
            return self._queries[name]
        except KeyError:
            raise UnknownConnectionError(name, list(self._queries)) from None

    def names(self) -> list[str]:
        return list(self._queries)

    def items(self) -> Iterator[tuple[str, Query]]:
        return iter(self._queries.items())

    def close(self) -> None:
        """Dispose every engine."""
        for name, query in self._queries.items():
            query.dispose()
            logger.info("connection_closed", connection=name)

    def __contains__(self, name: object) -> bool:
        return name in self._queries

    def __iter__(self) -> Iterator[str]:
        return iter(self._queries)

    def __len__(self) -> int:
        return len(self._queries)

    def __repr__(self) -> str:
        return f"ConnectionRegistry(default={self._default!r}, connections={self.names()!r})"


__all__ = [
    "ConnectionRegistry",
]
