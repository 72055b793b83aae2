"""The ``Orm`` façade applications hold.

``Orm`` is a frozen value: ``connection()`` and ``with_context()`` return a
new façade with one field replaced, and ``query()`` resolves the pair only
when called.  That makes the two withers order independent and lets one
façade be shared by any number of threads::

    orm = create_orm()

    orm.query().create(user)                                 # default connection
    orm.connection("reporting").query().find(Report)         # named connection
    orm.with_context(ctx).connection("reporting").query()    # == connection(...).with_context(ctx)

    orm.transaction(lambda tx: tx.create(order))

    orm.observe(User, UserObserver())                        # at startup
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

from sqlalchemy.engine import Engine

from loam.core.errors import UnknownConnectionError
from loam.core.settings import DatabaseSettings, get_settings

from .connections import ConnectionRegistry
from .context import Context
from .factory import Factory
from .observers import ObserverRegistry
from .observers import observers as default_observers
from .query import Query

R = TypeVar("R")


@dataclass(frozen=True)
class Orm:
    """Bound connection name + request context over a shared connection registry."""

    connections: ConnectionRegistry
    observers: ObserverRegistry
    connection_name: str
    context: Context = field(default_factory=Context.background)

    def __post_init__(self) -> None:
        if self.connection_name not in self.connections:
            raise UnknownConnectionError(self.connection_name, self.connections.names())

    @classmethod
    def from_settings(
        cls,
        settings: DatabaseSettings | None = None,
        *,
        observers: ObserverRegistry | None = None,
    ) -> Orm:
        settings = settings or get_settings()
        observers = observers if observers is not None else default_observers
        registry = ConnectionRegistry.from_settings(settings, observers)
        return cls(connections=registry, observers=observers, connection_name=registry.default)

    def connection(self, name: str | None = None) -> Orm:
        """Façade bound to *name* (the default connection when ``None``).

        Raises:
            UnknownConnectionError: *name* is not configured
        """
        if name is None:
            name = self.connections.default
        if name not in self.connections:
            raise UnknownConnectionError(name, self.connections.names())
        return replace(self, connection_name=name)

    def with_context(self, context: Context) -> Orm:
        """Façade whose queries carry *context*."""
        return replace(self, context=context)

    def query(self) -> Query:
        return self.connections.get(self.connection_name).with_context(self.context)

    def db(self) -> Engine:
        return self.query().db()

    def factory(self) -> Factory:
        return self.query().factory()

    def transaction(self, fn: Callable[[Query], R]) -> R:
        return self.query().transaction(fn)

    def observe(self, model: Any, observer: Any) -> None:
        """Register *observer* for *model*; applies to every connection and context."""
        self.observers.observe(model, observer)

    def close(self) -> None:
        self.connections.close()


def create_orm(
    settings: DatabaseSettings | None = None,
    *,
    observers: ObserverRegistry | None = None,
) -> Orm:
    """Build an :class:`Orm` from settings (``LOAM_*`` environment when omitted)."""
    return Orm.from_settings(settings, observers=observers)


__all__ = [
    "Orm",
    "create_orm",
]
