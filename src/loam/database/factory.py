"""Record factories for seed and test data.

A model opts in by pointing ``__factory__`` at a :class:`ModelFactory`::

    class UserFactory(ModelFactory):
        def definition(self) -> dict[str, Any]:
            return {"name": f"user-{self.sequence}", "avatar": "default.png"}

    class User(Base, Model):
        __tablename__ = "users"
        __factory__ = UserFactory
        ...

    orm.factory().count(3).create(User, avatar="custom.png")

``create`` goes through :meth:`Query.create`, so observers fire exactly as
for application writes.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from loam.core.errors import ConfigError

if TYPE_CHECKING:
    from .query import Query


class ModelFactory(ABC):
    """Default attribute values for one model."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.sequence = 0

    @abstractmethod
    def definition(self) -> dict[str, Any]:
        """Attribute values for the next record."""

    def attributes(self, **overrides: Any) -> dict[str, Any]:
        """Next set of attributes; ``sequence`` increases by one per call."""
        self.sequence = next(self._counter)
        return {**self.definition(), **overrides}


class Factory:
    """Builds records through a query's connection and context."""

    def __init__(self, query: Query, amount: int | None = None):
        self._query = query
        self._amount = amount

    def count(self, amount: int) -> Factory:
        """Factory producing *amount* records per call (results become lists)."""
        if amount < 0:
            raise ValueError("count must be >= 0")
        return Factory(self._query, amount)

    def _model_factory(self, model: type) -> ModelFactory:
        factory_cls = getattr(model, "__factory__", None)
        if factory_cls is None:
            raise ConfigError(f"{model.__name__} does not declare a __factory__").with_context(
                model=model.__name__
            )
        return factory_cls()

    def make(self, model: type, **overrides: Any) -> Any:
        """Build unsaved record(s) of *model*."""
        model_factory = self._model_factory(model)
        amount = 1 if self._amount is None else self._amount
        records = [model(**model_factory.attributes(**overrides)) for _ in range(amount)]
        return records if self._amount is not None else records[0]

    def create(self, model: type, **overrides: Any) -> Any:
        """Build and persist record(s) of *model*."""
        made = self.make(model, **overrides)
        records = made if isinstance(made, list) else [made]
        for record in records:
            self._query.create(record)
        return made


__all__ = [
    "Factory",
    "ModelFactory",
]
