"""Lifecycle hook points and the event handed to observers."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect

from .context import Context

if TYPE_CHECKING:
    from .query import Query


class Hook(str, Enum):
    """Named lifecycle callback points, in pipeline order per operation."""

    RETRIEVED = "retrieved"
    SAVING = "saving"
    CREATING = "creating"
    CREATED = "created"
    UPDATING = "updating"
    UPDATED = "updated"
    SAVED = "saved"
    DELETING = "deleting"
    DELETED = "deleted"
    FORCE_DELETING = "force_deleting"
    FORCE_DELETED = "force_deleted"


def column_names(model: type) -> tuple[str, ...]:
    """Mapped column attribute names of a model class."""
    return tuple(attr.key for attr in inspect(model).column_attrs)


class Event:
    """
    Mutable view of one record during one lifecycle operation.

    Attributes are the record's mapped column attribute names.
    ``set_attribute`` writes through to the record, so a change made in a
    "before" hook (``saving``, ``creating``, ``updating``, ``deleting``) is
    what gets persisted.  Originals come from SQLAlchemy's attribute
    history: for a new record they are ``None``.
    """

    def __init__(self, record: Any, *, context: Context, query: Query | None = None):
        self._record = record
        self._model = type(record)
        self._context = context
        self._query = query
        self._columns = column_names(self._model)

    @property
    def model(self) -> type:
        return self._model

    @property
    def record(self) -> Any:
        return self._record

    @property
    def context(self) -> Context:
        return self._context

    @property
    def query(self) -> Query | None:
        """The query running the operation (transaction-scoped inside a transaction)."""
        return self._query

    @property
    def attributes(self) -> dict[str, Any]:
        """Snapshot of the current attribute values."""
        return {name: getattr(self._record, name, None) for name in self._columns}

    def get_attribute(self, name: str) -> Any:
        if name not in self._columns:
            return None
        return getattr(self._record, name, None)

    def set_attribute(self, name: str, value: Any) -> None:
        if name not in self._columns:
            raise AttributeError(f"{self._model.__name__} has no attribute {name!r}")
        setattr(self._record, name, value)

    def get_original(self, name: str, default: Any = None) -> Any:
        """Value the attribute had before this record was last modified."""
        if name not in self._columns:
            return default
        history = inspect(self._record).attrs[name].history
        if history.deleted:
            return history.deleted[0]
        if history.unchanged:
            return history.unchanged[0]
        return default

    def is_dirty(self, *names: str) -> bool:
        """Whether any of *names* (all attributes when empty) has unsaved changes."""
        state = inspect(self._record)
        for name in names or self._columns:
            if name in self._columns and state.attrs[name].history.has_changes():
                return True
        return False

    def is_clean(self, *names: str) -> bool:
        return not self.is_dirty(*names)

    def __repr__(self) -> str:
        return f"Event(model={self._model.__name__}, attributes={self.attributes!r})"


__all__ = [
    "Hook",
    "Event",
    "column_names",
]
