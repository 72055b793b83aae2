"""Declarative base and record mixins for application models.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
that maps Python built-in types to portable SA column types.

Mixins
------
* **Model**        — integer ``id`` primary key plus ``created_at`` / ``updated_at``.
* **SoftDeletes**  — nullable ``deleted_at``; ``Query.delete`` stamps it
  instead of removing the row.

Timestamps are filled in Python rather than with server defaults so that
every backend produces the same values.
"""

from __future__ import annotations

import datetime

from sqlalchemy import JSON, DateTime, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Shared declarative base for application models.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    * ``datetime.datetime`` → ``DateTime``
    * ``dict``  → ``JSON``
    * ``list``  → ``JSON``
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
        datetime.datetime: DateTime,
        dict: JSON,
        list: JSON,
    }


class Model:
    """Mixin adding an autoincrement ``id`` and creation/update timestamps."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime, nullable=True, default=utcnow
    )
    updated_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime, nullable=True, default=utcnow, onupdate=utcnow
    )


class SoftDeletes:
    """Mixin marking a model as soft-deletable."""

    deleted_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime, nullable=True, default=None, index=True
    )

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None


def is_soft_deletable(model: type) -> bool:
    return isinstance(model, type) and issubclass(model, SoftDeletes)


__all__ = [
    "Base",
    "Model",
    "SoftDeletes",
    "is_soft_deletable",
    "utcnow",
]
