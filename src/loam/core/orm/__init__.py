"""SQLAlchemy 2.0 layer: declarative base, record mixins, engine and session factory.

Modules
-------
base        Base (declarative base) + Model / SoftDeletes mixins
session     Engine factory, LoamSession, session_factory
"""

from __future__ import annotations

from loam.core.orm.base import Base, Model, SoftDeletes, is_soft_deletable
from loam.core.orm.session import LoamSession, create_engine, session_factory

__all__ = [
    "Base",
    "Model",
    "SoftDeletes",
    "is_soft_deletable",
    "create_engine",
    "LoamSession",
    "session_factory",
]
