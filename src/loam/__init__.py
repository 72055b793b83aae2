"""
Loam - multi-connection ORM runtime on SQLAlchemy.

Named connections, per-request context, transactions with guaranteed
rollback, and model lifecycle observers::

    from loam import Base, Model, Observer, create_orm

    orm = create_orm()
    orm.observe(User, UserObserver())
    orm.connection("reporting").query().create(User(name="ada"))
"""

__version__ = "0.1.0"

from loam.core.adapters import ConnectionConfig, DriverKind
from loam.core.errors import (
    ConfigError,
    HookError,
    LoamError,
    TransactionError,
    UnknownConnectionError,
)
from loam.core.orm import Base, Model, SoftDeletes
from loam.core.settings import DatabaseSettings
from loam.database import (
    ConnectionRegistry,
    Context,
    Event,
    Hook,
    ModelFactory,
    Observer,
    ObserverRegistry,
    Orm,
    Query,
    create_orm,
    observers,
)

__all__ = [
    "__version__",
    "Base",
    "Model",
    "SoftDeletes",
    "ConnectionConfig",
    "DriverKind",
    "DatabaseSettings",
    "Orm",
    "create_orm",
    "Query",
    "ConnectionRegistry",
    "Context",
    "Event",
    "Hook",
    "Observer",
    "ObserverRegistry",
    "observers",
    "ModelFactory",
    "LoamError",
    "ConfigError",
    "UnknownConnectionError",
    "HookError",
    "TransactionError",
]
