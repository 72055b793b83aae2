"""The ORM runtime: connections, queries, transactions and lifecycle observers.

Modules
-------
context       Context -- request values, cancellation, deadline
events        Hook enum + Event handed to observers
observers     Observer base class + ObserverRegistry (``observers`` default)
dispatcher    EventDispatcher -- runs a hook on matching observers
query         Query -- CRUD pipelines and transactions for one connection
factory       Factory / ModelFactory -- seed and test records
connections   ConnectionRegistry -- named queries built from settings
orm           Orm façade + create_orm()
"""

from loam.database.connections import ConnectionRegistry
from loam.database.context import Context
from loam.database.dispatcher import EventDispatcher
from loam.database.events import Event, Hook
from loam.database.factory import Factory, ModelFactory
from loam.database.observers import Observer, ObserverEntry, ObserverRegistry, observers
from loam.database.orm import Orm, create_orm
from loam.database.query import Query

__all__ = [
    "Context",
    "Event",
    "Hook",
    "Observer",
    "ObserverEntry",
    "ObserverRegistry",
    "observers",
    "EventDispatcher",
    "Query",
    "Factory",
    "ModelFactory",
    "ConnectionRegistry",
    "Orm",
    "create_orm",
]
