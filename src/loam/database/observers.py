"""Observer registration.

Manifesto:
    Observers are registered once while the application boots and read on
    every create, update, delete and load.  The registry is an explicit
    object handed to each connection's dispatcher; ``observers`` is the
    process-wide default instance the façade uses unless told otherwise.

    Registration is an append-only log, not a map: registering two
    observers for the same model makes both fire, in registration order.

Features:
    - ``Observer`` base class with eleven no-op hooks
    - ``ObserverRegistry.observe()`` accepts a model class or an instance
    - ``observers_for()`` matches on exact class identity

Tags:
    loam, observers, lifecycle, registry

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from loam.core.logging import get_logger

from .events import Event

logger = get_logger(__name__)


class Observer:
    """
    Lifecycle hooks for one model type.

    Override the hooks you need.  Raising from any hook aborts the
    operation and the exception reaches the caller unchanged; raising from
    a "before" hook means nothing is written.

    Example::

        class UserObserver(Observer):
            def creating(self, event: Event) -> None:
                tenant = event.context.value("tenant")
                if tenant is not None:
                    event.set_attribute("tenant", tenant)
    """

    def retrieved(self, event: Event) -> None:
        pass

    def creating(self, event: Event) -> None:
        pass

    def created(self, event: Event) -> None:
        pass

    def updating(self, event: Event) -> None:
        pass

    def updated(self, event: Event) -> None:
        pass

    def saving(self, event: Event) -> None:
        pass

    def saved(self, event: Event) -> None:
        pass

    def deleting(self, event: Event) -> None:
        pass

    def deleted(self, event: Event) -> None:
        pass

    def force_deleting(self, event: Event) -> None:
        pass

    def force_deleted(self, event: Event) -> None:
        pass


@dataclass(frozen=True)
class ObserverEntry:
    """One registration: a model class and the observer watching it."""

    model: type
    observer: Any


class ObserverRegistry:
    """
    Append-ordered log of observer registrations.

    Writes replace the entry tuple under a lock; reads scan the current
    tuple without locking.
    """

    def __init__(self) -> None:
        self._entries: tuple[ObserverEntry, ...] = ()
        self._lock = threading.Lock()

    def observe(self, model: Any, observer: Any) -> None:
        """Register *observer* for *model* (a class, or an instance of it)."""
        model_type = model if isinstance(model, type) else type(model)
        with self._lock:
            self._entries = self._entries + (ObserverEntry(model_type, observer),)
        logger.debug(
            "observer_registered",
            model=model_type.__name__,
            observer=type(observer).__name__,
        )

    def observers_for(self, model_type: type) -> list[Any]:
        """Observers registered for exactly *model_type*, in registration order."""
        return [entry.observer for entry in self._entries if entry.model is model_type]

    @property
    def entries(self) -> tuple[ObserverEntry, ...]:
        return self._entries

    def clear(self) -> None:
        """Drop every registration."""
        with self._lock:
            self._entries = ()

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide default registry
observers = ObserverRegistry()


__all__ = [
    "Observer",
    "ObserverEntry",
    "ObserverRegistry",
    "observers",
]
