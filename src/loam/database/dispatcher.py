"""Invokes observer hooks for a lifecycle event."""

from __future__ import annotations

from loam.core.logging import get_logger

from .events import Event, Hook
from .observers import ObserverRegistry

logger = get_logger(__name__)


class EventDispatcher:
    """
    Runs one hook on every observer registered for the event's model.

    Observers run in registration order.  The first exception stops the
    dispatch and propagates unchanged; observers after it are not called.
    Observers that do not define the hook are skipped.
    """

    def __init__(self, registry: ObserverRegistry):
        self._registry = registry

    @property
    def registry(self) -> ObserverRegistry:
        return self._registry

    def dispatch(self, hook: Hook, event: Event) -> None:
        for observer in self._registry.observers_for(event.model):
            method = getattr(observer, hook.value, None)
            if method is None:
                continue
            try:
                method(event)
            except Exception as exc:
                logger.debug(
                    "hook_aborted",
                    hook=hook.value,
                    model=event.model.__name__,
                    observer=type(observer).__name__,
                    error=str(exc),
                )
                raise

    def has_observers(self, model_type: type) -> bool:
        return bool(self._registry.observers_for(model_type))


__all__ = [
    "EventDispatcher",
]
