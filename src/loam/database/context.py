"""Request context threaded through queries and observer events.

A ``Context`` carries three things from the caller down to the backend:

* request-scoped values (``with_value`` / ``value``), readable by observers
  through ``event.context``;
* a cancellation flag (``with_cancel`` / ``cancel``);
* a deadline (``with_timeout`` / ``with_deadline``).

Contexts are immutable: every ``with_*`` call returns a child.  A child
observes its parents' cancellation flags, so cancelling a parent cancels
every context derived from it.  Cancellation is cooperative: queries check
the context before each backend call and before commit.

Example::

    ctx = Context.background().with_value("tenant", "acme").with_timeout(2.0)
    orm.with_context(ctx).query().create(invoice)
"""

from __future__ import annotations

import threading
import time
from collections.abc import Hashable, Mapping
from types import MappingProxyType
from typing import Any

from loam.core.errors import ContextCancelledError, DeadlineExceededError


class Context:
    """Immutable request context: values, cancellation and deadline."""

    __slots__ = ("_values", "_flags", "_own_flag", "_deadline")

    def __init__(
        self,
        values: Mapping[Hashable, Any] | None = None,
        *,
        _flags: tuple[threading.Event, ...] = (),
        _own_flag: threading.Event | None = None,
        _deadline: float | None = None,
    ):
        self._values = MappingProxyType(dict(values or {}))
        self._flags = _flags
        self._own_flag = _own_flag
        self._deadline = _deadline

    @classmethod
    def background(cls) -> Context:
        """Empty, never-cancelled context."""
        return _BACKGROUND

    def _child(self, **changes: Any) -> Context:
        kwargs: dict[str, Any] = {
            "values": self._values,
            "_flags": self._flags,
            "_own_flag": None,
            "_deadline": self._deadline,
        }
        kwargs.update(changes)
        return Context(**kwargs)

    # ── Values ────────────────────────────────────────────────────────

    def with_value(self, key: Hashable, value: Any) -> Context:
        return self._child(values={**self._values, key: value})

    def value(self, key: Hashable, default: Any = None) -> Any:
        return self._values.get(key, default)

    @property
    def values(self) -> Mapping[Hashable, Any]:
        return self._values

    # ── Cancellation ──────────────────────────────────────────────────

    def with_cancel(self) -> Context:
        """Child context that can be cancelled with :meth:`cancel`."""
        flag = threading.Event()
        return self._child(_flags=self._flags + (flag,), _own_flag=flag)

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        if self._own_flag is None:
            raise TypeError("context is not cancellable; derive one with with_cancel()")
        self._own_flag.set()

    @property
    def cancelled(self) -> bool:
        return any(flag.is_set() for flag in self._flags)

    # ── Deadline ──────────────────────────────────────────────────────

    def with_deadline(self, deadline: float) -> Context:
        """Child context expiring at *deadline* (a ``time.monotonic()`` value)."""
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return self._child(_deadline=deadline)

    def with_timeout(self, seconds: float) -> Context:
        return self.with_deadline(time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def remaining(self) -> float | None:
        """Seconds until the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    # ── Checks ────────────────────────────────────────────────────────

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def raise_if_done(self) -> None:
        """Raise if the context no longer allows backend calls."""
        if self.cancelled:
            raise ContextCancelledError()
        if self.expired:
            raise DeadlineExceededError()

    def __repr__(self) -> str:
        parts = [f"values={dict(self._values)!r}"]
        if self._flags:
            parts.append(f"cancelled={self.cancelled}")
        if self._deadline is not None:
            parts.append(f"remaining={self.remaining():.3f}s")
        return f"Context({', '.join(parts)})"


_BACKGROUND = Context()


__all__ = [
    "Context",
]
