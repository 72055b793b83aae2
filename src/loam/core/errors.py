"""
Structured error types for the loam ORM runtime.

Only the failures the runtime itself detects get a loam type. Errors raised
by observer hooks and by the SQLAlchemy driver layer are never wrapped: they
reach the caller as the exact object raised at the failure point, so callers
can tell a hook abort from a backend failure by inspecting identity.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                         LoamError                             │
        │         (category, retryable, retry_after, context, cause)   │
        ├──────────────────────────────────────────────────────────────┤
        │  TransientError         ConfigError          ContextError     │
        │  (retryable=True)       (CONFIG)             (CONTEXT)        │
        │       │                      │                    │           │
        │  DatabaseConnectionError  UnknownConnectionError  Cancelled   │
        │                           UnknownDriverError      Deadline    │
        │                           InvalidConfigError                  │
        │                                                               │
        │  HookError              TransactionError     RecordStateError │
        │  (HOOK)                 (TRANSACTION)        (VALIDATION)     │
        └──────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Wrap a hook exception in HookError before re-raising
    ✅ DO: Let the hook's exception propagate unchanged

    ❌ DON'T: Retry ConfigError - a bad connection name is a programmer error
    ✅ DO: Fail fast and fix the configuration

Usage:
    from loam.core.errors import HookError

    class UserObserver(Observer):
        def creating(self, event):
            if not event.get_attribute("name"):
                raise HookError("name is required").with_context(hook="creating")

Tags:
    error-handling, exception-hierarchy, loam-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        DATABASE: Backend unreachable, pool exhaustion
        CONFIG: Unknown connection or driver, invalid settings
        HOOK: Observer aborted an operation
        TRANSACTION: Transaction misuse
        CONTEXT: Cancelled context or exceeded deadline
        VALIDATION: Invalid attribute names or values
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    DATABASE = "DATABASE"
    CONFIG = "CONFIG"
    HOOK = "HOOK"
    TRANSACTION = "TRANSACTION"
    CONTEXT = "CONTEXT"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error for logging.

    Attributes:
        connection: Name of the connection the operation ran against
        driver: Driver kind of that connection
        model: Model class name
        hook: Hook name when raised from an observer
        operation: Query operation (create, update, find, ...)
        metadata: Additional key-value pairs
    """

    connection: str | None = None
    driver: str | None = None
    model: str | None = None
    hook: str | None = None
    operation: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["connection", "driver", "model", "hook", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class LoamError(Exception):
    """
    Base exception for all loam runtime errors.

    Subclasses set ``default_category`` and ``default_retryable`` so callers
    rarely pass them explicitly.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: int | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> LoamError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("bad pool size").with_context(connection="reporting")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS
# =============================================================================


class TransientError(LoamError):
    """Temporary error that may succeed on retry."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True


class DatabaseConnectionError(TransientError):
    """The backend behind a connection could not be reached."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(LoamError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class UnknownConnectionError(ConfigError):
    """A connection name that is not configured was requested."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = sorted(available or [])
        message = f"Unknown database connection: {name!r}"
        if self.available:
            message += f" (configured: {', '.join(self.available)})"
        super().__init__(message, context=ErrorContext(connection=name))


class UnknownDriverError(ConfigError):
    """No adapter is registered for the requested driver kind."""

    def __init__(self, driver: str):
        self.driver = driver
        super().__init__(
            f"Unknown database driver: {driver}",
            context=ErrorContext(driver=driver),
        )


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================


class HookError(LoamError):
    """
    Raised by observers to abort an operation.

    The runtime never constructs this type itself; it is offered to
    application code so hook aborts can be told apart from backend failures.
    """

    default_category = ErrorCategory.HOOK
    default_retryable = False


class TransactionError(LoamError):
    """A transaction-scoped query was used outside its valid lifetime."""

    default_category = ErrorCategory.TRANSACTION
    default_retryable = False


class RecordStateError(LoamError):
    """The record is not in a state the operation accepts (e.g. updating an unsaved record)."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


# =============================================================================
# CONTEXT ERRORS
# =============================================================================


class ContextError(LoamError):
    """The request context no longer allows backend calls."""

    default_category = ErrorCategory.CONTEXT
    default_retryable = False


class ContextCancelledError(ContextError):
    """The context was cancelled before the backend call."""

    def __init__(self, message: str = "context cancelled", **kwargs: Any):
        super().__init__(message, **kwargs)


class DeadlineExceededError(ContextError):
    """The context deadline passed before the backend call."""

    def __init__(self, message: str = "context deadline exceeded", **kwargs: Any):
        super().__init__(message, **kwargs)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, LoamError):
        return error.retryable
    retryable_types = (
        ConnectionError,
        ConnectionResetError,
        ConnectionRefusedError,
        BrokenPipeError,
    )
    return isinstance(error, retryable_types)


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, LoamError):
        return error.category
    from sqlalchemy.exc import SQLAlchemyError

    if isinstance(error, (SQLAlchemyError, ConnectionError)):
        return ErrorCategory.DATABASE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "LoamError",
    "TransientError",
    "DatabaseConnectionError",
    "ConfigError",
    "UnknownConnectionError",
    "UnknownDriverError",
    "InvalidConfigError",
    "HookError",
    "TransactionError",
    "RecordStateError",
    "ContextError",
    "ContextCancelledError",
    "DeadlineExceededError",
    "is_retryable",
    "categorize_error",
]
