"""Database settings for the loam runtime.

Connections are configured in one place and validated at startup, so a
misspelled default connection fails before the first query.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at query time
    - **Environment-driven:** Reads ``LOAM_*`` env vars and ``.env`` files
    - **Nested:** ``LOAM_CONNECTIONS__REPORTING__DRIVER=postgresql``
    - **Sensible defaults:** One in-memory SQLite connection out of the box

Examples:
    >>> settings = DatabaseSettings(
    ...     default="app",
    ...     connections={
    ...         "app": {"driver": "postgresql", "database": "app", "username": "app"},
    ...         "cache": {"driver": "sqlite", "path": "cache.db"},
    ...     },
    ... )
    >>> settings.default_connection.driver
    <DriverKind.POSTGRESQL: 'postgresql'>

Tags:
    settings, configuration, pydantic, environment, loam-core

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from loam.core.adapters.types import ConnectionConfig, DriverKind


def _default_connections() -> dict[str, ConnectionConfig]:
    return {"sqlite": ConnectionConfig(driver=DriverKind.SQLITE)}


class DatabaseSettings(BaseSettings):
    """Connection definitions and the name of the default connection.

    Fields
    ──────
    default      : Connection used when no name is given
    connections  : Named connection definitions
    log_level    : Structlog log level
    log_format   : ``json`` or ``console``
    """

    model_config = SettingsConfigDict(
        env_prefix="LOAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ── Connections ──────────────────────────────────────────────
    default: str = Field(default="sqlite", description="Name of the default connection")
    connections: dict[str, ConnectionConfig] = Field(default_factory=_default_connections)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @model_validator(mode="after")
    def _validate_default(self) -> DatabaseSettings:
        if not self.connections:
            raise ValueError("at least one connection must be configured")
        if self.default not in self.connections:
            raise ValueError(
                f"default connection {self.default!r} is not configured "
                f"(configured: {', '.join(sorted(self.connections))})"
            )
        return self

    @property
    def default_connection(self) -> ConnectionConfig:
        return self.connections[self.default]


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, DatabaseSettings] = {}


def get_settings(*, _force_reload: bool = False) -> DatabaseSettings:
    """Load, validate, and cache a :class:`DatabaseSettings` instance."""
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = DatabaseSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings (tests, config reload)."""
    _settings_cache.clear()


__all__ = [
    "DatabaseSettings",
    "get_settings",
    "clear_settings_cache",
]
