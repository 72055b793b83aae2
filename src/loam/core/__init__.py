"""Loam Core -- the foundation layer under the ORM runtime.

Architecture::

    Layer 1 -- Errors & Observability
        errors.py          Structured error hierarchy (LoamError, ConfigError, ...)
        logging.py         structlog configuration + get_logger

    Layer 2 -- Configuration & Drivers
        settings.py        DatabaseSettings (pydantic-settings, LOAM_* env vars)
        adapters/          Driver adapters (SQLite, PostgreSQL, MySQL, SQL Server)
        orm/               Declarative base, record mixins, engine/session factory

Nothing in ``loam.core`` imports ``loam.database``; the runtime builds on
this layer, never the other way around.
"""
