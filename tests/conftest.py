"""
Shared pytest fixtures for loam tests.

This module provides:
- Registry/settings cleanup fixtures for test isolation
- A multi-connection ``Orm`` backed by file SQLite databases in ``tmp_path``

Every named connection is its own database file, so the suite exercises
connection routing the same way separate backends would.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from loam import Base, DatabaseSettings, Orm, create_orm
from loam.core.settings import clear_settings_cache
from loam.database import observers

# Registers the test models on Base.metadata
from tests._support import models  # noqa: F401

CONNECTIONS = ["sqlite", "reporting", "archive"]


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_registries() -> Iterator[None]:
    """Reset the default observer registry and cached settings around each test."""
    observers.clear()
    clear_settings_cache()
    yield
    observers.clear()
    clear_settings_cache()
    structlog.reset_defaults()


# =============================================================================
# ORM Fixtures
# =============================================================================


@pytest.fixture
def connection_names() -> list[str]:
    return list(CONNECTIONS)


@pytest.fixture
def settings(tmp_path: Path) -> DatabaseSettings:
    return DatabaseSettings(
        default="sqlite",
        connections={
            name: {"driver": "sqlite", "path": str(tmp_path / f"{name}.db")} for name in CONNECTIONS
        },
    )


@pytest.fixture
def orm(settings: DatabaseSettings) -> Iterator[Orm]:
    """Façade over every test connection, with tables created on each."""
    instance = create_orm(settings)
    for _name, query in instance.connections.items():
        Base.metadata.create_all(query.db())
    yield instance
    instance.close()
