"""CLI test fixtures."""

from __future__ import annotations

import json
import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Replace the CLI's logging setup with an uncached WARNING filter."""
    calls = []

    def fake_configure_logging(**kwargs):
        calls.append(kwargs)
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))

    monkeypatch.setattr("loam.cli.app.configure_logging", fake_configure_logging)
    return calls


@pytest.fixture
def loam_env(monkeypatch, tmp_path):
    """Point LOAM_* settings at two file databases and one unreachable one."""

    def configure(*, broken: bool = False) -> dict:
        connections = {
            "main": {"driver": "sqlite", "path": str(tmp_path / "main.db")},
            "reporting": {"driver": "sqlite", "path": str(tmp_path / "reporting.db")},
        }
        if broken:
            connections["broken"] = {"driver": "sqlite", "path": str(tmp_path / "no" / "such" / "dir.db")}
        monkeypatch.setenv("LOAM_DEFAULT", "main")
        monkeypatch.setenv("LOAM_CONNECTIONS", json.dumps(connections))
        return connections

    return configure
