"""Tests for ``loam.core.logging``: structlog configuration and context helpers."""

from __future__ import annotations

import structlog
from structlog.testing import capture_logs

from loam.core.logging import (
    LogContext,
    _add_service_metadata,
    _elasticsearch_compatible,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestProcessors:
    def test_service_metadata(self):
        assert _add_service_metadata(None, "info", {})["service.name"] == "loam"

    def test_elasticsearch_fields(self):
        event = _elasticsearch_compatible(None, "info", {"timestamp": "t", "level": "info", "event": "x"})
        assert event == {"@timestamp": "t", "log.level": "info", "event": "x"}


class TestConfigure:
    def test_configures_structlog(self):
        configure_logging(level="WARNING", json_format=True, service="loam-test")
        assert structlog.is_configured()

    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        get_logger("loam.test.json").info("connection_registered", connection="reporting")

        out = capsys.readouterr().err
        assert '"event": "connection_registered"' in out
        assert '"log.level": "info"' in out
        assert '"connection": "reporting"' in out

    def test_level_filters(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("loam.test.filter")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().err
        assert "hidden" not in out
        assert "shown" in out


class TestContextHelpers:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_bind_and_unbind(self):
        bind_context(request_id="r-1")
        assert structlog.contextvars.get_contextvars() == {"request_id": "r-1"}
        unbind_context("request_id")
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_scoped(self):
        with LogContext(connection="archive"):
            assert structlog.contextvars.get_contextvars()["connection"] == "archive"
        assert "connection" not in structlog.contextvars.get_contextvars()

    def test_get_logger_emits(self):
        with capture_logs() as logs:
            get_logger("loam.test.capture").info("observer_registered", model="User")
        assert logs == [{"event": "observer_registered", "model": "User", "log_level": "info"}]
