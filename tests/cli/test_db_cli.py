"""Tests for the ``loam`` CLI and its ``db`` sub-commands."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from loam.cli.app import app

runner = CliRunner()


class TestRootApp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "loam" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("loam ")

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)

    def test_db_help(self):
        result = runner.invoke(app, ["db", "--help"])
        assert result.exit_code == 0
        assert "connections" in result.output
        assert "ping" in result.output

    def test_log_level_passed_to_logging(self, quiet_logging, loam_env):
        loam_env()
        runner.invoke(app, ["--log-level", "DEBUG", "db", "connections", "--json"])
        assert quiet_logging == [{"level": "DEBUG", "json_format": False}]


class TestConnections:
    def test_json(self, loam_env):
        loam_env()
        result = runner.invoke(app, ["db", "connections", "--json"])

        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [row["name"] for row in rows] == ["main", "reporting"]
        assert [row["default"] for row in rows] == [True, False]
        assert {row["driver"] for row in rows} == {"sqlite"}
        assert rows[0]["url"].endswith("main.db")

    def test_table(self, loam_env):
        loam_env()
        result = runner.invoke(app, ["db", "connections"])
        assert result.exit_code == 0
        assert "main" in result.output
        assert "reporting" in result.output

    def test_password_redacted(self, monkeypatch):
        monkeypatch.setenv("LOAM_DEFAULT", "pg")
        monkeypatch.setenv(
            "LOAM_CONNECTIONS",
            json.dumps({"pg": {"driver": "postgresql", "host": "db", "username": "u", "password": "s3cret"}}),
        )
        result = runner.invoke(app, ["db", "connections", "--json"])
        assert result.exit_code == 0
        assert "s3cret" not in result.stdout
        assert json.loads(result.stdout)[0]["url"].startswith("postgresql+psycopg://u:***@db")

    def test_invalid_settings(self, monkeypatch):
        monkeypatch.setenv("LOAM_DEFAULT", "missing")
        result = runner.invoke(app, ["db", "connections"])
        assert result.exit_code == 1


class TestPing:
    def test_all_ok(self, loam_env):
        loam_env()
        result = runner.invoke(app, ["db", "ping", "--json"])

        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [(row["name"], row["ok"]) for row in rows] == [("main", True), ("reporting", True)]

    def test_single_connection(self, loam_env):
        loam_env()
        result = runner.invoke(app, ["db", "ping", "reporting", "--json"])
        assert result.exit_code == 0
        assert [row["name"] for row in json.loads(result.stdout)] == ["reporting"]

    def test_unreachable_exits_1(self, loam_env):
        loam_env(broken=True)
        result = runner.invoke(app, ["db", "ping", "--json"])

        assert result.exit_code == 1
        rows = {row["name"]: row for row in json.loads(result.stdout)}
        assert rows["main"]["ok"] is True
        assert rows["broken"]["ok"] is False
        assert rows["broken"]["error"]

    def test_unknown_connection(self, loam_env):
        loam_env()
        result = runner.invoke(app, ["db", "ping", "nope"])
        assert result.exit_code == 1
        assert "Unknown database connection" in result.output

