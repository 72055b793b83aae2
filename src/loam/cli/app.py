"""
Root Typer application for the loam CLI.

Sub-command groups live in their own modules and are registered below.
"""

from __future__ import annotations

import typer
from typer import Typer

from loam.core.logging import configure_logging

app = Typer(
    name="loam",
    help="loam — multi-connection ORM runtime.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("loam-orm")
        except PackageNotFoundError:
            from loam import __version__ as v
        typer.echo(f"loam {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Runtime log level."),
) -> None:
    """loam CLI — inspect and check configured database connections."""
    configure_logging(level=log_level, json_format=False)


# ── Sub-command registration ─────────────────────────────────────────────

from loam.cli.db import app as db_app  # noqa: E402

app.add_typer(db_app, name="db", help="Database connections.")
