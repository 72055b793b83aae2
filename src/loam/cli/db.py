"""
CLI: ``loam db`` — connection inspection commands.
"""

from __future__ import annotations

import typer

from loam.cli.utils import fail, load_settings, output_rows
from loam.core.errors import DatabaseConnectionError, LoamError

app = typer.Typer(no_args_is_help=True)


@app.command()
def connections(
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List configured connections."""
    from loam.core.adapters import get_driver

    settings = load_settings()
    rows = []
    for name, config in settings.connections.items():
        adapter = get_driver(config)
        rows.append(
            {
                "name": name,
                "driver": adapter.driver.value,
                "default": name == settings.default,
                "url": adapter.url().render_as_string(hide_password=True),
            }
        )
    output_rows(rows, as_json=json_out, title="Connections")


@app.command()
def ping(
    name: str | None = typer.Argument(None, help="Connection to check (all when omitted)"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Check that connections can reach their backend."""
    from loam.database.orm import create_orm

    settings = load_settings()
    try:
        orm = create_orm(settings)
    except LoamError as exc:
        fail(exc)

    rows = []
    try:
        names = [orm.connection(name).connection_name] if name else orm.connections.names()
        for conn_name in names:
            try:
                orm.connection(conn_name).db()
            except DatabaseConnectionError as exc:
                rows.append({"name": conn_name, "ok": False, "error": str(exc.cause or exc)})
            else:
                rows.append({"name": conn_name, "ok": True, "error": ""})
    except LoamError as exc:
        fail(exc)
    finally:
        orm.close()

    output_rows(rows, as_json=json_out, title="Ping")
    if not all(row["ok"] for row in rows):
        raise typer.Exit(code=1)
