"""
CLI utility helpers — output formatting and settings loading.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from loam.core.errors import LoamError
from loam.core.settings import DatabaseSettings, get_settings

console = Console()
err_console = Console(stderr=True)


# ── Settings helper ──────────────────────────────────────────────────────


def load_settings() -> DatabaseSettings:
    """Load settings from the ``LOAM_*`` environment, exiting 1 when invalid."""
    try:
        return get_settings()
    except ValidationError as exc:
        err_console.print(f"[bold red]Invalid configuration[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc


def fail(error: LoamError) -> NoReturn:
    """Print a loam error and exit 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def output_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render a list of dicts as JSON or a Rich table."""
    if as_json:
        typer.echo(json.dumps(rows, default=str, indent=2))
        return

    if not rows:
        console.print("[dim]No items.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)
