"""Command-line interface (``loam``) built on Typer + Rich."""
