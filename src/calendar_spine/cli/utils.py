"""
CLI utility helpers: output formatting.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def output_json(payload: Any) -> None:
    """Write a JSON document to stdout (plain, so it can be piped and parsed)."""
    typer.echo(json.dumps(payload, indent=2, default=str))


def fail(message: str, *, code: str = "ERROR") -> None:
    """Print an error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({code}): {message}")
    raise typer.Exit(code=1)


def print_table(rows: list[dict[str, Any]], *, title: str = "", empty: str = "No items.") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print(f"[dim]{empty}[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for column in rows[0]:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*("" if value is None else str(value) for value in row.values()))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for key, value in data.items():
        console.print(f"  [cyan]{key}[/cyan]: {value}")
