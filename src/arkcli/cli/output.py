"""Result rendering for CLI commands (JSON or rich table)."""

from __future__ import annotations

import json
from typing import Any, Dict

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

OUTPUT_FORMATS = ("json", "table")

console = Console()
error_console = Console(stderr=True)


def show_output(title: str, payload: Dict[str, Any], output_format: str = "json") -> None:
    """Print a command result to stdout."""
    if output_format == "json":
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(show_header=False, box=box.ROUNDED)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value", style="green")
    for key, value in payload.items():
        table.add_row(str(key), escape(str(value)))
    console.print(Panel(table, title=f"[bold green]{title}", border_style="green"))


def show_error(message: str) -> None:
    error_console.print(f"[bold red]Error:[/] {escape(message)}")
