"""Console Output - Rich-styled status lines for CLI commands."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.json import JSON

_console = Console()
_err_console = Console(stderr=True)


def get_console() -> Console:
    """Return the shared stdout console."""
    return _console


def info(message: str) -> None:
    _console.print(f"[cyan]{message}[/cyan]")


def success(message: str) -> None:
    _console.print(f"[green]✓ {message}[/green]")


def warning(message: str) -> None:
    _err_console.print(f"[yellow]{message}[/yellow]")


def error(message: str) -> None:
    _err_console.print(f"[red]Error:[/red] {message}")


def detail(message: str) -> None:
    _console.print(f"[dim]  {message}[/dim]")


def print_json(data: Any) -> None:
    """Pretty-print a JSON-serializable value."""
    _console.print(JSON.from_data(data))
