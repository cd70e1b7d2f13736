"""CLI entry point for the Amp Task Gateway."""

from __future__ import annotations

import asyncio
from typing import Any

import typer
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .core import console
from .core.config import GatewayConfig
from .core.credentials import CredentialResolver
from .core.exceptions import GatewayError
from .core.models import tasks_from_data
from .core.remote import RemoteClient, RemoteEnvelope
from .core.translator import (
    RemoteCall,
    create_task_call,
    delete_task_call,
    get_task_call,
    list_tasks_call,
    update_task_call,
)

ENDPOINTS: list[tuple[str, str, str]] = [
    ("GET", "/api/tasks", "List all tasks"),
    ("GET", "/api/tasks/:id", "Get single task"),
    ("POST", "/api/tasks", "Create new task"),
    ("PUT", "/api/tasks/:id", "Update task"),
    ("DELETE", "/api/tasks/:id", "Delete task"),
    ("GET", "/api/health", "Health check"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.get_console().print(f"Amp Task Gateway v{__version__}")
        raise typer.Exit(0)


app = typer.Typer(
    name="amp-tasks",
    help="""Local REST gateway for Amp tasks.

Runs a small HTTP server that exposes your Amp tasks as REST endpoints
(and a browser UI), or talks to the Amp API directly from the shell.

Quick start:
  amp-tasks serve
  amp-tasks list --status open
  amp-tasks create "Write the release notes"
""",
    add_completion=False,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Amp Task Gateway - REST access to Amp tasks."""
    pass


# =============================================================================
# Helpers
# =============================================================================


def _run_call(call: RemoteCall) -> RemoteEnvelope:
    """Execute a translated call against the remote, exiting 1 on failure."""
    client = RemoteClient.from_config(GatewayConfig.from_env())
    try:
        return asyncio.run(client.call(call.method, call.params))
    except GatewayError as e:
        console.error(e.message)
        if e.details:
            console.detail(e.details)
        raise typer.Exit(1) from None


def _task_body(
    title: str | None = None,
    description: str | None = None,
    status: str | None = None,
    repo_url: str | None = None,
    depends_on: list[str] | None = None,
    parent_id: str | None = None,
) -> dict[str, Any]:
    """Build a request body from CLI options, leaving out unset ones."""
    values = {
        "title": title,
        "description": description,
        "status": status,
        "repoURL": repo_url,
        "dependsOn": depends_on or None,
        "parentID": parent_id,
    }
    return {key: value for key, value in values.items() if value is not None}


def _print_tasks(envelope: RemoteEnvelope) -> None:
    tasks = tasks_from_data(envelope.data)
    if not tasks:
        console.detail("No tasks.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Title")
    table.add_column("Depends On", style="dim")
    table.add_column("Repo", style="dim")
    for task in tasks:
        table.add_row(
            task.id,
            "deleted" if task.is_deleted else task.status_value,
            task.title,
            ", ".join(task.dependsOn),
            task.repoURL or "",
        )
    console.get_console().print(table)


def _print_result(envelope: RemoteEnvelope, as_json: bool) -> None:
    if as_json:
        console.print_json(envelope.raw)
    else:
        _print_tasks(envelope)


# =============================================================================
# Server
# =============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(
        None, "--host", help="Interface to bind (default: HOST or 127.0.0.1)"
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port to listen on (default: PORT or 3847)"
    ),
    static_dir: str | None = typer.Option(
        None, "--static-dir", help="Directory served as the front-end"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (DEBUG, INFO, ...)"),
) -> None:
    """Start the local REST gateway.

    Examples:
        amp-tasks serve
        amp-tasks serve --port 8080
    """
    from .api.server import run_server

    try:
        config = GatewayConfig.from_env(
            host=host, port=port, static_dir=static_dir, log_level=log_level
        )
    except ValidationError as e:
        console.error("Invalid server options")
        for problem in e.errors():
            console.detail(f"{'.'.join(str(p) for p in problem['loc'])}: {problem['msg']}")
        raise typer.Exit(1) from None

    table = Table(show_header=False, box=None, padding=(0, 2))
    for verb, path, summary in ENDPOINTS:
        table.add_row(f"[bold]{verb}[/bold]", path, f"[dim]{summary}[/dim]")
    display_host = "localhost" if config.host in ("127.0.0.1", "0.0.0.0") else config.host
    out = console.get_console()
    out.print(
        Panel(
            table,
            title="[bold blue]Amp Task Management[/bold blue]",
            subtitle=f"http://{display_host}:{config.port}  ·  Ctrl+C to stop",
        )
    )

    if not config.static_dir.is_dir():
        console.warning(
            f"Static directory {config.static_dir} not found; only /api routes will work"
        )

    try:
        run_server(config)
    except KeyboardInterrupt:
        pass
    console.info("Shutting down...")


# =============================================================================
# Task Commands
# =============================================================================


@app.command("list")
def list_command(
    limit: int = typer.Option(100, "--limit", "-n", help="Maximum number of tasks"),
    status: str | None = typer.Option(None, "--status", "-s", help="Only tasks with this status"),
    repo_url: str | None = typer.Option(None, "--repo-url", help="Only tasks for this repository"),
    ready: bool = typer.Option(False, "--ready", help="Only tasks whose dependencies are done"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw API response"),
) -> None:
    """List tasks."""
    call = list_tasks_call(
        limit=str(limit),
        status=status,
        repo_url=repo_url,
        ready="true" if ready else None,
    )
    _print_result(_run_call(call), as_json)


@app.command("get")
def get_command(
    task_id: str = typer.Argument(..., help="Task ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw API response"),
) -> None:
    """Show a single task."""
    _print_result(_run_call(get_task_call(task_id)), as_json)


@app.command("create")
def create_command(
    title: str = typer.Argument(..., help="Task title"),
    description: str | None = typer.Option(None, "--description", "-d", help="Task description"),
    status: str | None = typer.Option(
        None, "--status", "-s", help="Initial status (default: open)"
    ),
    repo_url: str | None = typer.Option(None, "--repo-url", help="Repository URL"),
    depends_on: list[str] | None = typer.Option(
        None, "--depends-on", help="ID of a task this one depends on (repeatable)"
    ),
    parent_id: str | None = typer.Option(None, "--parent-id", help="Parent task ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw API response"),
) -> None:
    """Create a task."""
    body = _task_body(title, description, status, repo_url, depends_on, parent_id)
    envelope = _run_call(create_task_call(body))
    console.success("Task created")
    _print_result(envelope, as_json)


@app.command("update")
def update_command(
    task_id: str = typer.Argument(..., help="Task ID"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    status: str | None = typer.Option(None, "--status", "-s", help="New status"),
    repo_url: str | None = typer.Option(None, "--repo-url", help="New repository URL"),
    depends_on: list[str] | None = typer.Option(
        None, "--depends-on", help="Replace dependencies (repeatable)"
    ),
    parent_id: str | None = typer.Option(None, "--parent-id", help="New parent task ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw API response"),
) -> None:
    """Update fields of a task. Only the options given are sent."""
    body = _task_body(title, description, status, repo_url, depends_on, parent_id)
    envelope = _run_call(update_task_call(task_id, body))
    console.success(f"Task {task_id} updated")
    _print_result(envelope, as_json)


@app.command("delete")
def delete_command(
    task_id: str = typer.Argument(..., help="Task ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw API response"),
) -> None:
    """Delete a task (the remote keeps it as soft-deleted)."""
    envelope = _run_call(delete_task_call(task_id))
    console.success(f"Task {task_id} deleted")
    if as_json:
        console.print_json(envelope.raw)


# =============================================================================
# Diagnostics
# =============================================================================


@app.command()
def check() -> None:
    """Check that an API key can be found. The key itself is never printed."""
    config = GatewayConfig.from_env()
    resolver = CredentialResolver.from_config(config)
    try:
        resolved = resolver.resolve_with_source()
    except GatewayError as e:
        console.error(e.message)
        if e.details:
            console.detail(e.details)
        raise typer.Exit(1) from None

    sources = {
        "service_key": f"{config.secrets_path} (service key)",
        "generic_key": f"{config.secrets_path} (apiKey)",
        "environment": f"${config.api_key_env}",
    }
    console.success(f"API key found in {sources[resolved.source.value]}")
    console.detail(f"Remote API: {config.api_base_url}")
