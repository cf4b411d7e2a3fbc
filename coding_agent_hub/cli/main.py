"""coding-agent-hub command line: run the MCP server or inspect backends."""

import os
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from coding_agent_hub import __version__
from coding_agent_hub.cli_agents.availability import CLIAvailabilityChecker
from coding_agent_hub.cli_agents.backends import BackendDescriptor, resolve_backends
from coding_agent_hub.config import CONFIG_FILE_ENV, get_config_path, get_settings

app = typer.Typer(
    help="MCP server exposing coding agent CLIs as tools",
    add_completion=False,
)
console = Console(stderr=True)


def _use_config_file(config: Optional[Path]) -> None:
    if config is None:
        return
    if not config.is_file():
        typer.echo(f"[ERROR] Config file not found: {config}", err=True)
        raise typer.Exit(1)
    os.environ[CONFIG_FILE_ENV] = str(config)
    get_settings.cache_clear()


def _parse_filter(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [name.strip() for name in value.split(",") if name.strip()]


def _load_backends(
    config: Optional[Path], backends_filter: Optional[str]
) -> List[BackendDescriptor]:
    _use_config_file(config)
    return resolve_backends(get_settings(), _parse_filter(backends_filter))


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"coding-agent-hub {__version__}")
        raise typer.Exit()


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a YAML config file"),
]
BackendsOption = Annotated[
    Optional[str],
    typer.Option(
        "--backends", "-b", help="Comma-separated backends to enable (e.g. claude,gemini)"
    ),
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: ConfigOption = None,
    backends: BackendsOption = None,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Run the hub as a stdio MCP server."""
    if ctx.invoked_subcommand is not None:
        return

    resolved = _load_backends(config, backends)
    enabled = [b for b in resolved if b.enabled]
    if not enabled:
        typer.echo(
            "[ERROR] No backends enabled. Check your configuration or --backends.",
            err=True,
        )
        raise typer.Exit(1)

    # Imported late: building the server pulls in fastmcp
    from coding_agent_hub.logging import setup_logging
    from coding_agent_hub.server import create_hub_server

    setup_logging()
    CLIAvailabilityChecker().log_startup_status(enabled)

    server = create_hub_server(enabled, get_settings().session)
    server.run()


@app.command("backends")
def list_backends(
    config: ConfigOption = None,
    backends: BackendsOption = None,
) -> None:
    """Show resolved backends and whether their CLIs are installed."""
    resolved = _load_backends(config, backends)
    checker = CLIAvailabilityChecker()

    table = Table(title="Coding agent backends")
    table.add_column("Name", style="cyan")
    table.add_column("CLI")
    table.add_column("Default model")
    table.add_column("Timeout (ms)", justify="right")
    table.add_column("Enabled")
    table.add_column("Installed")

    for backend in resolved:
        installed = checker.is_available(backend.command)
        table.add_row(
            backend.name,
            backend.command,
            backend.default_model,
            str(backend.timeout_ms),
            "yes" if backend.enabled else "no",
            "[green]yes[/green]" if installed else "[red]no[/red]",
        )

    Console().print(table)
    missing = [
        b for b in resolved if b.enabled and not checker.is_available(b.command)
    ]
    for backend in missing:
        hint = checker.get_install_hint(backend)
        if hint:
            console.print(f"[yellow]{backend.name}: install with {hint}[/yellow]")

    console.print(f"[dim]Config: {get_config_path()}[/dim]")


if __name__ == "__main__":
    app()
