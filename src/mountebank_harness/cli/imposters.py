"""
CLI commands for imposter management.

Provides the ``mb-harness imposters`` command group for inspecting the
harness configuration and provisioning, wiping, or saving imposters on a
mountebank server outside of a test run.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from mountebank_harness.core.errors import HarnessError
from mountebank_harness.core.manifest import HarnessConfig, find_config, load_config
from mountebank_harness.testing.lifecycle import ImposterLifecycle, create_client

imposters_app = typer.Typer(
    help="Manage the imposters configured for the test suite",
    no_args_is_help=True,
)

console = Console()

_CONFIG_HELP = "mountebank.toml or pyproject.toml; discovered from the current directory by default"


def _load(config_path: Path | None, host: str | None = None, port: int | None = None) -> HarnessConfig:
    path = config_path or find_config()
    if path is None:
        typer.echo("Error: no mountebank.toml or [tool.mountebank] table found", err=True)
        raise typer.Exit(code=1)
    try:
        return load_config(path).with_overrides(host=host, port=port)
    except HarnessError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@imposters_app.command(name="list")
def list_imposters(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
) -> None:
    """List the configured imposters."""
    config = _load(config_path)

    if not config.imposters:
        typer.echo("No imposters configured.")
        return

    table = Table(title=f"Imposters ({config.base_url})")
    table.add_column("Alias", style="cyan")
    table.add_column("Contract")
    table.add_column("Mock", justify="center")
    table.add_column("Save")
    for alias, imposter in config.imposters.items():
        table.add_row(
            alias,
            str(imposter.contract),
            "yes" if imposter.volatile else "no",
            str(imposter.save) if imposter.save else "-",
        )
    console.print(table)


@imposters_app.command(name="provision")
def provision_imposters(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
    host: str | None = typer.Option(None, "--host", help="Override the mountebank host"),
    port: int | None = typer.Option(None, "--port", "-p", help="Override the management port"),
) -> None:
    """Delete every imposter on the server and create the configured ones."""
    config = _load(config_path, host, port)
    lifecycle = ImposterLifecycle(config)
    try:
        ports = lifecycle.provision_all()
    except HarnessError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        lifecycle.close()

    typer.echo(f"Provisioned {len(ports)} imposter(s) on {config.base_url}:")
    for alias, imposter_port in ports.items():
        typer.echo(f"  • {alias}: {imposter_port}")


@imposters_app.command(name="wipe")
def wipe_imposters(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
    host: str | None = typer.Option(None, "--host", help="Override the mountebank host"),
    port: int | None = typer.Option(None, "--port", "-p", help="Override the management port"),
) -> None:
    """Delete every imposter on the server."""
    config = _load(config_path, host, port)
    try:
        with create_client(config) as client:
            client.delete_imposters()
    except HarnessError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Deleted all imposters on {config.base_url}")


@imposters_app.command(name="save")
def save_imposter(
    alias: str = typer.Argument(..., help="Configured imposter alias"),
    imposter_port: int = typer.Argument(..., help="Port the imposter is running on"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Defaults to the alias's save path"),
    replayable: bool = typer.Option(False, "--replayable", help="Drop recorded requests"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
) -> None:
    """Save the current contract of a running imposter."""
    config = _load(config_path)
    imposter = config.imposter(alias)
    if imposter is None:
        typer.echo(f"Error: imposter '{alias}' is not configured", err=True)
        raise typer.Exit(code=1)

    destination = output or imposter.save
    if destination is None:
        typer.echo(f"Error: no --output given and '{alias}' has no save path", err=True)
        raise typer.Exit(code=1)

    try:
        with create_client(config) as client:
            path = client.retrieve_and_save_contract(imposter_port, destination, replayable=replayable)
    except (HarnessError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Saved '{alias}' contract to {path}")
