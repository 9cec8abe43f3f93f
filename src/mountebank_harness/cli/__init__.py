"""
mountebank-harness CLI.

- imposters.py: imposter inspection and management commands
"""

from __future__ import annotations

import platform

import typer

from mountebank_harness._version import get_version
from mountebank_harness.cli.imposters import imposters_app

app = typer.Typer(
    help="mountebank-harness – imposter lifecycle for test suites",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"mountebank-harness {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
) -> None:
    """mountebank-harness CLI main callback for global options."""
    pass


app.add_typer(imposters_app, name="imposters")


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["app", "imposters_app", "main", "version_callback"]
