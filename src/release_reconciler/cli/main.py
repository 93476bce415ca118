"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from release_reconciler import __version__
from release_reconciler.cli.commands.release import register_release_commands
from release_reconciler.logging.config import configure_logging, get_logger

app = typer.Typer(
    name="release-reconciler",
    help="Reconcile helm releases against a declared state.",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"release-reconciler version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (defaults to ~/.config/release-reconciler/config.yaml).",
        dir_okay=False,
    ),
) -> None:
    """Release reconciler - converge helm releases to a declared state."""
    configure_logging(verbose=verbose, debug=debug)
    get_logger(__name__).debug("cli_started", command=ctx.invoked_subcommand)
    ctx.obj = {"config_path": config}


register_release_commands(app)


if __name__ == "__main__":
    app()
