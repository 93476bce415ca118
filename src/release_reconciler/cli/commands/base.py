"""Base utilities for release CLI commands.

Provides shared options, record loading, reconciler construction and
error handling for all release commands.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
import yaml
from rich.console import Console

from release_reconciler.core.config.models import load_config
from release_reconciler.integrations.helm.exceptions import (
    CommandError,
    DeploymentUnsuccessfulError,
    NormalizationError,
    NotExistError,
    ParseError,
    ReconcilerError,
    ValidationError,
)
from release_reconciler.services.reconciler import ReleaseReconciler
from release_reconciler.services.resource import ReleaseResource

# Shared console instance
console = Console()

EXIT_NOT_FOUND = 2


# =============================================================================
# Common Typer Argument Annotations
# =============================================================================

RecordFileArgument = Annotated[
    Path,
    typer.Argument(
        help="YAML or JSON file holding the release record",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]

ReleaseNameArgument = Annotated[
    str,
    typer.Argument(help="Release name"),
]


# =============================================================================
# Helpers
# =============================================================================


def config_path_from(ctx: typer.Context) -> Path | None:
    """Return the --config path given to the top-level command, if any."""
    obj = ctx.find_root().obj or {}
    path: Path | None = obj.get("config_path")
    return path


def get_reconciler(ctx: typer.Context) -> ReleaseReconciler:
    """Build a reconciler from the configuration file and environment.

    Raises:
        ValidationError: If the configuration is invalid.
    """
    return ReleaseReconciler(load_config(config_path_from(ctx)))


def get_resource(ctx: typer.Context) -> ReleaseResource:
    """Build a release resource over a fresh reconciler."""
    return ReleaseResource(get_reconciler(ctx))


def load_record(path: Path) -> dict[str, Any]:
    """Read a release record from a YAML or JSON file.

    Raises:
        typer.BadParameter: If the file is not a YAML mapping.
    """
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise typer.BadParameter(f"{path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} must contain a mapping")
    return data


def print_record(record: dict[str, Any]) -> None:
    """Print a record as JSON on stdout."""
    typer.echo(json.dumps(record, indent=2, sort_keys=True))


def handle_reconciler_error(error: ReconcilerError) -> NoReturn:
    """Handle reconciler errors with user-friendly output.

    Args:
        error: The error to handle.

    Raises:
        typer.Exit: Code 2 for a missing release, 1 otherwise.
    """
    if isinstance(error, NotExistError):
        console.print("[yellow]Release not found[/yellow]")
        console.print(f"  {error.message}", markup=False)
        raise typer.Exit(EXIT_NOT_FOUND)

    if isinstance(error, ValidationError):
        console.print("[red]Error:[/red] Validation failed")
        console.print(f"  {error.message}", markup=False)

    elif isinstance(error, DeploymentUnsuccessfulError):
        console.print("[red]Error:[/red] Release is not deployed")
        console.print(f"  {error.message}", markup=False)
        console.print("\n[dim]Hint: Inspect the release with `helm status`.[/dim]")

    elif isinstance(error, CommandError):
        console.print("[red]Error:[/red] helm command failed")
        console.print(f"  {error.message}", markup=False)

    elif isinstance(error, ParseError):
        console.print("[red]Error:[/red] Could not parse helm output")
        console.print(f"  {error.message}", markup=False)

    elif isinstance(error, NormalizationError):
        console.print("[red]Error:[/red] Invalid override payload")
        console.print(f"  {error.message}", markup=False)

    else:
        console.print(f"[red]Error:[/red] {error.message}")

    raise typer.Exit(1)
