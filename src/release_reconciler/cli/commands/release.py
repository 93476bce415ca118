"""CLI commands for reconciling releases.

Provides apply, read, delete, status and normalize commands on top of
the release resource.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from release_reconciler.cli.commands.base import (
    EXIT_NOT_FOUND,
    RecordFileArgument,
    ReleaseNameArgument,
    console,
    get_reconciler,
    get_resource,
    handle_reconciler_error,
    load_record,
    print_record,
)
from release_reconciler.integrations.helm.exceptions import ReconcilerError
from release_reconciler.integrations.helm.normalize import (
    attempt_normalize_overrides,
    normalize_overrides,
)

BestEffortOption = Annotated[
    bool,
    typer.Option(
        "--best-effort",
        help="Print the input unchanged instead of failing when it is not valid YAML",
    ),
]


def apply(ctx: typer.Context, record_file: RecordFileArgument) -> None:
    """Install or upgrade the release described by a record file.

    A record without an ``id`` is created; one with an ``id`` is updated.
    """
    record = load_record(record_file)
    try:
        resource = get_resource(ctx)
        if record.get("id"):
            state = resource.update(record)
        else:
            state = resource.create(record)
    except ReconcilerError as e:
        handle_reconciler_error(e)
    print_record(state)


def read(ctx: typer.Context, name: ReleaseNameArgument) -> None:
    """Read the live state of a release into a record."""
    try:
        state = get_resource(ctx).import_state(name)
    except ReconcilerError as e:
        handle_reconciler_error(e)
    print_record(state)
    if not state["id"]:
        raise typer.Exit(EXIT_NOT_FOUND)


def delete(ctx: typer.Context, record_file: RecordFileArgument) -> None:
    """Purge the release described by a record file."""
    record = load_record(record_file)
    try:
        state = get_resource(ctx).delete(record)
    except ReconcilerError as e:
        handle_reconciler_error(e)
    print_record(state)


def status(ctx: typer.Context, name: ReleaseNameArgument) -> None:
    """Show the state helm reports for a release."""
    try:
        observed = get_reconciler(ctx).find_current_state(name)
    except ReconcilerError as e:
        handle_reconciler_error(e)

    table = Table(title=f"Release {observed.name}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Revision", str(observed.revision))
    table.add_row("Updated", observed.last_updated.isoformat())
    style = "green" if observed.deployed else "red"
    table.add_row("Status", f"[{style}]{observed.status}[/{style}]")
    table.add_row("Chart", observed.chart_name)
    table.add_row("Version", observed.chart_version)
    table.add_row("Namespace", observed.namespace)
    console.print(table)


def normalize(
    file: Annotated[
        Path,
        typer.Argument(help="YAML or JSON file to normalize", exists=True, dir_okay=False),
    ],
    best_effort: BestEffortOption = False,
) -> None:
    """Print the canonical minified JSON form of an override payload."""
    text = file.read_text()
    if best_effort:
        typer.echo(attempt_normalize_overrides(text))
        return
    try:
        typer.echo(normalize_overrides(text))
    except ReconcilerError as e:
        handle_reconciler_error(e)


def register_release_commands(app: typer.Typer) -> None:
    """Register release commands on a Typer app."""
    app.command()(apply)
    app.command()(read)
    app.command()(delete)
    app.command()(status)
    app.command()(normalize)
