"""Subprocess execution for the helm binary.

Runs one command at a time, captures its output, and turns a non-zero
exit into a CommandError that carries the command line and stderr.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from release_reconciler.integrations.helm.exceptions import CommandError

logger = structlog.get_logger()


@dataclass
class CommandResult:
    """Output of a successful command."""

    command: list[str]
    stdout: str
    stderr: str = ""


def run_command(command: Sequence[str], *, stdin: str | None = None) -> CommandResult:
    """Run a command and capture its output.

    Output is decoded as UTF-8; undecodable bytes are replaced.

    Args:
        command: Full argument list, executable first.
        stdin: Text fed to the command's standard input.

    Returns:
        CommandResult with captured stdout and stderr.

    Raises:
        CommandError: If the command exits non-zero or cannot be started.
    """
    cmd = list(command)
    logger.debug("running_command", command=cmd, has_stdin=stdin is not None)

    try:
        if stdin is None:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        else:
            proc = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
    except OSError as e:
        raise CommandError(cmd, str(e)) from e

    if proc.returncode != 0:
        raise CommandError(cmd, f"exit status {proc.returncode}", proc.stderr or "")

    return CommandResult(command=cmd, stdout=proc.stdout or "", stderr=proc.stderr or "")
