"""Release reconciler custom exceptions."""

from __future__ import annotations

from collections.abc import Sequence


class ReconcilerError(Exception):
    """Base exception for release reconciliation.

    Attributes:
        message: Human-readable error message.
        release_name: Name of the release involved (if applicable).
    """

    def __init__(self, message: str, release_name: str | None = None) -> None:
        """Initialize ReconcilerError.

        Args:
            message: Human-readable error message.
            release_name: Name of the release involved.
        """
        super().__init__(message)
        self.message = message
        self.release_name = release_name

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ValidationError(ReconcilerError):
    """Raised when a release descriptor or configuration fails structural checks.

    No subprocess is ever started once this has been raised.
    """

    def __init__(
        self,
        message: str,
        release_name: str | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error message.
            release_name: Name of the release being validated.
            field: Name of the offending field.
        """
        super().__init__(message=message, release_name=release_name)
        self.field = field


class CommandError(ReconcilerError):
    """Raised when an external command exits non-zero or cannot be started.

    The message always carries the full command line. Captured standard
    error is appended only when it is non-empty.
    """

    def __init__(
        self,
        command: Sequence[str],
        exit_error: str,
        stderr: str = "",
        *,
        message: str | None = None,
        release_name: str | None = None,
    ) -> None:
        """Initialize CommandError.

        Args:
            command: The argument list that was executed.
            exit_error: Description of the failure (e.g. ``exit status 1``).
            stderr: Captured standard error of the command.
            message: Explicit message overriding the composed one.
            release_name: Name of the release involved.
        """
        self.command = list(command)
        self.exit_error = exit_error
        self.stderr = stderr
        if message is None:
            message = self._compose(self.command_line, exit_error, stderr)
        super().__init__(message=message, release_name=release_name)

    @property
    def command_line(self) -> str:
        """Return the command as a single display string."""
        return " ".join(self.command)

    @staticmethod
    def _compose(command_line: str, exit_error: str, stderr: str) -> str:
        if not stderr:
            return f"{command_line}: {exit_error}"
        return f"{command_line} {exit_error}: {stderr.strip()}"


class ParseError(ReconcilerError):
    """Raised when listing output does not have the expected shape.

    Attributes:
        field: Name of the listing column that failed to parse.
        value: The raw text of the offending field.
    """

    def __init__(
        self,
        message: str,
        release_name: str | None = None,
        field: str | None = None,
        value: str | None = None,
    ) -> None:
        """Initialize ParseError.

        Args:
            message: Human-readable error message.
            release_name: Release whose row failed to parse.
            field: Name of the offending column.
            value: Raw value of the offending column.
        """
        super().__init__(message=message, release_name=release_name)
        self.field = field
        self.value = value


class NotExistError(ReconcilerError):
    """Raised when a release is absent or reports a terminal DELETED status.

    Callers treat this as "resource absent" rather than a hard failure.
    """

    def __init__(self, release_name: str | None = None, message: str | None = None) -> None:
        """Initialize NotExistError.

        Args:
            release_name: Name of the release that was looked up.
            message: Optional explicit message.
        """
        if message is None:
            message = "Couldn't find release"
            if release_name:
                message += f" '{release_name}'"
        super().__init__(message=message, release_name=release_name)


class DeploymentUnsuccessfulError(ReconcilerError):
    """Raised when an operation completes but the release is not DEPLOYED."""

    def __init__(self, release_name: str | None = None, status: str | None = None) -> None:
        """Initialize DeploymentUnsuccessfulError.

        Args:
            release_name: Name of the release.
            status: Status reported by the tool.
        """
        message = "Unsuccessful deploy"
        if release_name:
            message += f" of release '{release_name}'"
        if status:
            message += f" (status: {status})"
        super().__init__(message=message, release_name=release_name)
        self.status = status


class NormalizationError(ReconcilerError):
    """Raised when an override payload is not valid structured text."""

    def __init__(
        self,
        message: str = "Override payload is not valid YAML or JSON",
        original_error: Exception | None = None,
    ) -> None:
        """Initialize NormalizationError.

        Args:
            message: Human-readable error message.
            original_error: The exception raised by the parser or serializer.
        """
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(message=message)
        self.original_error = original_error
