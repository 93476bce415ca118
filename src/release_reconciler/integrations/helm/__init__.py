"""Helm integration - subprocess runner, listing parser and models."""

from release_reconciler.integrations.helm.exceptions import (
    CommandError,
    DeploymentUnsuccessfulError,
    NormalizationError,
    NotExistError,
    ParseError,
    ReconcilerError,
    ValidationError,
)
from release_reconciler.integrations.helm.models import (
    ObservedRelease,
    ReleaseDescriptor,
    ReleaseListingRow,
)
from release_reconciler.integrations.helm.normalize import (
    attempt_normalize_overrides,
    normalize_overrides,
)
from release_reconciler.integrations.helm.runner import CommandResult, run_command

__all__ = [
    "CommandError",
    "CommandResult",
    "DeploymentUnsuccessfulError",
    "NormalizationError",
    "NotExistError",
    "ObservedRelease",
    "ParseError",
    "ReconcilerError",
    "ReleaseDescriptor",
    "ReleaseListingRow",
    "ValidationError",
    "attempt_normalize_overrides",
    "normalize_overrides",
    "run_command",
]
