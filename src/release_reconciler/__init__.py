"""Release reconciler - converge helm releases to a declared state."""

from release_reconciler.__version__ import __version__
from release_reconciler.core.config import ReconcilerConfig, load_config
from release_reconciler.integrations.helm import (
    CommandError,
    DeploymentUnsuccessfulError,
    NormalizationError,
    NotExistError,
    ObservedRelease,
    ParseError,
    ReconcilerError,
    ReleaseDescriptor,
    ValidationError,
    attempt_normalize_overrides,
    normalize_overrides,
)
from release_reconciler.services import ReleaseReconciler, ReleaseResource

__all__ = [
    "CommandError",
    "DeploymentUnsuccessfulError",
    "NormalizationError",
    "NotExistError",
    "ObservedRelease",
    "ParseError",
    "ReconcilerConfig",
    "ReconcilerError",
    "ReleaseDescriptor",
    "ReleaseReconciler",
    "ReleaseResource",
    "ValidationError",
    "__version__",
    "attempt_normalize_overrides",
    "load_config",
    "normalize_overrides",
]
