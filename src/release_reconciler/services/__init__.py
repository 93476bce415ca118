"""Services that drive helm on behalf of a caller."""

from release_reconciler.services.reconciler import ReleaseReconciler
from release_reconciler.services.resource import ReleaseResource

__all__ = ["ReleaseReconciler", "ReleaseResource"]
