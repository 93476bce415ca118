"""Data models for release reconciliation.

Typed dataclasses for the declared release, the raw listing row and
the observed release state parsed from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from release_reconciler.integrations.helm.exceptions import ValidationError

STATUS_DEPLOYED = "DEPLOYED"
STATUS_DELETED = "DELETED"

# Statuses reported by ``helm list -a``. Only DEPLOYED and DELETED carry
# meaning here; everything else is "present but unsuccessful".
KNOWN_STATUSES = frozenset(
    {
        "UNKNOWN",
        STATUS_DEPLOYED,
        STATUS_DELETED,
        "SUPERSEDED",
        "FAILED",
        "DELETING",
        "PENDING_INSTALL",
        "PENDING_UPGRADE",
        "PENDING_ROLLBACK",
    }
)


@dataclass
class ReleaseDescriptor:
    """A declared release: the caller's statement of intent."""

    name: str
    chart_name: str = ""
    chart_version: str = ""
    namespace: str = ""
    overrides: str = ""

    def validate(self) -> None:
        """Check the fields required before changing live state.

        Raises:
            ValidationError: If name, chart name, chart version or
                namespace is empty.
        """
        for field in ("name", "chart_name", "chart_version", "namespace"):
            if not getattr(self, field):
                label = field.replace("_", " ").capitalize()
                raise ValidationError(
                    message=f"{label} is unset: {self!r}",
                    release_name=self.name or None,
                    field=field,
                )


@dataclass(frozen=True)
class ReleaseListingRow:
    """One row of ``helm list`` output, before typed conversion."""

    name: str
    revision: str
    updated: str
    status: str
    chart: str
    namespace: str


@dataclass(frozen=True)
class ObservedRelease:
    """Release state as reported by the tool at query time."""

    name: str
    revision: int
    last_updated: datetime
    status: str
    chart_name: str
    chart_version: str
    namespace: str

    @property
    def deployed(self) -> bool:
        """Return True if the tool reports the release as DEPLOYED."""
        return self.status == STATUS_DEPLOYED

    @property
    def deleted(self) -> bool:
        """Return True if the tool reports the release as DELETED."""
        return self.status == STATUS_DELETED
