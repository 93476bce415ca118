"""Release resource: host CRUD protocol over a key-value record.

An orchestrator stores each release as a flat record of strings and
calls create/read/update/delete on it. The record's ``id`` is the
release name while the release exists and empty once it is gone.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from release_reconciler.integrations.helm.exceptions import NotExistError, ValidationError
from release_reconciler.integrations.helm.models import ReleaseDescriptor
from release_reconciler.integrations.helm.normalize import attempt_normalize_overrides
from release_reconciler.services.reconciler import ReleaseReconciler

logger = structlog.get_logger()

Record = dict[str, Any]

DEFAULT_NAMESPACE = "default"
DEFAULT_OVERRIDES = "{}"

RECORD_FIELDS = ("id", "name", "chart_name", "chart_version", "namespace", "overrides")
TEXT_FIELDS = RECORD_FIELDS[:-1]


def state_overrides(text: str) -> str:
    """Return the form of an override payload kept in stored state."""
    return attempt_normalize_overrides(text)


def _text_field(record: Record, field: str) -> str:
    value = record.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(
            message=f"Field {field} must be a string, got {type(value).__name__}: {value!r}",
            release_name=record.get("name") if isinstance(record.get("name"), str) else None,
            field=field,
        )
    return value


def _overrides_text(value: Any) -> str:
    if value is None or value == "":
        return DEFAULT_OVERRIDES
    if isinstance(value, str):
        return value
    # Structured overrides from a YAML record file
    return json.dumps(value, default=str, ensure_ascii=False)


class ReleaseResource:
    """Map record-level CRUD calls onto a ReleaseReconciler."""

    def __init__(self, reconciler: ReleaseReconciler) -> None:
        self._reconciler = reconciler
        self._log = logger.bind(entity="release_resource")

    @staticmethod
    def with_defaults(record: Record) -> Record:
        """Return a copy of a record with every field present.

        Missing ``namespace`` and ``overrides`` take their defaults and
        overrides are stored in normalized form. Overrides given as a
        mapping or list are serialized as JSON first.

        Raises:
            ValidationError: If a field other than ``overrides`` is not a
                string.
        """
        result: Record = {field: _text_field(record, field) for field in TEXT_FIELDS}
        if not result["namespace"]:
            result["namespace"] = DEFAULT_NAMESPACE
        result["overrides"] = state_overrides(_overrides_text(record.get("overrides")))
        return result

    @staticmethod
    def to_descriptor(record: Record) -> ReleaseDescriptor:
        """Build a release descriptor from a record."""
        return ReleaseDescriptor(
            name=record["name"],
            chart_name=record["chart_name"],
            chart_version=record["chart_version"],
            namespace=record["namespace"],
            overrides=record["overrides"],
        )

    def create(self, record: Record) -> Record:
        """Install a release and set the record id to its name."""
        state = self.with_defaults(record)
        state["id"] = state["name"]
        self._reconciler.upgrade(self.to_descriptor(state))
        self._log.info("resource_created", id=state["id"])
        return state

    def update(self, record: Record) -> Record:
        """Upgrade an existing release to the record's declared state."""
        state = self.with_defaults(record)
        self._reconciler.upgrade(self.to_descriptor(state))
        self._log.info("resource_updated", id=state["id"])
        return state

    def delete(self, record: Record) -> Record:
        """Purge a release and clear the record id."""
        state = self.with_defaults(record)
        self._reconciler.delete(self.to_descriptor(state))
        state["id"] = ""
        self._log.info("resource_deleted", name=state["name"])
        return state

    def read(self, record: Record) -> Record:
        """Refresh a record from live state.

        A release that no longer exists is not an error: the record id is
        cleared so the orchestrator treats the resource as absent.
        """
        state = self.with_defaults(record)
        release = ReleaseDescriptor(name=state["id"])
        try:
            self._reconciler.read(release)
        except NotExistError:
            self._log.info("resource_absent", id=state["id"])
            state["id"] = ""
            return state

        state["name"] = release.name
        state["chart_name"] = release.chart_name
        state["chart_version"] = release.chart_version
        state["namespace"] = release.namespace
        state["overrides"] = release.overrides
        return state

    def import_state(self, release_id: str) -> Record:
        """Adopt an existing release by name."""
        return self.read({"id": release_id, "name": release_id})
