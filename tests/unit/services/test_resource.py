"""Unit tests for ReleaseResource."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from release_reconciler.integrations.helm.exceptions import (
    CommandError,
    DeploymentUnsuccessfulError,
    NotExistError,
    ValidationError,
)
from release_reconciler.integrations.helm.models import ReleaseDescriptor
from release_reconciler.services.reconciler import ReleaseReconciler
from release_reconciler.services.resource import ReleaseResource
from tests.fakes import FakeHelm, listing, listing_row


@pytest.fixture
def mock_reconciler() -> MagicMock:
    """Create a mock ReleaseReconciler."""
    return MagicMock(spec=ReleaseReconciler)


@pytest.fixture
def resource(mock_reconciler: MagicMock) -> ReleaseResource:
    """A resource over the mock reconciler."""
    return ReleaseResource(mock_reconciler)


@pytest.fixture
def record() -> dict[str, str]:
    """A declared record as an orchestrator would send it."""
    return {
        "name": "web",
        "chart_name": "nginx-ingress",
        "chart_version": "1.2.3",
        "overrides": "replicaCount: 2\n",
    }


@pytest.mark.unit
class TestWithDefaults:
    """Tests for ReleaseResource.with_defaults."""

    def test_fills_defaults(self) -> None:
        """Namespace and overrides should get their defaults."""
        state = ReleaseResource.with_defaults({"name": "web"})

        assert state == {
            "id": "",
            "name": "web",
            "chart_name": "",
            "chart_version": "",
            "namespace": "default",
            "overrides": "{}",
        }

    def test_normalizes_overrides(self) -> None:
        """Overrides should be stored in canonical form."""
        state = ReleaseResource.with_defaults({"name": "web", "overrides": "b: 2\na: 1\n"})

        assert state["overrides"] == '{"a":1,"b":2}'

    def test_keeps_invalid_overrides_verbatim(self) -> None:
        """Storing state should not fail on an invalid payload."""
        state = ReleaseResource.with_defaults({"name": "web", "overrides": "a: [1"})

        assert state["overrides"] == "a: [1"

    def test_structured_overrides_are_serialized(self) -> None:
        """Overrides written as a mapping should become JSON, not a repr."""
        state = ReleaseResource.with_defaults(
            {"name": "web", "overrides": {"enabled": None, "replicas": 2, "tags": ["a"]}}
        )

        assert state["overrides"] == '{"enabled":null,"replicas":2,"tags":["a"]}'

    def test_empty_mapping_overrides(self) -> None:
        """An empty mapping is the same as the default."""
        assert ReleaseResource.with_defaults({"name": "web", "overrides": {}})["overrides"] == "{}"

    @pytest.mark.parametrize("value", [1.10, 2, True])
    def test_non_string_fields_are_rejected(self, value: object) -> None:
        """Numbers must not be silently turned into different version strings."""
        with pytest.raises(ValidationError) as exc_info:
            ReleaseResource.with_defaults({"name": "web", "chart_version": value})

        assert exc_info.value.field == "chart_version"
        assert exc_info.value.release_name == "web"

    def test_rejected_record_never_reaches_helm(
        self, resource: ReleaseResource, mock_reconciler: MagicMock
    ) -> None:
        """Create should fail before upgrading on a non-string field."""
        with pytest.raises(ValidationError):
            resource.create({"name": "web", "chart_name": "nginx", "chart_version": 1.1})

        mock_reconciler.upgrade.assert_not_called()

    def test_does_not_modify_input(self) -> None:
        """Should return a copy."""
        record = {"name": "web"}

        ReleaseResource.with_defaults(record)

        assert record == {"name": "web"}


@pytest.mark.unit
class TestCreateUpdateDelete:
    """Tests for the mutating operations."""

    def test_create_sets_id_and_upgrades(
        self, resource: ReleaseResource, mock_reconciler: MagicMock, record: dict[str, str]
    ) -> None:
        """Create should upgrade and use the name as id."""
        state = resource.create(record)

        assert state["id"] == "web"
        mock_reconciler.upgrade.assert_called_once_with(
            ReleaseDescriptor(
                name="web",
                chart_name="nginx-ingress",
                chart_version="1.2.3",
                namespace="default",
                overrides='{"replicaCount":2}',
            )
        )

    def test_create_failure_propagates(
        self, resource: ReleaseResource, mock_reconciler: MagicMock, record: dict[str, str]
    ) -> None:
        """A failed upgrade should fail create."""
        mock_reconciler.upgrade.side_effect = DeploymentUnsuccessfulError("web", "FAILED")

        with pytest.raises(DeploymentUnsuccessfulError):
            resource.create(record)

    def test_update_keeps_id(
        self, resource: ReleaseResource, mock_reconciler: MagicMock, record: dict[str, str]
    ) -> None:
        """Update should upgrade without touching the id."""
        state = resource.update({**record, "id": "web", "chart_version": "1.3.0"})

        assert state["id"] == "web"
        assert mock_reconciler.upgrade.call_args.args[0].chart_version == "1.3.0"

    def test_delete_clears_id(
        self, resource: ReleaseResource, mock_reconciler: MagicMock, record: dict[str, str]
    ) -> None:
        """Delete should purge and clear the id."""
        state = resource.delete({**record, "id": "web"})

        assert state["id"] == ""
        mock_reconciler.delete.assert_called_once()

    def test_delete_failure_keeps_record(
        self, resource: ReleaseResource, mock_reconciler: MagicMock, record: dict[str, str]
    ) -> None:
        """A failed delete should raise and not report the release gone."""
        mock_reconciler.delete.side_effect = CommandError(["helm", "delete"], "exit status 1")

        with pytest.raises(CommandError):
            resource.delete({**record, "id": "web"})


@pytest.mark.unit
class TestRead:
    """Tests for ReleaseResource.read and import_state."""

    def test_not_exist_clears_id(
        self, resource: ReleaseResource, mock_reconciler: MagicMock, record: dict[str, str]
    ) -> None:
        """An absent release is reported by an empty id, not an error."""
        mock_reconciler.read.side_effect = NotExistError("web")

        state = resource.read({**record, "id": "web"})

        assert state["id"] == ""
        assert state["name"] == "web"

    def test_other_errors_propagate(
        self, resource: ReleaseResource, mock_reconciler: MagicMock, record: dict[str, str]
    ) -> None:
        """Unsuccessful deployments are errors on read."""
        mock_reconciler.read.side_effect = DeploymentUnsuccessfulError("web", "FAILED")

        with pytest.raises(DeploymentUnsuccessfulError):
            resource.read({**record, "id": "web"})

    def test_copies_live_state(self, fake_helm: FakeHelm, reconciler: ReleaseReconciler) -> None:
        """Should overwrite the record with what helm reports."""
        fake_helm.responses["list"] = listing(
            listing_row(name="api", chart="my-app-0.2.0", namespace="backend")
        )
        fake_helm.responses["get"] = "replicas: 3\n"

        state = ReleaseResource(reconciler).read({"id": "api", "name": "api", "chart_name": "old"})

        assert state == {
            "id": "api",
            "name": "api",
            "chart_name": "my-app",
            "chart_version": "0.2.0",
            "namespace": "backend",
            "overrides": '{"replicas":3}',
        }

    def test_import_state(self, fake_helm: FakeHelm, reconciler: ReleaseReconciler) -> None:
        """Import should adopt a release given only its name."""
        fake_helm.responses["list"] = listing(listing_row())
        fake_helm.responses["get"] = "{}"

        state = ReleaseResource(reconciler).import_state("web")

        assert state["id"] == "web"
        assert state["chart_name"] == "nginx-ingress"
        assert state["overrides"] == "{}"

    def test_import_missing_release(
        self, fake_helm: FakeHelm, reconciler: ReleaseReconciler
    ) -> None:
        """Importing an absent release yields an empty id."""
        fake_helm.responses["list"] = ""

        assert ReleaseResource(reconciler).import_state("web")["id"] == ""
