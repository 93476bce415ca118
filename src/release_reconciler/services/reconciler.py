"""Release reconciler.

Drives the helm binary so that live state converges to a declared
release, and reads live state back into a release descriptor. Holds no
state between calls: every operation re-queries helm.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import structlog

from release_reconciler.core.config.models import ReconcilerConfig
from release_reconciler.integrations.helm.exceptions import (
    CommandError,
    DeploymentUnsuccessfulError,
    NotExistError,
)
from release_reconciler.integrations.helm.listing import find_release
from release_reconciler.integrations.helm.models import (
    ObservedRelease,
    ReleaseDescriptor,
)
from release_reconciler.integrations.helm.normalize import normalize_overrides
from release_reconciler.integrations.helm.runner import CommandResult, run_command

logger = structlog.get_logger()

Runner = Callable[..., CommandResult]


class ReleaseReconciler:
    """Install-or-upgrade, read and delete helm releases.

    The configuration is checked once, here; operations never re-check it.
    """

    def __init__(self, config: ReconcilerConfig, runner: Runner | None = None) -> None:
        """Initialize the reconciler.

        Args:
            config: Connection and behavior options.
            runner: Command runner (defaults to run_command).

        Raises:
            ValidationError: If the chart source configuration is invalid.
        """
        config.check()
        self._config = config
        self._run = runner or run_command
        self._log = logger.bind(entity="release", chart_source_type=config.chart_source_type)

    @property
    def config(self) -> ReconcilerConfig:
        """Return the configuration this reconciler was built with."""
        return self._config

    # -----------------------------------------------------------------------
    # Arguments
    # -----------------------------------------------------------------------

    def behavioral_global_args(self) -> list[str]:
        """Return global flags that do not change helm's output format.

        Commands whose stdout gets parsed (``list``, ``get values``) use
        only these; ``--debug`` would mix diagnostics into the output.
        """
        c = self._config
        args: list[str] = []
        if c.home:
            args.extend(["--home", c.home])
        if c.host:
            args.extend(["--host", c.host])
        if c.kube_context:
            args.extend(["--kube-context", c.kube_context])
        if c.kubeconfig:
            args.extend(["--kubeconfig", c.kubeconfig])
        if c.tiller_connection_timeout >= 0:
            args.extend(["--tiller-connection-timeout", str(c.tiller_connection_timeout)])
        if c.tiller_namespace:
            args.extend(["--tiller-namespace", c.tiller_namespace])
        return args

    def global_args(self) -> list[str]:
        """Return all global flags, including ``--debug`` when configured."""
        args = self.behavioral_global_args()
        if self._config.debug:
            args.append("--debug")
        return args

    def _timeout_args(self) -> list[str]:
        if self._config.timeout >= 0:
            return ["--timeout", str(self._config.timeout)]
        return []

    def _helm(self, args: Sequence[str]) -> list[str]:
        return [self._config.helm_binary, *args]

    def chart_location(self, chart_name: str) -> str:
        """Return the chart directory for a filesystem chart source."""
        return str(Path(self._config.chart_source) / chart_name)

    def upgrade_args(self, release: ReleaseDescriptor) -> list[str]:
        """Build the ``helm upgrade --install`` command for a release."""
        args = self.global_args()
        args.extend(["upgrade", "--install", "--devel", "--wait", "-f", "-"])
        args.extend(self._timeout_args())
        args.extend(["--version", release.chart_version])
        args.extend(["--namespace", release.namespace])
        args.append(release.name)

        if self._config.chart_source_type == "filesystem":
            args.append(self.chart_location(release.chart_name))
        else:
            if self._config.chart_source:
                args.extend(["--repo", self._config.chart_source])
            args.append(release.chart_name)
        return self._helm(args)

    def delete_args(self, release: ReleaseDescriptor) -> list[str]:
        """Build the ``helm delete --purge`` command for a release."""
        args = self.global_args()
        args.append("delete")
        args.extend(self._timeout_args())
        args.extend(["--purge", release.name])
        return self._helm(args)

    def list_args(self) -> list[str]:
        """Build the ``helm list -a`` command."""
        return self._helm([*self.behavioral_global_args(), "list", "-a"])

    def get_values_args(self, name: str) -> list[str]:
        """Build the ``helm get values`` command for a release."""
        return self._helm([*self.behavioral_global_args(), "get", "values", name])

    # -----------------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------------

    def upgrade(self, release: ReleaseDescriptor) -> None:
        """Install or upgrade a release and confirm it is DEPLOYED.

        In filesystem mode the repository index and the chart's
        dependencies are refreshed first; if either fails nothing is
        installed.

        Args:
            release: Declared release. Overrides are fed to helm on stdin.

        Raises:
            ValidationError: If the descriptor is incomplete.
            CommandError: If any helm invocation fails.
            ParseError: If the listing cannot be parsed.
            NotExistError: If the release is missing after the upgrade.
            DeploymentUnsuccessfulError: If the release is not DEPLOYED.
        """
        release.validate()
        log = self._log.bind(release=release.name)

        if self._config.chart_source_type == "filesystem":
            self._refresh_dependencies(release)

        cmd = self.upgrade_args(release)
        log.info(
            "upgrading_release",
            chart=release.chart_name,
            version=release.chart_version,
            namespace=release.namespace,
        )
        result = self._run(cmd, stdin=release.overrides)
        log.debug("helm_upgrade_output", stdout=result.stdout)

        state = self.find_current_state(release.name)
        if not state.deployed:
            log.warning("release_not_deployed", status=state.status, revision=state.revision)
            raise DeploymentUnsuccessfulError(release_name=release.name, status=state.status)
        log.info("release_upgraded", revision=state.revision)

    def read(self, release: ReleaseDescriptor) -> ReleaseDescriptor:
        """Populate a descriptor from the release's live state.

        Only ``release.name`` is used as input; the other fields are
        overwritten, and ``overrides`` receives the normalized values
        currently applied to the release.

        Args:
            release: Descriptor to populate.

        Returns:
            The same descriptor, updated.

        Raises:
            NotExistError: If the release is absent or DELETED.
            DeploymentUnsuccessfulError: If the release is not DEPLOYED.
            CommandError: If a helm invocation fails.
            ParseError: If the listing cannot be parsed.
            NormalizationError: If the applied values are not valid YAML.
        """
        state = self.find_current_state(release.name)
        if state.deleted:
            raise NotExistError(release_name=release.name)
        if not state.deployed:
            raise DeploymentUnsuccessfulError(release_name=release.name, status=state.status)

        release.name = state.name
        release.chart_name = state.chart_name
        release.chart_version = state.chart_version
        release.namespace = state.namespace

        try:
            result = self._run(self.get_values_args(release.name))
        except CommandError as e:
            raise CommandError(
                e.command,
                e.exit_error,
                e.stderr,
                message=f"Couldn't read overrides for release {release.name}: {e}",
                release_name=release.name,
            ) from e

        release.overrides = normalize_overrides(result.stdout)
        self._log.debug("release_read", release=release.name, revision=state.revision)
        return release

    def delete(self, release: ReleaseDescriptor) -> None:
        """Purge a release.

        Success means helm exited zero; no follow-up query is made.

        Raises:
            ValidationError: If the descriptor is incomplete.
            CommandError: If helm fails.
        """
        release.validate()
        result = self._run(self.delete_args(release))
        self._log.info("release_deleted", release=release.name)
        self._log.debug("helm_delete_output", release=release.name, stdout=result.stdout)

    def find_current_state(self, name: str) -> ObservedRelease:
        """Query helm for the current state of a release.

        Args:
            name: Release name.

        Returns:
            Observed state from the first matching listing row.

        Raises:
            NotExistError: If the listing has no row for ``name``.
            CommandError: If ``helm list`` fails.
            ParseError: If the listing cannot be parsed.
        """
        result = self._run(self.list_args())
        return find_release(result.stdout, name)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _refresh_dependencies(self, release: ReleaseDescriptor) -> None:
        """Run ``repo update`` then ``dependency update`` for a local chart."""
        self._run(self._helm([*self.global_args(), "repo", "update"]))
        self._run(
            self._helm(
                [
                    *self.global_args(),
                    "dependency",
                    "update",
                    self.chart_location(release.chart_name),
                ]
            )
        )
        self._log.debug("chart_dependencies_updated", release=release.name)
