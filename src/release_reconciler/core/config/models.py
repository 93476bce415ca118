"""Reconciler configuration model with Pydantic validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from release_reconciler.integrations.helm.exceptions import ValidationError

# XDG-compliant config location
CONFIG_DIR = Path.home() / ".config" / "release-reconciler"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

CHART_SOURCE_TYPES = ("repository", "filesystem")

ENV_PREFIX = "RELREC_"

# Environment variable suffix -> field name
ENV_FIELDS = {
    "DEBUG": "debug",
    "HOME": "home",
    "HOST": "host",
    "KUBE_CONTEXT": "kube_context",
    "KUBECONFIG": "kubeconfig",
    "TILLER_CONNECTION_TIMEOUT": "tiller_connection_timeout",
    "TILLER_NAMESPACE": "tiller_namespace",
    "TIMEOUT": "timeout",
    "CHART_SOURCE_TYPE": "chart_source_type",
    "CHART_SOURCE": "chart_source",
    "HELM_BINARY": "helm_binary",
}


class ReconcilerConfig(BaseModel):
    """Connection and behavior options for driving helm.

    Empty strings and negative timeouts mean "unset": the matching flag
    is left off the command line so helm applies its own default.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    debug: bool = False
    home: str = ""
    host: str = ""
    kube_context: str = ""
    kubeconfig: str = ""
    tiller_connection_timeout: int = -1
    tiller_namespace: str = ""
    timeout: int = -1
    chart_source_type: str = "repository"
    chart_source: str = ""
    helm_binary: str = "helm"

    @field_validator("home", "kubeconfig", "chart_source")
    @classmethod
    def expand_user(cls, v: str) -> str:
        """Expand a leading ~ in path options.

        The value is otherwise left as written: ``chart_source`` may be a
        repository URL, which must not be rebuilt as a filesystem path.
        """
        return os.path.expanduser(v)

    @field_validator("helm_binary")
    @classmethod
    def validate_helm_binary(cls, v: str) -> str:
        """Validate helm_binary is not empty."""
        if not v:
            raise ValueError("helm_binary must not be empty")
        return v

    def check(self) -> None:
        """Check the chart source invariant.

        Raises:
            ValidationError: If the chart source type is unknown, or the
                filesystem source is not an existing directory.
        """
        if self.chart_source_type == "filesystem":
            if not self.chart_source or not Path(self.chart_source).is_dir():
                raise ValidationError(
                    "Chart source must be an existent directory",
                    field="chart_source",
                )
        elif self.chart_source_type != "repository":
            raise ValidationError(
                "Chart source type not specified correctly, it must either be "
                f"`repository` or `filesystem`, got: {self.chart_source_type!r}",
                field="chart_source_type",
            )

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> ReconcilerConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            RELREC_DEBUG: Pass --debug to mutating helm commands (true/false)
            RELREC_HOME: Helm home directory
            RELREC_HOST: Tiller address
            RELREC_KUBE_CONTEXT: Kubernetes context
            RELREC_KUBECONFIG: Path to kubeconfig
            RELREC_TILLER_CONNECTION_TIMEOUT: Seconds, negative to omit
            RELREC_TILLER_NAMESPACE: Namespace tiller runs in
            RELREC_TIMEOUT: Operation timeout in seconds, negative to omit
            RELREC_CHART_SOURCE_TYPE: ``repository`` or ``filesystem``
            RELREC_CHART_SOURCE: Repository URL or chart directory
            RELREC_HELM_BINARY: Name or path of the helm executable
        """
        config_dict = base_config.copy() if base_config else {}

        for suffix, field in ENV_FIELDS.items():
            value = os.environ.get(f"{ENV_PREFIX}{suffix}")
            if value is not None:
                config_dict[field] = value

        return cls.model_validate(config_dict)


def load_config(path: Path | None = None) -> ReconcilerConfig:
    """Load configuration from a YAML file plus environment overrides.

    A missing file means all defaults.

    Args:
        path: Config file location (defaults to CONFIG_FILE).

    Returns:
        The loaded configuration. Chart source is not checked here; the
        reconciler checks it once when constructed.

    Raises:
        ValidationError: If the file is not a YAML mapping or a value
            has the wrong type.
    """
    config_path = path or CONFIG_FILE
    base: dict[str, Any] = {}

    if config_path.exists():
        try:
            loaded = yaml.safe_load(config_path.read_text())
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in {config_path}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValidationError(f"Configuration in {config_path} must be a mapping")
        base = loaded

    try:
        return ReconcilerConfig.from_env(base)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid configuration: {e}") from e
