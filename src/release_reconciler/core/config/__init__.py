"""Configuration management with Pydantic validation."""

from release_reconciler.core.config.models import (
    CONFIG_DIR,
    CONFIG_FILE,
    ReconcilerConfig,
    load_config,
)

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "ReconcilerConfig",
    "load_config",
]
