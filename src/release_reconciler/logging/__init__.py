"""Logging configuration for release_reconciler."""

from release_reconciler.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
