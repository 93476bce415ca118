"""Version information for release_reconciler."""

__version__ = "0.3.0"
