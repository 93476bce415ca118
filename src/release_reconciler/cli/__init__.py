"""Command-line interface for release_reconciler."""
