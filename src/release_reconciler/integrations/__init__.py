"""Integrations with external tools."""
