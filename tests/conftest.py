"""Shared pytest fixtures for release_reconciler tests."""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from release_reconciler.cli.main import app
from release_reconciler.core.config.models import ReconcilerConfig
from release_reconciler.services.reconciler import ReleaseReconciler
from tests.fakes import FakeHelm


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear RELREC_ environment variables for each test."""
    for key in list(os.environ.keys()):
        if key.startswith("RELREC_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path: Path) -> Generator[Path]:
    """Keep log files written during tests inside tmp_path."""
    log_dir = tmp_path / "logs"
    with (
        patch("release_reconciler.logging.config.LOG_DIR", log_dir),
        patch("release_reconciler.logging.config.LOG_FILE", log_dir / "reconciler.log"),
    ):
        yield log_dir


@pytest.fixture
def config() -> ReconcilerConfig:
    """Configuration with every optional flag unset."""
    return ReconcilerConfig()


@pytest.fixture
def fake_helm() -> FakeHelm:
    """A scripted stand-in for the helm binary."""
    return FakeHelm()


@pytest.fixture
def reconciler(config: ReconcilerConfig, fake_helm: FakeHelm) -> ReleaseReconciler:
    """A reconciler wired to the fake helm runner."""
    return ReleaseReconciler(config, runner=fake_helm)


@pytest.fixture
def mock_resource() -> MagicMock:
    """Create a mock ReleaseResource."""
    return MagicMock()
