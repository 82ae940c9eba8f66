"""Shared pytest fixtures for the nodekit test suite.

Every test gets an isolated node home directory and fresh process-level
caches so that configuration never leaks between tests.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from nodekit.common.config import get_config
from nodekit.common.settings import get_settings_store
from nodekit.common.tracing import clear_correlation_id

# ========== Test Environment Setup ==========


@pytest.fixture(autouse=True)
def node_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the node at a temporary home and reset cached settings.

    Yields:
        Path: The node home directory (not created).
    """
    home = tmp_path / "home"
    for key in list(os.environ):
        if key.startswith(("BEACOND_", "MYNODE_")):
            monkeypatch.delenv(key)
    monkeypatch.setenv("NODE_HOME", str(home))
    monkeypatch.setenv("CHAIN_SPEC", "testnet")
    monkeypatch.setenv("KEYRING_BACKEND", "test")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("NODEKIT_ENV_FILE", str(tmp_path / "missing.env"))

    get_config.cache_clear()
    get_settings_store.cache_clear()
    yield home
    get_config.cache_clear()
    get_settings_store.cache_clear()
    clear_correlation_id()


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by a test so later tests don't log to closed streams."""
    yield
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    node_logger = logging.getLogger("nodekit.node")
    node_logger.handlers.clear()
    node_logger.propagate = True


# ========== CLI Fixtures ==========


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide Typer CLI test runner.

    Returns:
        CliRunner: Typer test runner instance.
    """
    return CliRunner()
