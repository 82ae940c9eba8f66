"""Tests for the default node application lifecycle."""

import logging

import pytest

from nodekit.app import Application, NodeApplication
from nodekit.chainspec import devnet_chain_spec
from nodekit.module import ModuleManager
from nodekit.server.config import AppConfig
from nodekit.tx import noop_tx_config


@pytest.fixture
def application() -> NodeApplication:
    return NodeApplication(
        logger=logging.getLogger("nodekit.test.app"),
        chain_spec=devnet_chain_spec(),
        module_manager=ModuleManager(),
        app_config=AppConfig(),
    )


@pytest.mark.unit
class TestNodeApplication:
    """Test start/wait/stop transitions."""

    def test_is_an_application(self, application: NodeApplication) -> None:
        assert isinstance(application, Application)

    def test_lifecycle(self, application: NodeApplication) -> None:
        assert not application.running
        application.start()
        assert application.running
        assert application.wait(timeout=0.01) is False

        application.stop()
        assert not application.running
        assert application.wait(timeout=0.01) is True

    def test_double_start_raises(self, application: NodeApplication) -> None:
        application.start()
        with pytest.raises(RuntimeError, match="already started"):
            application.start()

    def test_stop_is_idempotent(self, application: NodeApplication) -> None:
        application.stop()
        application.stop()
        assert application.wait(timeout=0) is True


@pytest.mark.unit
def test_noop_tx_config_cannot_encode() -> None:
    config = noop_tx_config()
    assert config.sign_mode == "direct"
    with pytest.raises(NotImplementedError):
        config.encode(b"tx")
