"""Tests for binding module commands onto the root command."""

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from nodekit.autocli import AppOptions
from nodekit.cli.tree import find_group, registered_names
from nodekit.errors import EnhancementError
from nodekit.module import ModuleManager
from tests.utils.mocks import StubModule, make_client_context


def _options(tmp_path: Path, *modules: StubModule) -> AppOptions:
    return AppOptions(
        module_manager=ModuleManager(modules),
        client_ctx=make_client_context(tmp_path),
    )


@pytest.mark.unit
class TestEnhanceRootCommand:
    """Test query/tx group creation and module mounting."""

    def test_creates_groups_and_mounts_modules(self, tmp_path: Path, cli_runner: CliRunner) -> None:
        root = typer.Typer(name="mynode")
        _options(tmp_path, StubModule("bank", with_tx=True)).enhance_root_command(root)

        assert {"query", "tx"} <= registered_names(root)
        result = cli_runner.invoke(root, ["query", "bank", "ping"])
        assert result.exit_code == 0, result.output
        assert "pong from bank" in result.output

        result = cli_runner.invoke(root, ["tx", "bank", "send"])
        assert result.exit_code == 0, result.output
        assert "sent" in result.output

    def test_reuses_existing_query_group(self, tmp_path: Path) -> None:
        root = typer.Typer(name="mynode")
        existing = typer.Typer(name="query")
        root.add_typer(existing, name="query")

        _options(tmp_path, StubModule("bank")).enhance_root_command(root)

        assert find_group(root, "query") is existing
        assert "bank" in registered_names(existing)

    def test_module_without_tx_cmd_is_skipped(self, tmp_path: Path) -> None:
        root = typer.Typer(name="mynode")
        _options(tmp_path, StubModule("bank")).enhance_root_command(root)

        tx_group = find_group(root, "tx")
        assert tx_group is not None
        assert registered_names(tx_group) == set()

    def test_plain_command_named_query_raises(self, tmp_path: Path) -> None:
        root = typer.Typer(name="mynode")

        @root.command(name="query")
        def query() -> None:
            pass

        with pytest.raises(EnhancementError, match="'query'"):
            _options(tmp_path, StubModule("bank")).enhance_root_command(root)

    def test_module_name_collision_raises(self, tmp_path: Path) -> None:
        root = typer.Typer(name="mynode")
        query_group = typer.Typer(name="query")

        @query_group.command(name="bank")
        def bank() -> None:
            pass

        root.add_typer(query_group, name="query")

        with pytest.raises(EnhancementError, match="module 'bank'"):
            _options(tmp_path, StubModule("bank")).enhance_root_command(root)
