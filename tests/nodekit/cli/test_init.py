"""Tests for the init command."""

import json
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from nodekit.common.template import load_toml

QUIET = ["--log-level", "error"]


@pytest.mark.unit
class TestInitCommand:
    """Test node home initialization."""

    def test_writes_genesis_and_moniker(
        self, cli_runner: CliRunner, root_cmd: typer.Typer, node_env: Path
    ) -> None:
        result = cli_runner.invoke(root_cmd, [*QUIET, "init", "alpha"])

        assert result.exit_code == 0, result.output
        assert "Initialized node alpha" in result.stdout
        assert load_toml(node_env / "config" / "config.toml")["moniker"] == "alpha"
        assert (node_env / "data").is_dir()

        genesis = json.loads((node_env / "config" / "genesis.json").read_text())
        assert genesis["chain_id"] == "beacon-testnet-80084"
        assert genesis["chain_spec"]["deposit_eth1_chain_id"] == 80084
        assert "beacon" in genesis["app_state"]

    def test_chain_id_flag_is_used(
        self, cli_runner: CliRunner, root_cmd: typer.Typer, node_env: Path
    ) -> None:
        result = cli_runner.invoke(
            root_cmd, [*QUIET, "--chain-id", "beacon-custom", "-o", "json", "init", "alpha"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["chain_id"] == "beacon-custom"

    def test_existing_genesis_requires_overwrite(
        self, cli_runner: CliRunner, root_cmd: typer.Typer
    ) -> None:
        assert cli_runner.invoke(root_cmd, [*QUIET, "init", "alpha"]).exit_code == 0

        result = cli_runner.invoke(root_cmd, [*QUIET, "init", "beta"])
        assert result.exit_code == 1
        assert "already exists" in result.output

        result = cli_runner.invoke(root_cmd, [*QUIET, "init", "beta", "--overwrite"])
        assert result.exit_code == 0, result.output

    def test_moniker_is_required(self, cli_runner: CliRunner, root_cmd: typer.Typer) -> None:
        result = cli_runner.invoke(root_cmd, [*QUIET, "init"])
        assert result.exit_code == 2
