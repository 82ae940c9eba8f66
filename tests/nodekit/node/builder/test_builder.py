"""Tests for node assembly and the root pre-run hook."""

import json
import logging
from pathlib import Path

import pytest
import typer
from pytest_mock import MockerFixture
from typer.testing import CliRunner

from nodekit.app import Application
from nodekit.chainspec import ChainSpec
from nodekit.cli.commands import AppCreator
from nodekit.client.context import ClientContext
from nodekit.common.settings import SettingsStore
from nodekit.components import default_components, default_depinject_config
from nodekit.errors import ConfigurationError, EnhancementError, FlagParseError, KeyringError, ResolutionError
from nodekit.keyring import Keyring
from nodekit.module import ModuleManager
from nodekit.node import Node
from nodekit.node.builder import (
    HELP_ONLY_KEY,
    NodeBuilder,
    RootCommandGroup,
    Opt,
    new,
    with_components,
    with_depinject_config,
    with_description,
    with_name,
    with_root_command_setup,
)


def _builder(*extra: Opt) -> NodeBuilder[Node]:
    return new(
        with_name("mynode"),
        with_description("mynode is a test node"),
        with_depinject_config(default_depinject_config()),
        with_components(*default_components()),
        *extra,
    )


def _client_json(cli_runner: CliRunner, root: typer.Typer, *args: str) -> dict:
    result = cli_runner.invoke(
        root, ["--log-level", "error", "-o", "json", *args, "config", "show", "client"]
    )
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


@pytest.mark.unit
class TestBuild:
    """Test building and attaching the root command."""

    def test_build_attaches_named_root_command(self) -> None:
        node = _builder().build()

        assert node.root_cmd is not None
        assert node.root_cmd.info.name == "mynode"

    def test_root_help_lists_default_commands(self, cli_runner: CliRunner) -> None:
        node = _builder().build()
        result = cli_runner.invoke(node.root_cmd, ["--help"])

        assert result.exit_code == 0
        for name in ("init", "start", "keys", "config", "version", "query", "tx"):
            assert name in result.stdout
        assert "mynode is a test node" in result.stdout

    def test_failing_keyring_leaves_node_unattached(self, mocker: MockerFixture) -> None:
        def failing_keyring(client_ctx: ClientContext) -> Keyring:
            raise KeyringError("keyring unavailable")

        mocker.patch("nodekit.components.provide_keyring", failing_keyring)
        nb = _builder()

        with pytest.raises(ResolutionError) as exc_info:
            nb.build()

        assert "Keyring" in str(exc_info.value)
        assert "keyring unavailable" in str(exc_info.value)
        assert nb.node.root_cmd is None

    def test_missing_module_manager_fails_resolution(self) -> None:
        nb = new(with_name("mynode"))

        with pytest.raises(ResolutionError, match="missing dependency AppOptions"):
            nb.build()
        assert nb.node.root_cmd is None

    def test_enhancement_collision_leaves_node_unattached(self) -> None:
        def setup_with_query(
            root: typer.Typer,
            module_manager: ModuleManager,
            app_creator: AppCreator,
            chain_spec: ChainSpec,
        ) -> None:
            @root.command(name="query")
            def query() -> None:
                pass

        nb = _builder(with_root_command_setup(setup_with_query))

        with pytest.raises(EnhancementError):
            nb.build()
        assert nb.node.root_cmd is None

    def test_root_command_setup_receives_resolved_values(self) -> None:
        received: dict[str, object] = {}

        def recording_setup(
            root: typer.Typer,
            module_manager: ModuleManager,
            app_creator: AppCreator,
            chain_spec: ChainSpec,
        ) -> None:
            received.update(mm=module_manager, creator=app_creator, spec=chain_spec)

            @root.command(name="noop")
            def noop() -> None:
                pass

        _builder(with_root_command_setup(recording_setup)).build()

        assert isinstance(received["mm"], ModuleManager)
        assert "beacon" in received["mm"]  # type: ignore[operator]
        assert isinstance(received["spec"], ChainSpec)
        assert received["spec"].name == "testnet"  # type: ignore[attr-defined]
        assert callable(received["creator"])


@pytest.mark.unit
class TestAppCreator:
    """Test runtime application resolution."""

    def test_creates_application_from_components(self) -> None:
        nb = _builder()
        application = nb.app_creator(logging.getLogger("nodekit.test"), SettingsStore())

        assert isinstance(application, Application)
        assert application.app_config.minimum_gas_prices == "0stake"  # type: ignore[attr-defined]

    def test_uses_settings_for_app_config(self) -> None:
        settings = SettingsStore()
        settings.merge({"halt_height": 100})

        application = _builder().app_creator(logging.getLogger("nodekit.test"), settings)
        assert application.app_config.halt_height == 100  # type: ignore[attr-defined]

    def test_without_application_component_fails(self) -> None:
        nb = _builder(with_components())
        with pytest.raises(ResolutionError, match="Application"):
            nb.app_creator(logging.getLogger("nodekit.test"), SettingsStore())


@pytest.mark.unit
class TestPreRunHook:
    """Test the root callback run before every subcommand."""

    def test_minimal_invocation_installs_client_context(
        self, cli_runner: CliRunner, node_env: Path
    ) -> None:
        node = _builder().build()
        result = cli_runner.invoke(node.root_cmd, ["--log-level", "error", "version"])

        assert result.exit_code == 0, result.output
        assert (node_env / "config" / "client.toml").exists()
        assert (node_env / "config" / "config.toml").exists()
        assert (node_env / "config" / "app.toml").exists()

    def test_home_flag_selects_directory(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        home = tmp_path / "elsewhere"
        node = _builder().build()

        described = _client_json(cli_runner, node.root_cmd, "--home", str(home))

        assert described["home_dir"] == str(home)
        assert (home / "config" / "client.toml").exists()

    def test_independent_nodes_derive_equal_contexts(self, cli_runner: CliRunner) -> None:
        first_node = _builder().build()
        second_node = _builder().build()
        assert first_node.root_cmd is not second_node.root_cmd

        first = _client_json(cli_runner, first_node.root_cmd, "--chain-id", "beacon-80084")
        second = _client_json(cli_runner, second_node.root_cmd, "--chain-id", "beacon-80084")

        assert first == second
        assert first["chain_id"] == "beacon-80084"

    def test_explicit_flag_beats_client_toml(self, cli_runner: CliRunner, node_env: Path) -> None:
        config_dir = node_env / "config"
        config_dir.mkdir(parents=True)
        (config_dir / "client.toml").write_text('chain-id = "from-file"\nnode = "tcp://file:26657"\n')
        node = _builder().build()

        described = _client_json(cli_runner, node.root_cmd, "--chain-id", "from-flag")

        assert described["chain_id"] == "from-flag"
        assert described["node_uri"] == "tcp://file:26657"
        assert described["output_format"] == "json"

    def test_environment_sets_flags(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MYNODE_CHAIN_ID", "from-env")
        node = _builder().build()

        described = _client_json(cli_runner, node.root_cmd)
        assert described["chain_id"] == "from-env"

    def test_invalid_output_flag_raises(self, cli_runner: CliRunner) -> None:
        node = _builder().build()
        result = cli_runner.invoke(node.root_cmd, ["--output", "yaml", "version"])

        assert isinstance(result.exception, FlagParseError)
        assert result.exit_code != 0

    def test_invalid_comet_config_raises(self, cli_runner: CliRunner, node_env: Path) -> None:
        config_dir = node_env / "config"
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text('db_backend = "rocksdb"\n')
        node = _builder().build()

        result = cli_runner.invoke(node.root_cmd, ["version"])
        assert isinstance(result.exception, ConfigurationError)


    def test_subcommand_help_writes_no_config(self, cli_runner: CliRunner, node_env: Path) -> None:
        node = _builder().build()
        result = cli_runner.invoke(node.root_cmd, ["init", "--help"])

        assert result.exit_code == 0, result.output
        assert "Usage" in result.stdout
        assert not (node_env / "config").exists()

    def test_nested_subcommand_help_writes_no_config(
        self, cli_runner: CliRunner, node_env: Path
    ) -> None:
        node = _builder().build()
        result = cli_runner.invoke(node.root_cmd, ["keys", "add", "--help"])

        assert result.exit_code == 0, result.output
        assert not (node_env / "config").exists()

    def test_subcommand_help_ignores_invalid_config(
        self, cli_runner: CliRunner, node_env: Path
    ) -> None:
        config_dir = node_env / "config"
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text('db_backend = "rocksdb"\n')
        node = _builder().build()

        result = cli_runner.invoke(node.root_cmd, ["init", "--help"])
        assert result.exit_code == 0, result.output
        assert result.exception is None


@pytest.mark.unit
class TestRootCommandGroup:
    """Test help detection on the root group."""

    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            (["init", "--help"], True),
            (["keys", "add", "--help"], True),
            (["version"], False),
            (["keys", "add", "--", "--help"], False),
        ],
    )
    def test_help_only_recorded_in_meta(self, args: list[str], expected: bool) -> None:
        group = typer.main.get_command(_builder().build().root_cmd)
        assert isinstance(group, RootCommandGroup)

        ctx = group.make_context("mynode", list(args), resilient_parsing=True)
        assert ctx.meta[HELP_ONLY_KEY] is expected
