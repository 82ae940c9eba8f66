"""Tests for the client context and persistent flag parsing."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from nodekit.client.context import ClientContext, read_persistent_command_flags
from nodekit.errors import FlagParseError
from nodekit.tx import noop_tx_config


@pytest.mark.unit
class TestClientContext:
    """Test immutable derivation."""

    def test_is_frozen(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path)
        with pytest.raises(ValidationError):
            ctx.chain_id = "x"  # type: ignore[misc]

    def test_with_updates_returns_new_value(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path)
        updated = ctx.with_updates(chain_id="beacon-80087")

        assert updated.chain_id == "beacon-80087"
        assert ctx.chain_id == ""

    def test_effective_keyring_dir_defaults_to_home(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path)
        assert ctx.effective_keyring_dir == tmp_path
        assert ctx.with_updates(keyring_dir=tmp_path / "k").effective_keyring_dir == tmp_path / "k"

    def test_describe_excludes_objects(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path, tx_config=noop_tx_config())
        described = ctx.describe()

        assert described["home_dir"] == str(tmp_path)
        assert "tx_config" not in described
        assert "keyring" not in described


@pytest.mark.unit
class TestReadPersistentCommandFlags:
    """Test how flags override the context."""

    def test_changed_flags_override(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path, chain_id="old", output_format="text")
        updated = read_persistent_command_flags(
            ctx,
            {"chain_id": "new", "output": "json"},
            changed={"chain_id", "output"},
        )

        assert updated.chain_id == "new"
        assert updated.output_format == "json"
        assert ctx.chain_id == "old"

    def test_unchanged_flags_only_fill_empty_fields(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path, chain_id="old")
        updated = read_persistent_command_flags(ctx, {"chain_id": "new", "node": "tcp://n:26657"})

        assert updated.chain_id == "old"
        assert updated.node_uri == "tcp://n:26657"

    def test_none_and_empty_values_ignored(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path)
        updated = read_persistent_command_flags(
            ctx, {"chain_id": None, "output": ""}, changed={"chain_id", "output"}
        )
        assert updated is ctx

    def test_home_flag_becomes_path(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path)
        updated = read_persistent_command_flags(ctx, {"home": "~/other"}, changed={"home"})
        assert updated.home_dir == Path("~/other").expanduser()

    @pytest.mark.parametrize(
        ("flag", "value"),
        [
            ("output", "yaml"),
            ("keyring_backend", "os"),
            ("node", "localhost:26657"),
        ],
    )
    def test_invalid_values_raise(self, tmp_path: Path, flag: str, value: str) -> None:
        ctx = ClientContext(home_dir=tmp_path)
        with pytest.raises(FlagParseError) as exc_info:
            read_persistent_command_flags(ctx, {flag: value}, changed={flag})
        assert exc_info.value.flag == flag

    def test_log_flags_are_not_client_fields(self, tmp_path: Path) -> None:
        ctx = ClientContext(home_dir=tmp_path)
        updated = read_persistent_command_flags(
            ctx, {"log_level": "debug", "log_format": "plain"}, changed={"log_level"}
        )
        assert updated is ctx
