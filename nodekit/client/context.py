"""Client context threaded through every command invocation.

The context is immutable: each step of the pre-run hook derives a new value
with :meth:`ClientContext.model_copy` rather than mutating the previous one.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from nodekit.errors import FlagParseError
from nodekit.keyring import KEYRING_BACKENDS, Keyring
from nodekit.tx import TxConfig

OUTPUT_FORMATS = ("text", "json")
BROADCAST_MODES = ("sync", "async")
NODE_URI_SCHEMES = ("tcp://", "http://", "https://", "unix://")

# Persistent flag name -> ClientContext field.
FLAG_HOME = "home"
FLAG_CHAIN_ID = "chain_id"
FLAG_KEYRING_BACKEND = "keyring_backend"
FLAG_KEYRING_DIR = "keyring_dir"
FLAG_OUTPUT = "output"
FLAG_NODE = "node"

PERSISTENT_FLAGS = {
    FLAG_HOME: "home_dir",
    FLAG_CHAIN_ID: "chain_id",
    FLAG_KEYRING_BACKEND: "keyring_backend",
    FLAG_KEYRING_DIR: "keyring_dir",
    FLAG_OUTPUT: "output_format",
    FLAG_NODE: "node_uri",
}


class ClientContext(BaseModel):
    """Everything a client-side command needs to know about its environment."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    home_dir: Path
    chain_id: str = ""
    keyring_backend: str = ""
    keyring_dir: Path | None = None
    keyring_default_keyname: str = ""
    output_format: str = ""
    node_uri: str = ""
    broadcast_mode: str = "sync"
    tx_config: TxConfig | None = None
    keyring: Keyring | None = None
    client_config: Any = None

    @property
    def config_dir(self) -> Path:
        return self.home_dir / "config"

    @property
    def effective_keyring_dir(self) -> Path:
        return self.keyring_dir or self.home_dir

    def with_updates(self, **changes: Any) -> ClientContext:
        """Return a copy with ``changes`` applied."""
        return self.model_copy(update=changes)

    def describe(self) -> dict[str, Any]:
        """Return the plain, comparable fields of the context."""
        return self.model_dump(mode="json", exclude={"tx_config", "keyring", "client_config"})


def _validate_flag(flag: str, value: Any) -> Any:
    if flag in (FLAG_HOME, FLAG_KEYRING_DIR):
        return Path(value).expanduser()
    if flag == FLAG_OUTPUT and value not in OUTPUT_FORMATS:
        raise FlagParseError(
            f"invalid --output {value!r}: expected one of {', '.join(OUTPUT_FORMATS)}",
            flag=flag,
        )
    if flag == FLAG_KEYRING_BACKEND and value not in KEYRING_BACKENDS:
        raise FlagParseError(
            f"invalid --keyring-backend {value!r}: expected one of {', '.join(KEYRING_BACKENDS)}",
            flag=flag,
        )
    if flag == FLAG_NODE and not str(value).startswith(NODE_URI_SCHEMES):
        raise FlagParseError(
            f"invalid --node {value!r}: expected a tcp://, http(s):// or unix:// address",
            flag=flag,
        )
    return value


def read_persistent_command_flags(
    client_ctx: ClientContext,
    flags: Mapping[str, Any],
    changed: frozenset[str] | set[str] = frozenset(),
) -> ClientContext:
    """Apply persistent flag values to ``client_ctx``.

    A flag overrides the context when it was explicitly set (listed in
    ``changed``) or when the corresponding context field is still empty.
    Flags whose value is ``None`` are ignored.

    Args:
        client_ctx: Context to derive from.
        flags: Parsed flag values keyed by parameter name.
        changed: Names of flags set on the command line or through the environment.

    Returns:
        A new context; ``client_ctx`` is left untouched.

    Raises:
        FlagParseError: If a flag value is not acceptable.
    """
    updates: dict[str, Any] = {}
    for flag, field_name in PERSISTENT_FLAGS.items():
        value = flags.get(flag)
        if value is None or value == "":
            continue
        current = getattr(client_ctx, field_name)
        if flag in changed or current in (None, ""):
            updates[field_name] = _validate_flag(flag, value)

    if not updates:
        return client_ctx
    return client_ctx.with_updates(**updates)


__all__ = [
    "BROADCAST_MODES",
    "ClientContext",
    "NODE_URI_SCHEMES",
    "OUTPUT_FORMATS",
    "PERSISTENT_FLAGS",
    "read_persistent_command_flags",
]
