"""Client-side state for node commands: context, flags and client.toml."""

from nodekit.client.cmd import (
    bind_cmd_streams,
    changed_flags,
    cmd_err,
    cmd_out,
    get_client_context_from_cmd,
    set_cmd_client_context_handler,
)
from nodekit.client.config import (
    DEFAULT_CLIENT_CONFIG_TEMPLATE,
    ClientConfig,
    create_client_config,
)
from nodekit.client.context import ClientContext, read_persistent_command_flags

__all__ = [
    "ClientConfig",
    "ClientContext",
    "DEFAULT_CLIENT_CONFIG_TEMPLATE",
    "bind_cmd_streams",
    "changed_flags",
    "cmd_err",
    "cmd_out",
    "create_client_config",
    "get_client_context_from_cmd",
    "read_persistent_command_flags",
    "set_cmd_client_context_handler",
]
