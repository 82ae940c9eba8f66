"""Attach client state to a running command.

Streams and the client context are stored on the click context. ``ctx.meta``
is shared by a command and all of its descendants; ``ctx.obj`` is inherited by
child contexts, so anything installed on the root is visible to subcommands.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any, TextIO

import click

from nodekit.client.context import ClientContext, read_persistent_command_flags
from nodekit.keyring import Keyring

OUT_STREAM_KEY = "nodekit.out"
ERR_STREAM_KEY = "nodekit.err"
CLIENT_CONTEXT_KEY = "nodekit.client_context"

# Matched by member name; typer may bundle its own click and ParameterSource.
_EXPLICIT_SOURCES = frozenset({"COMMANDLINE", "ENVIRONMENT"})


def bind_cmd_streams(ctx: click.Context) -> None:
    """Bind the command's output and error streams unless an ancestor already did."""
    ctx.meta.setdefault(OUT_STREAM_KEY, sys.stdout)
    ctx.meta.setdefault(ERR_STREAM_KEY, sys.stderr)


def cmd_out(ctx: click.Context) -> TextIO:
    return ctx.meta.get(OUT_STREAM_KEY) or sys.stdout


def cmd_err(ctx: click.Context) -> TextIO:
    return ctx.meta.get(ERR_STREAM_KEY) or sys.stderr


def changed_flags(ctx: click.Context) -> frozenset[str]:
    """Return the names of parameters set on the command line or via the environment."""
    explicit = set()
    for name in ctx.params:
        source = ctx.get_parameter_source(name)
        if source is not None and source.name in _EXPLICIT_SOURCES:
            explicit.add(name)
    return frozenset(explicit)


def _with_keyring(client_ctx: ClientContext) -> ClientContext:
    keyring = client_ctx.keyring
    wanted_dir = client_ctx.effective_keyring_dir
    if not client_ctx.keyring_backend:
        return client_ctx
    if (
        keyring is not None
        and keyring.backend == client_ctx.keyring_backend
        and (keyring.directory is None or keyring.directory.parent == wanted_dir)
    ):
        return client_ctx
    return client_ctx.with_updates(keyring=Keyring(client_ctx.keyring_backend, wanted_dir))


def set_cmd_client_context_handler(
    client_ctx: ClientContext,
    ctx: click.Context,
    flags: Mapping[str, Any] | None = None,
) -> ClientContext:
    """Install ``client_ctx`` on ``ctx`` for the command and its descendants.

    Explicitly set persistent flags are applied once more so they take
    precedence over values read from ``client.toml``.

    Returns:
        The context that was installed.

    Raises:
        FlagParseError: If a flag value is not acceptable.
        KeyringError: If the keyring selected by the flags cannot be opened.
    """
    params = ctx.params if flags is None else flags
    installed = _with_keyring(read_persistent_command_flags(client_ctx, params, changed_flags(ctx)))

    ctx.obj = installed
    ctx.meta[CLIENT_CONTEXT_KEY] = installed
    return installed


def get_client_context_from_cmd(ctx: click.Context) -> ClientContext:
    """Return the client context installed on ``ctx`` or one of its ancestors.

    Raises:
        RuntimeError: If the pre-run hook has not installed a context.
    """
    installed = ctx.meta.get(CLIENT_CONTEXT_KEY)
    if isinstance(installed, ClientContext):
        return installed
    found = ctx.find_object(ClientContext)
    if found is None:
        raise RuntimeError("no client context installed on this command")
    return found


__all__ = [
    "CLIENT_CONTEXT_KEY",
    "ERR_STREAM_KEY",
    "OUT_STREAM_KEY",
    "bind_cmd_streams",
    "changed_flags",
    "cmd_err",
    "cmd_out",
    "get_client_context_from_cmd",
    "set_cmd_client_context_handler",
]
