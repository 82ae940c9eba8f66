"""Node assembly.

``NodeBuilder`` resolves the node's dependencies, builds the root command
with its pre-run hook and default subcommands, enhances it with module
commands and attaches it to the node. A build either attaches a complete
root command or raises and leaves the node untouched.

Example:
    >>> from nodekit.components import default_components, default_depinject_config
    >>> nb = new(
    ...     with_name("beacond"),
    ...     with_description("beacond is a beacon node"),
    ...     with_depinject_config(default_depinject_config()),
    ...     with_components(*default_components()),
    ... )
    >>> node = nb.build()  # doctest: +SKIP
    >>> node.run()  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any, Generic

import click
import typer
from typer.core import TyperGroup

from nodekit import components
from nodekit.app import Application
from nodekit.autocli import AppOptions
from nodekit.chainspec import ChainSpec
from nodekit.cli.commands import RootCommandSetup, default_root_command_setup
from nodekit.client.cmd import bind_cmd_streams, changed_flags, set_cmd_client_context_handler
from nodekit.client.config import create_client_config
from nodekit.client.context import ClientContext, read_persistent_command_flags
from nodekit.common.logging import get_logger, new_logger
from nodekit.common.settings import SettingsStore, get_settings_store
from nodekit.common.tracing import generate_correlation_id, set_correlation_id
from nodekit.depinject import Config, configs, inject, provide, supply
from nodekit.module import ModuleManager
from nodekit.node import NodeT, new_node
from nodekit.node.builder.config import (
    default_app_config,
    default_app_config_template,
    default_comet_config,
)
from nodekit.node.builder.options import (
    Opt,
    with_components,
    with_depinject_config,
    with_description,
    with_name,
    with_root_command_setup,
)
from nodekit.server.intercept import intercept_configs_pre_run_handler

logger = get_logger(__name__)

HELP_ONLY_KEY = "nodekit.help_only"


class RootCommandGroup(TyperGroup):
    """Root group that notes when the invoked subcommand will only print help.

    The root callback runs before the subcommand parses its own arguments,
    so a trailing ``--help`` has to be spotted here.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        rest = super().parse_args(ctx, args)
        ctx.meta[HELP_ONLY_KEY] = _requests_help(rest, ctx.help_option_names)
        return rest


def _requests_help(args: list[str], help_names: list[str]) -> bool:
    for arg in args:
        if arg == "--":
            return False
        if arg in help_names:
            return True
    return False


class NodeBuilder(Generic[NodeT]):
    """Assembles a node's root command from resolved dependencies."""

    def __init__(self, node: NodeT) -> None:
        self.node = node
        self.name = ""
        self.description = ""
        self.depinject_config = Config()
        self.components: list[Any] = []
        self.root_command_setup: RootCommandSetup = default_root_command_setup

    def build(self) -> NodeT:
        """Build the root command and attach it to the node.

        Returns:
            The node with its root command set.

        Raises:
            ResolutionError: If a dependency cannot be resolved.
            EnhancementError: If module commands cannot be mounted.
        """
        root_cmd = self.build_root_cmd()
        self.node.set_root_cmd(root_cmd)
        logger.debug("Built node", extra={"node_name": self.name})
        return self.node

    def build_root_cmd(self) -> typer.Typer:
        """Resolve dependencies and assemble the enhanced root command."""
        base = configs(
            self.depinject_config,
            supply(new_logger(sys.stdout), get_settings_store()),
            self._client_providers(),
        )
        autocli_options, module_manager, client_ctx, chain_spec = inject(
            base,
            AppOptions,
            ModuleManager,
            ClientContext,
            ChainSpec,
        )

        root = typer.Typer(
            name=self.name,
            help=self.description,
            no_args_is_help=True,
            add_completion=False,
            cls=RootCommandGroup,
        )
        root.callback()(self._pre_run_hook(client_ctx))

        self.root_command_setup(root, module_manager, self.app_creator, chain_spec)
        autocli_options.enhance_root_command(root)
        return root

    def app_creator(self, logger: logging.Logger, settings: SettingsStore) -> Application:
        """Resolve the runtime application for ``start``."""
        cfg = configs(
            self.depinject_config,
            supply(logger, settings),
            self._client_providers(),
            *(
                provide(component) if callable(component) else supply(component)
                for component in self.components
            ),
        )
        (application,) = inject(cfg, Application)
        return application

    def _client_providers(self) -> Config:
        return provide(
            components.provide_noop_tx_config,
            components.provide_client_context,
            components.provide_keyring,
            components.provide_config,
            components.provide_chain_spec,
        )

    def _pre_run_hook(self, resolved_ctx: ClientContext) -> Callable[..., None]:
        env_prefix = self.name.replace("-", "_").upper()

        def envvar(flag: str) -> str | None:
            return f"{env_prefix}_{flag}" if env_prefix else None

        def pre_run(
            ctx: typer.Context,
            home: str | None = typer.Option(
                None, "--home", envvar=envvar("HOME"), help="Directory for config and data"
            ),
            chain_id: str | None = typer.Option(
                None, "--chain-id", envvar=envvar("CHAIN_ID"), help="The network chain ID"
            ),
            keyring_backend: str | None = typer.Option(
                None,
                "--keyring-backend",
                envvar=envvar("KEYRING_BACKEND"),
                help="Select keyring's backend (memory|test)",
            ),
            keyring_dir: str | None = typer.Option(
                None,
                "--keyring-dir",
                envvar=envvar("KEYRING_DIR"),
                help="The client keyring directory; if omitted, the home directory is used",
            ),
            output: str | None = typer.Option(
                None, "--output", "-o", envvar=envvar("OUTPUT"), help="Output format (text|json)"
            ),
            node: str | None = typer.Option(
                None, "--node", envvar=envvar("NODE"), help="<host>:<port> to the node's RPC interface"
            ),
            log_level: str | None = typer.Option(
                None, "--log-level", envvar=envvar("LOG_LEVEL"), help="The logging level"
            ),
            log_format: str | None = typer.Option(
                None, "--log-format", envvar=envvar("LOG_FORMAT"), help="The logging format (json|plain)"
            ),
        ) -> None:
            if ctx.meta.get(HELP_ONLY_KEY):
                return
            set_correlation_id(generate_correlation_id())
            bind_cmd_streams(ctx)

            client_ctx = read_persistent_command_flags(resolved_ctx, ctx.params, changed_flags(ctx))
            custom_template, custom_config = components.init_client_config()
            client_ctx = create_client_config(client_ctx, custom_template, custom_config)
            set_cmd_client_context_handler(client_ctx, ctx)

            intercept_configs_pre_run_handler(
                ctx,
                default_app_config_template(),
                default_app_config(),
                default_comet_config(),
            )

        return pre_run


def new(*opts: Opt, node_factory: Callable[[], NodeT] = new_node) -> NodeBuilder[NodeT]:
    """Create a builder for a fresh node and apply ``opts`` in order."""
    nb: NodeBuilder[NodeT] = NodeBuilder(node_factory())
    for opt in opts:
        opt(nb)
    return nb


__all__ = [
    "HELP_ONLY_KEY",
    "NodeBuilder",
    "RootCommandGroup",
    "Opt",
    "new",
    "with_components",
    "with_depinject_config",
    "with_description",
    "with_name",
    "with_root_command_setup",
]
