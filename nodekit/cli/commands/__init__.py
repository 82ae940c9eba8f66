"""Default node commands.

This package contains the command implementations every node gets:
- init: initialize the home directory and genesis
- start: run the node application
- keys: manage keys in the client keyring
- config: show effective configuration
- version: print version information

Shared sub-apps are created here once and mounted on each root command by
``default_root_command_setup``.
"""

from __future__ import annotations

from collections.abc import Callable

import typer

from nodekit.app import Application
from nodekit.chainspec import ChainSpec
from nodekit.module import ModuleManager

AppCreator = Callable[..., Application]
RootCommandSetup = Callable[[typer.Typer, ModuleManager, AppCreator, ChainSpec], None]

keys_app = typer.Typer(name="keys", help="Manage your application's keys", no_args_is_help=True)
config_app = typer.Typer(name="config", help="Inspect node configuration", no_args_is_help=True)


@keys_app.command(name="add")
def keys_add(ctx: typer.Context, name: str = typer.Argument(..., help="Name of the key")) -> None:
    """Generate a new key and store it under NAME."""
    from nodekit.cli.commands.keys import add_key_command

    add_key_command(ctx, name)


@keys_app.command(name="list")
def keys_list(ctx: typer.Context) -> None:
    """List all keys."""
    from nodekit.cli.commands.keys import list_keys_command

    list_keys_command(ctx)


@keys_app.command(name="show")
def keys_show(ctx: typer.Context, name: str = typer.Argument(..., help="Name of the key")) -> None:
    """Show key info for NAME."""
    from nodekit.cli.commands.keys import show_key_command

    show_key_command(ctx, name)


@keys_app.command(name="delete")
def keys_delete(ctx: typer.Context, name: str = typer.Argument(..., help="Name of the key")) -> None:
    """Delete the key stored under NAME."""
    from nodekit.cli.commands.keys import delete_key_command

    delete_key_command(ctx, name)


@config_app.command(name="show")
def config_show(
    ctx: typer.Context,
    section: str = typer.Argument("client", help="Section to show (client, app or comet)"),
) -> None:
    """Print the effective configuration for SECTION as JSON.

    Examples:
        beacond config show
        beacond config show comet
    """
    from nodekit.cli.commands.config import show_config_command

    if section not in ("client", "app", "comet"):
        raise typer.BadParameter("expected one of client, app, comet", param_hint="SECTION")
    show_config_command(ctx, section)


def default_root_command_setup(
    root: typer.Typer,
    module_manager: ModuleManager,
    app_creator: AppCreator,
    chain_spec: ChainSpec,
) -> None:
    """Register the default node commands on ``root``.

    Args:
        root: Root command to extend.
        module_manager: Modules contributing genesis state to ``init``.
        app_creator: Factory ``start`` uses to build the runtime application.
        chain_spec: Chain spec written into genesis by ``init``.
    """

    @root.command(name="init")
    def init(
        ctx: typer.Context,
        moniker: str = typer.Argument(..., help="Human readable name for this node"),
        overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite an existing genesis file"),
    ) -> None:
        """Initialize the node's configuration files and genesis.

        Examples:
            beacond init my-node
            beacond --chain-id beacon-80087 init my-node --overwrite
        """
        from nodekit.cli.commands.init import init_command

        init_command(ctx, moniker, chain_spec, module_manager, overwrite=overwrite)

    @root.command(name="start")
    def start(ctx: typer.Context) -> None:
        """Run the node in the foreground until interrupted."""
        from nodekit.cli.commands.start import start_command

        start_command(ctx, app_creator)

    @root.command(name="version")
    def version(
        ctx: typer.Context,
        long: bool = typer.Option(False, "--long", help="Print build details"),
    ) -> None:
        """Print the application binary version information."""
        from nodekit.cli.commands.version import version_command

        version_command(ctx, long=long)

    root.add_typer(keys_app, name="keys")
    root.add_typer(config_app, name="config")


__all__ = [
    "AppCreator",
    "RootCommandSetup",
    "config_app",
    "default_root_command_setup",
    "keys_app",
]
