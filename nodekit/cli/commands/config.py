"""``config show`` command: print the effective configuration."""

import json

import typer
from rich.console import Console

from nodekit.client.cmd import cmd_out, get_client_context_from_cmd
from nodekit.server.intercept import get_server_context_from_cmd


def show_config_command(ctx: typer.Context, section: str) -> None:
    """Print one configuration section as JSON."""
    if section == "client":
        data = get_client_context_from_cmd(ctx).describe()
    elif section == "app":
        data = get_server_context_from_cmd(ctx).app_config.model_dump(mode="json")
    else:
        data = get_server_context_from_cmd(ctx).comet_config.model_dump(mode="json")

    console = Console(file=cmd_out(ctx), soft_wrap=True)
    console.print(json.dumps(data, indent=2, sort_keys=True), markup=False, highlight=False)
