"""``version`` command."""

import json
import platform

import typer
from rich.console import Console

from nodekit import __version__
from nodekit.client.cmd import cmd_out, get_client_context_from_cmd


def version_command(ctx: typer.Context, long: bool = False) -> None:
    """Print the node version.

    Args:
        ctx: Running command context.
        long: Include build details.
    """
    console = Console(file=cmd_out(ctx), soft_wrap=True)
    info = {"name": ctx.find_root().info_name, "version": __version__}
    if long:
        info["python"] = platform.python_version()
        info["platform"] = platform.platform()

    if get_client_context_from_cmd(ctx).output_format == "json":
        console.print(json.dumps(info), markup=False, highlight=False)
    elif long:
        for key, value in info.items():
            console.print(f"{key}: {value}", markup=False, highlight=False)
    else:
        console.print(__version__, markup=False, highlight=False)
