"""``init`` command.

Initializes a node home directory:
1. Records the moniker in ``config/config.toml``
2. Writes ``config/genesis.json`` from the chain spec and module defaults
3. Creates the ``data`` directory
"""

import json
from datetime import UTC, datetime
from pathlib import Path

import typer
from rich.console import Console

from nodekit.chainspec import ChainSpec
from nodekit.client.cmd import cmd_err, cmd_out, get_client_context_from_cmd
from nodekit.common.logging import get_logger
from nodekit.common.template import write_template
from nodekit.module import ModuleManager
from nodekit.server.config import DEFAULT_COMET_CONFIG_TEMPLATE
from nodekit.server.intercept import COMET_CONFIG_FILE, get_server_context_from_cmd

logger = get_logger(__name__)

GENESIS_FILE = "genesis.json"


def build_genesis(chain_id: str, chain_spec: ChainSpec, module_manager: ModuleManager) -> dict:
    """Return the genesis document for ``chain_id``."""
    return {
        "chain_id": chain_id,
        "genesis_time": datetime.now(UTC).isoformat(),
        "chain_spec": chain_spec.model_dump(),
        "app_state": module_manager.default_genesis(),
    }


def init_command(
    ctx: typer.Context,
    moniker: str,
    chain_spec: ChainSpec,
    module_manager: ModuleManager,
    overwrite: bool = False,
) -> Path:
    """Initialize the node's configuration and genesis files.

    Exits with code 1 if genesis already exists and ``overwrite`` is not set.

    Returns:
        Path of the written genesis file.
    """
    client_ctx = get_client_context_from_cmd(ctx)
    server_ctx = get_server_context_from_cmd(ctx)
    console = Console(file=cmd_out(ctx), soft_wrap=True)
    err_console = Console(file=cmd_err(ctx), soft_wrap=True)

    genesis_path = server_ctx.config_dir / GENESIS_FILE
    if genesis_path.exists() and not overwrite:
        err_console.print(
            f"[red]genesis.json already exists at {genesis_path}; use --overwrite to replace it[/red]"
        )
        raise typer.Exit(1)

    comet = server_ctx.comet_config.model_copy(update={"moniker": moniker})
    write_template(server_ctx.config_dir / COMET_CONFIG_FILE, DEFAULT_COMET_CONFIG_TEMPLATE, comet)

    chain_id = client_ctx.chain_id or f"beacon-{chain_spec.name}-{chain_spec.deposit_eth1_chain_id}"
    genesis = build_genesis(chain_id, chain_spec, module_manager)
    genesis_path.write_text(json.dumps(genesis, indent=2), encoding="utf-8")
    (server_ctx.home_dir / "data").mkdir(parents=True, exist_ok=True)

    logger.info(
        "Initialized node home",
        extra={"home": str(server_ctx.home_dir), "moniker": moniker, "chain_id": chain_id},
    )
    if client_ctx.output_format == "json":
        console.print(
            json.dumps({"moniker": moniker, "chain_id": chain_id, "genesis": str(genesis_path)}),
            markup=False,
            highlight=False,
        )
    else:
        console.print(f"Initialized node {moniker} ({chain_id}) at {server_ctx.home_dir}", markup=False)
    return genesis_path
