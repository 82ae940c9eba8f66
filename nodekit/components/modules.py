"""Modules bundled with the default node."""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console

from nodekit.chainspec import ChainSpec
from nodekit.client.cmd import cmd_out, get_client_context_from_cmd
from nodekit.module import AppModule


class BeaconModule(AppModule):
    """Consensus-layer module: exposes the chain spec to the CLI and genesis."""

    name = "beacon"

    def __init__(self, chain_spec: ChainSpec) -> None:
        self.chain_spec = chain_spec

    def get_query_cmd(self) -> typer.Typer:
        query_app = typer.Typer(name=self.name, help="Query the beacon module", no_args_is_help=True)
        chain_spec = self.chain_spec

        @query_app.command(name="chain-spec")
        def chain_spec_cmd(ctx: typer.Context) -> None:
            """Print the chain specification this node was built with."""
            client_ctx = get_client_context_from_cmd(ctx)
            console = Console(file=cmd_out(ctx), soft_wrap=True)
            if client_ctx.output_format == "json":
                console.print(json.dumps(chain_spec.model_dump(), sort_keys=True), markup=False)
                return
            for field_name, value in chain_spec.model_dump().items():
                console.print(f"{field_name}: {value}", markup=False, highlight=False)

        @query_app.command(name="fork")
        def fork_cmd(
            ctx: typer.Context,
            epoch: int = typer.Argument(..., min=0, help="Epoch to look up"),
        ) -> None:
            """Print the fork active at EPOCH."""
            console = Console(file=cmd_out(ctx), soft_wrap=True)
            console.print(chain_spec.active_fork_version(epoch), markup=False, highlight=False)

        return query_app

    def default_genesis(self) -> dict[str, Any]:
        return {
            "fork_version": self.chain_spec.genesis_fork_version,
            "deposits": [],
            "execution_payload_header": {},
        }


__all__ = ["BeaconModule"]
