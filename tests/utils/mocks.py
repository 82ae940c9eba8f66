"""Helper functions for constructing common test doubles."""

from pathlib import Path
from typing import Any

import typer

from nodekit.client.context import ClientContext
from nodekit.module import AppModule


def make_client_context(home: Path, **overrides: Any) -> ClientContext:
    """Create a client context rooted at ``home``."""
    return ClientContext(home_dir=home, **overrides)


class StubModule(AppModule):
    """Module with a single ``ping`` query command."""

    def __init__(self, name: str, with_tx: bool = False) -> None:
        self.name = name
        self._with_tx = with_tx

    def get_query_cmd(self) -> typer.Typer:
        app = typer.Typer(name=self.name, no_args_is_help=True)

        @app.command(name="ping")
        def ping() -> None:
            typer.echo(f"pong from {self.name}")

        return app

    def get_tx_cmd(self) -> typer.Typer | None:
        if not self._with_tx:
            return None
        app = typer.Typer(name=self.name, no_args_is_help=True)

        @app.command(name="send")
        def send() -> None:
            typer.echo("sent")

        return app

    def default_genesis(self) -> dict[str, Any]:
        return {"stub": True}

