"""``start`` command.

Creates the runtime application through the builder's app creator, starts it
and blocks until it stops or the process receives SIGINT/SIGTERM.
"""

import signal
from types import FrameType

import typer

from nodekit.cli.commands import AppCreator
from nodekit.server.intercept import get_server_context_from_cmd


def start_command(ctx: typer.Context, app_creator: AppCreator) -> None:
    """Run the node application in the foreground."""
    server_ctx = get_server_context_from_cmd(ctx)
    application = app_creator(server_ctx.logger, server_ctx.settings)

    def _shutdown(signum: int, _frame: FrameType | None) -> None:
        server_ctx.logger.info("Received shutdown signal", extra={"signal": signum})
        application.stop()

    previous = {sig: signal.signal(sig, _shutdown) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        application.start()
        while not application.wait(timeout=0.5):
            pass
    finally:
        application.stop()
        for sig, handler in previous.items():
            signal.signal(sig, handler)
