"""beacond entry point: build the default node and run it."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from rich.console import Console

from nodekit.common.config import ensure_env_loaded
from nodekit.components import default_components, default_depinject_config
from nodekit.errors import NodeKitError
from nodekit.node import Node, new_node
from nodekit.node.builder import (
    new,
    with_components,
    with_depinject_config,
    with_description,
    with_name,
)

NODE_NAME = "beacond"
NODE_DESCRIPTION = "beacond is a beacon node for any beacon-kit chain"

err_console = Console(stderr=True)


def build_node() -> Node:
    """Build the default ``beacond`` node."""
    nb = new(
        with_name(NODE_NAME),
        with_description(NODE_DESCRIPTION),
        with_depinject_config(default_depinject_config()),
        with_components(*default_components()),
        node_factory=new_node,
    )
    return nb.build()


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    return exc.code if isinstance(exc.code, int) else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``beacond`` and return the process exit code.

    Usage errors, aborts and explicit exits are reported by the command
    itself and surface here as ``SystemExit``.
    """
    ensure_env_loaded()
    try:
        node = build_node()
        node.run(argv)
    except SystemExit as exc:
        return _exit_code(exc)
    except NodeKitError as exc:
        err_console.print(f"[red]✗ {type(exc).__name__}:[/red] {exc}", highlight=False)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
