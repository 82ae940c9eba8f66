"""Node types assembled by the builder.

A node is anything that can hold a root command. ``NodeI`` captures that
capability; ``Node`` is the default implementation used by the entry point.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, TypeVar, runtime_checkable

import typer


@runtime_checkable
class NodeI(Protocol):
    """Capability required of any node the builder can assemble."""

    @property
    def root_cmd(self) -> typer.Typer | None: ...

    def set_root_cmd(self, cmd: typer.Typer) -> None: ...


NodeT = TypeVar("NodeT", bound=NodeI)


class Node:
    """Default node: owns the root command and runs it."""

    def __init__(self) -> None:
        self._root_cmd: typer.Typer | None = None

    @property
    def root_cmd(self) -> typer.Typer | None:
        return self._root_cmd

    def set_root_cmd(self, cmd: typer.Typer) -> None:
        self._root_cmd = cmd

    def run(self, args: Sequence[str] | None = None, **extra: Any) -> Any:
        """Execute the root command with ``args`` (defaults to ``sys.argv``).

        Raises:
            RuntimeError: If no root command has been attached.
        """
        if self._root_cmd is None:
            raise RuntimeError("node has no root command; call NodeBuilder.build() first")
        return self._root_cmd(args=list(args) if args is not None else None, **extra)


def new_node() -> Node:
    return Node()


__all__ = ["Node", "NodeI", "NodeT", "new_node"]
