"""Functional options for ``NodeBuilder``.

Options are applied in the order given to :func:`nodekit.node.builder.new`;
later options overwrite fields set by earlier ones.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from nodekit.cli.commands import RootCommandSetup
from nodekit.depinject import Config

if TYPE_CHECKING:
    from nodekit.node.builder import NodeBuilder

Opt = Callable[["NodeBuilder[Any]"], None]


def with_name(name: str) -> Opt:
    """Set the program name used as the root command name."""

    def apply(nb: NodeBuilder[Any]) -> None:
        nb.name = name

    return apply


def with_description(description: str) -> Opt:
    """Set the one-line description shown in root help."""

    def apply(nb: NodeBuilder[Any]) -> None:
        nb.description = description

    return apply


def with_depinject_config(config: Config) -> Opt:
    """Set the base resolver config (modules, autocli options, ...)."""

    def apply(nb: NodeBuilder[Any]) -> None:
        nb.depinject_config = config

    return apply


def with_components(*components: Any) -> Opt:
    """Replace the extra components registered when the application is created.

    Callables are registered as providers, anything else as supplied values.
    """

    def apply(nb: NodeBuilder[Any]) -> None:
        nb.components = list(components)

    return apply


def with_root_command_setup(setup: RootCommandSetup) -> Opt:
    """Replace the routine that registers the default subcommands."""

    def apply(nb: NodeBuilder[Any]) -> None:
        nb.root_command_setup = setup

    return apply


__all__ = [
    "Opt",
    "with_components",
    "with_depinject_config",
    "with_description",
    "with_name",
    "with_root_command_setup",
]
