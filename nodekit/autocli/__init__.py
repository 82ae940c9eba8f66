"""Automatic CLI bindings for application modules.

``AppOptions.enhance_root_command`` mounts every module's query and tx
sub-apps under the root's ``query`` and ``tx`` groups, creating those groups
when the default setup did not.
"""

from __future__ import annotations

from dataclasses import dataclass

import typer

from nodekit.cli.tree import find_group, registered_names
from nodekit.client.context import ClientContext
from nodekit.common.logging import get_logger
from nodekit.errors import EnhancementError
from nodekit.keyring import Keyring
from nodekit.module import ModuleManager

logger = get_logger(__name__)

QUERY_GROUP = "query"
TX_GROUP = "tx"


@dataclass
class AppOptions:
    """Inputs for binding module commands onto the root command."""

    module_manager: ModuleManager
    client_ctx: ClientContext
    keyring: Keyring | None = None

    def enhance_root_command(self, root: typer.Typer) -> None:
        """Bind module commands onto ``root``.

        Raises:
            EnhancementError: If a module's command name is already taken in
                the group it would be mounted in.
        """
        query_group = self._ensure_group(root, QUERY_GROUP, "Querying subcommands")
        tx_group = self._ensure_group(root, TX_GROUP, "Transactions subcommands")

        for module in self.module_manager:
            self._mount(query_group, QUERY_GROUP, module.name, module.get_query_cmd())
            self._mount(tx_group, TX_GROUP, module.name, module.get_tx_cmd())

    @staticmethod
    def _ensure_group(root: typer.Typer, name: str, help_text: str) -> typer.Typer:
        group = find_group(root, name)
        if group is not None:
            return group
        if name in registered_names(root):
            raise EnhancementError(f"cannot add {name!r} group: a command with that name already exists")
        group = typer.Typer(name=name, help=help_text, no_args_is_help=True)
        root.add_typer(group, name=name)
        return group

    @staticmethod
    def _mount(group: typer.Typer, group_name: str, module_name: str, sub_app: typer.Typer | None) -> None:
        if sub_app is None:
            return
        if module_name in registered_names(group):
            raise EnhancementError(
                f"module {module_name!r}: {group_name} command {module_name!r} already registered"
            )
        group.add_typer(sub_app, name=module_name)
        logger.debug("Mounted module command", extra={"module": module_name, "group": group_name})


__all__ = ["AppOptions", "QUERY_GROUP", "TX_GROUP"]
