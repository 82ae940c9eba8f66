"""Application modules and the manager that orders them.

Modules contribute CLI commands (mounted under ``query`` and ``tx`` by the
autocli enhancement step) and genesis state (written by ``init``).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import typer


class AppModule:
    """Base class for application modules.

    Subclasses set ``name`` and override the hooks they need; every hook has
    a no-op default.
    """

    name: str = ""

    def get_query_cmd(self) -> typer.Typer | None:
        """Return the module's query sub-app, if it has one."""
        return None

    def get_tx_cmd(self) -> typer.Typer | None:
        """Return the module's transaction sub-app, if it has one."""
        return None

    def default_genesis(self) -> dict[str, Any]:
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class ModuleManager:
    """Ordered collection of uniquely named modules."""

    def __init__(self, modules: Iterable[AppModule] = ()) -> None:
        self._modules: dict[str, AppModule] = {}
        for module in modules:
            self.register(module)

    def register(self, module: AppModule) -> None:
        """Add ``module`` after the existing ones.

        Raises:
            ValueError: If the module has no name or the name is taken.
        """
        if not module.name:
            raise ValueError(f"module {module!r} has no name")
        if module.name in self._modules:
            raise ValueError(f"duplicate module name: {module.name}")
        self._modules[module.name] = module

    def get(self, name: str) -> AppModule:
        try:
            return self._modules[name]
        except KeyError:
            raise KeyError(f"unknown module: {name}") from None

    @property
    def module_names(self) -> list[str]:
        return list(self._modules)

    def default_genesis(self) -> dict[str, dict[str, Any]]:
        """Return every module's default genesis state keyed by module name."""
        return {name: module.default_genesis() for name, module in self._modules.items()}

    def __iter__(self) -> Iterator[AppModule]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules


__all__ = ["AppModule", "ModuleManager"]
