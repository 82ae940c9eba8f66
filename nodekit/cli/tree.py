"""Helpers for inspecting a typer command tree before it is executed."""

from __future__ import annotations

import typer


def _command_name(raw: str) -> str:
    return raw.lower().replace("_", "-")


def registered_commands(app: typer.Typer) -> dict[str, object]:
    """Return the names of commands registered directly on ``app``."""
    names: dict[str, object] = {}
    for info in app.registered_commands:
        name = info.name or (_command_name(info.callback.__name__) if info.callback else None)
        if name:
            names[name] = info
    return names


def registered_groups(app: typer.Typer) -> dict[str, typer.Typer]:
    """Return sub-apps registered directly on ``app``, keyed by name."""
    groups: dict[str, typer.Typer] = {}
    for info in app.registered_groups:
        instance = info.typer_instance
        if instance is None:
            continue
        name = next(
            (n for n in (info.name, instance.info.name) if isinstance(n, str) and n),
            None,
        )
        if name:
            groups[name] = instance
    return groups


def registered_names(app: typer.Typer) -> set[str]:
    return set(registered_commands(app)) | set(registered_groups(app))


def find_group(app: typer.Typer, name: str) -> typer.Typer | None:
    return registered_groups(app).get(name)


__all__ = ["find_group", "registered_commands", "registered_groups", "registered_names"]
