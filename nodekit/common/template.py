"""TOML configuration templates.

Templates are TOML documents with ``{{ dotted.path }}`` placeholders. Each
placeholder is replaced by the TOML literal of the value found at that path in
the config model, so a rendered template always parses back to the model it
was rendered from.
"""

from __future__ import annotations

import json
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel

_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*\.?([A-Za-z_][\w.\-]*)\s*\}\}")


class TemplateError(ValueError):
    """Raised when template rendering fails."""


def toml_literal(value: Any) -> str:
    """Return ``value`` encoded as a TOML literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, Path):
        return json.dumps(str(value))
    if isinstance(value, list | tuple):
        return "[" + ", ".join(toml_literal(item) for item in value) + "]"
    if value is None:
        return '""'
    raise TemplateError(f"cannot encode {type(value).__name__} as TOML")


def _lookup(context: Mapping[str, Any], path: str) -> Any:
    node: Any = context
    for part in path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            raise TemplateError(f"unknown template key: {path}")
        node = node[part]
    return node


def render_template(template: str, config: BaseModel | Mapping[str, Any]) -> str:
    """Render ``template`` against ``config``.

    Raises:
        TemplateError: If a placeholder names a key the config does not have.
    """
    context = config.model_dump(mode="python") if isinstance(config, BaseModel) else config

    def _replace(match: re.Match[str]) -> str:
        return toml_literal(_lookup(context, match.group(1)))

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


def load_toml(path: Path) -> dict[str, Any]:
    """Load and decode a TOML mapping from ``path``."""
    with path.open("rb") as handle:
        return tomllib.load(handle)


def write_template(path: Path, template: str, config: BaseModel) -> None:
    """Render ``template`` with ``config`` and write it to ``path``."""
    rendered = render_template(template, config)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(rendered, encoding="utf-8")


__all__ = ["TemplateError", "load_toml", "render_template", "toml_literal", "write_template"]
