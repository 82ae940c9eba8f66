"""Configuration interception for the root pre-run hook.

Before any subcommand body runs, the node's consensus and application config
files are located under ``<home>/config``, written from their templates if
they do not exist yet, read back, overlaid with environment overrides and
validated. The result is stored on the command as a ``ServerContext``.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel, ValidationError
from pydantic_settings import SettingsError

from nodekit.client.cmd import cmd_err, get_client_context_from_cmd
from nodekit.common.logging import get_logger, setup_logging
from nodekit.common.settings import SettingsStore, load_settings
from nodekit.common.template import TemplateError, load_toml, write_template
from nodekit.errors import ConfigurationError
from nodekit.server.config import (
    DEFAULT_COMET_CONFIG_TEMPLATE,
    CometConfig,
    normalize_keys,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SERVER_CONTEXT_KEY = "nodekit.server_context"
APP_CONFIG_FILE = "app.toml"
COMET_CONFIG_FILE = "config.toml"

FLAG_LOG_LEVEL = "log_level"
FLAG_LOG_FORMAT = "log_format"


@dataclass
class ServerContext:
    """Validated node configuration for one command invocation."""

    home_dir: Path
    settings: SettingsStore
    comet_config: CometConfig
    app_config: BaseModel
    logger: logging.Logger

    @property
    def config_dir(self) -> Path:
        return self.home_dir / "config"


def env_prefix_for(ctx: click.Context) -> str:
    """Environment prefix derived from the root command name (``beacond`` -> ``BEACOND``)."""
    root = ctx.find_root()
    name = root.command.name or root.info_name or ""
    return name.replace("-", "_").upper()


def _load_or_write(
    path: Path,
    template: str,
    defaults: BaseModel,
) -> dict[str, Any]:
    if not path.exists():
        try:
            write_template(path, template, defaults)
        except (OSError, TemplateError) as exc:
            raise ConfigurationError(f"failed to write {path}: {exc}", path=str(path)) from exc
        logger.info("Wrote default config", extra={"path": str(path)})

    try:
        data = load_toml(path)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"failed to read {path}: {exc}", path=str(path)) from exc

    return normalize_keys(data)


def _validate(model: type[ModelT], data: dict[str, Any], path: Path, env_prefix: str) -> ModelT:
    try:
        return load_settings(model, data, env_prefix)
    except (ValidationError, SettingsError) as exc:
        raise ConfigurationError(f"invalid config {path}: {exc}", path=str(path)) from exc


def intercept_configs_pre_run_handler(
    ctx: click.Context,
    custom_app_template: str,
    custom_app_config: BaseModel,
    comet_config: CometConfig,
) -> ServerContext:
    """Load, default and validate the node's persisted configuration.

    Args:
        ctx: The running command's context. A client context must already
            be installed on it; its home directory locates the files.
        custom_app_template: Template for ``app.toml``.
        custom_app_config: Defaults rendered into ``app.toml``; its type is
            used to validate the file.
        comet_config: Defaults rendered into ``config.toml``.

    Returns:
        The server context, also stored on ``ctx.meta``.

    Raises:
        ConfigurationError: If a file cannot be written, parsed or validated,
            or if the logging flags are invalid.
    """
    client_ctx = get_client_context_from_cmd(ctx)
    home_dir = client_ctx.home_dir
    config_dir = home_dir / "config"
    env_prefix = env_prefix_for(ctx)

    comet_path = config_dir / COMET_CONFIG_FILE
    comet_data = _load_or_write(comet_path, DEFAULT_COMET_CONFIG_TEMPLATE, comet_config)
    comet = _validate(CometConfig, comet_data, comet_path, env_prefix)

    app_path = config_dir / APP_CONFIG_FILE
    app_data = _load_or_write(app_path, custom_app_template, custom_app_config)
    app_config = _validate(type(custom_app_config), app_data, app_path, env_prefix)

    settings = SettingsStore()
    settings.merge(comet.model_dump())
    settings.merge(app_config.model_dump())

    settings.set("home", str(home_dir))

    level = ctx.params.get(FLAG_LOG_LEVEL) or comet.log_level
    fmt = ctx.params.get(FLAG_LOG_FORMAT)
    try:
        server_logger = setup_logging(level=level, fmt=fmt, stream=cmd_err(ctx))
    except ValueError as exc:
        raise ConfigurationError(f"invalid logging flags: {exc}") from exc

    server_ctx = ServerContext(
        home_dir=home_dir,
        settings=settings,
        comet_config=comet,
        app_config=app_config,
        logger=server_logger,
    )
    ctx.meta[SERVER_CONTEXT_KEY] = server_ctx
    server_logger.debug(
        "Loaded node configuration",
        extra={"home": str(home_dir), "moniker": comet.moniker},
    )
    return server_ctx


def get_server_context_from_cmd(ctx: click.Context) -> ServerContext:
    """Return the server context installed by the pre-run hook.

    Raises:
        RuntimeError: If configuration has not been intercepted for this invocation.
    """
    server_ctx = ctx.meta.get(SERVER_CONTEXT_KEY)
    if not isinstance(server_ctx, ServerContext):
        raise RuntimeError("no server context installed on this command")
    return server_ctx


__all__ = [
    "APP_CONFIG_FILE",
    "COMET_CONFIG_FILE",
    "SERVER_CONTEXT_KEY",
    "ServerContext",
    "env_prefix_for",
    "get_server_context_from_cmd",
    "intercept_configs_pre_run_handler",
]
