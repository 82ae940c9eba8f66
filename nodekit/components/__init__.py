"""Providers wired into the dependency resolver.

Each ``provide_*`` function produces exactly one typed value; its parameters
are resolved from the same config. The builder registers the client-side
providers itself; ``default_depinject_config`` supplies the module-level ones
and ``default_components`` the runtime application.
"""

from __future__ import annotations

import logging

from nodekit.app import NodeApplication
from nodekit.autocli import AppOptions
from nodekit.chainspec import ChainSpec, chain_spec_for
from nodekit.client.config import DEFAULT_CLIENT_CONFIG_TEMPLATE, ClientConfig
from nodekit.client.context import ClientContext
from nodekit.common.config import get_config
from nodekit.common.settings import SettingsStore
from nodekit.components.modules import BeaconModule
from nodekit.depinject import Config, Provider, provide
from nodekit.keyring import Keyring
from nodekit.module import ModuleManager
from nodekit.server.config import AppConfig, normalize_keys
from nodekit.tx import TxConfig, noop_tx_config


def provide_noop_tx_config() -> TxConfig:
    return noop_tx_config()


def provide_client_context(tx_config: TxConfig) -> ClientContext:
    """Base client context; flags and client.toml refine it per invocation."""
    config = get_config()
    return ClientContext(
        home_dir=config.node_home,
        keyring_backend=config.keyring_backend,
        node_uri=config.node_rpc,
        tx_config=tx_config,
    )


def provide_keyring(client_ctx: ClientContext) -> Keyring:
    return Keyring(client_ctx.keyring_backend, client_ctx.effective_keyring_dir)


def provide_config(settings: SettingsStore) -> AppConfig:
    """Application config from whatever the settings store holds (defaults otherwise)."""
    return AppConfig.model_validate(normalize_keys(settings.all_settings()))


def provide_chain_spec() -> ChainSpec:
    """Chain spec selected by the ``CHAIN_SPEC`` environment variable."""
    return chain_spec_for(get_config().chain_spec)


def provide_module_manager(chain_spec: ChainSpec) -> ModuleManager:
    return ModuleManager([BeaconModule(chain_spec)])


def provide_autocli_options(
    module_manager: ModuleManager,
    client_ctx: ClientContext,
    keyring: Keyring,
) -> AppOptions:
    return AppOptions(module_manager=module_manager, client_ctx=client_ctx, keyring=keyring)


def provide_application(
    logger: logging.Logger,
    chain_spec: ChainSpec,
    module_manager: ModuleManager,
    app_config: AppConfig,
) -> NodeApplication:
    return NodeApplication(
        logger=logger,
        chain_spec=chain_spec,
        module_manager=module_manager,
        app_config=app_config,
    )


def init_client_config() -> tuple[str, ClientConfig]:
    """Return the client.toml template and defaults used by the pre-run hook."""
    return DEFAULT_CLIENT_CONFIG_TEMPLATE, ClientConfig(keyring_backend="test")


def default_depinject_config() -> Config:
    """Base resolver config providing the module manager and autocli options."""
    return provide(provide_module_manager, provide_autocli_options)


def default_components() -> list[Provider]:
    """Extra providers registered when the runtime application is created."""
    return [provide_application]


__all__ = [
    "default_components",
    "default_depinject_config",
    "init_client_config",
    "provide_application",
    "provide_autocli_options",
    "provide_chain_spec",
    "provide_client_context",
    "provide_config",
    "provide_keyring",
    "provide_module_manager",
    "provide_noop_tx_config",
]
