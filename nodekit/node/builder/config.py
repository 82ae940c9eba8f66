"""Default app and consensus configuration for nodes built by ``NodeBuilder``."""

from nodekit.server.config import (
    BEACON_KIT_CONFIG_TEMPLATE,
    DEFAULT_APP_CONFIG_TEMPLATE,
    AppConfig,
    CometConfig,
    ConsensusConfig,
)


def default_app_config_template() -> str:
    """Return the app.toml template: base settings plus the beacon-kit section."""
    return DEFAULT_APP_CONFIG_TEMPLATE + BEACON_KIT_CONFIG_TEMPLATE


def default_app_config() -> AppConfig:
    """Return app.toml defaults; telemetry stays off and gas is free."""
    return AppConfig(minimum_gas_prices="0stake")


def default_comet_config() -> CometConfig:
    """Return config.toml defaults with consensus timeouts tuned for short blocks."""
    return CometConfig(
        consensus=ConsensusConfig(
            timeout_propose="2s",
            timeout_prevote="1s",
            timeout_precommit="1s",
            timeout_commit="500ms",
        ),
    )


__all__ = ["default_app_config", "default_app_config_template", "default_comet_config"]
