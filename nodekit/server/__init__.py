"""Server-side configuration: app/consensus config models and interception."""

from nodekit.server.config import (
    BEACON_KIT_CONFIG_TEMPLATE,
    DEFAULT_APP_CONFIG_TEMPLATE,
    DEFAULT_COMET_CONFIG_TEMPLATE,
    AppConfig,
    CometConfig,
)
from nodekit.server.intercept import (
    ServerContext,
    get_server_context_from_cmd,
    intercept_configs_pre_run_handler,
)

__all__ = [
    "AppConfig",
    "BEACON_KIT_CONFIG_TEMPLATE",
    "CometConfig",
    "DEFAULT_APP_CONFIG_TEMPLATE",
    "DEFAULT_COMET_CONFIG_TEMPLATE",
    "ServerContext",
    "get_server_context_from_cmd",
    "intercept_configs_pre_run_handler",
]
