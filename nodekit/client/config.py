"""Client configuration file (``config/client.toml``).

The file is written from a template the first time a command runs against a
home directory, then read back on every invocation and merged into the
client context.
"""

from __future__ import annotations

import tomllib

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from nodekit.client.context import BROADCAST_MODES, NODE_URI_SCHEMES, OUTPUT_FORMATS, ClientContext
from nodekit.common.logging import get_logger
from nodekit.common.template import TemplateError, load_toml, write_template
from nodekit.errors import ConfigurationError, KeyringError
from nodekit.keyring import KEYRING_BACKENDS, Keyring

logger = get_logger(__name__)

CLIENT_CONFIG_FILE = "client.toml"

DEFAULT_CLIENT_CONFIG_TEMPLATE = """\
# This is a TOML config file.
# For more information, see https://github.com/toml-lang/toml

###############################################################################
###                           Client Configuration                          ###
###############################################################################

# The network chain ID
chain-id = {{ chain_id }}
# The keyring's backend, where the keys are stored (memory|test)
keyring-backend = {{ keyring_backend }}
# Default key name, if set, defines the default key to use for signing transactions
keyring-default-keyname = {{ keyring_default_keyname }}
# CLI output format (text|json)
output = {{ output }}
# <host>:<port> to CometBFT RPC interface for this chain
node = {{ node }}
# Transaction broadcasting mode (sync|async)
broadcast-mode = {{ broadcast_mode }}
"""


class ClientConfig(BaseModel):
    """Values persisted in ``client.toml``.

    Custom client configs subclass this and extend the template.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    chain_id: str = ""
    keyring_backend: str = "test"
    keyring_default_keyname: str = ""
    output: str = "text"
    node: str = "tcp://localhost:26657"
    broadcast_mode: str = "sync"

    @field_validator("keyring_backend")
    @classmethod
    def _validate_keyring_backend(cls, value: str) -> str:
        if value not in KEYRING_BACKENDS:
            raise ValueError(f"must be one of {', '.join(KEYRING_BACKENDS)}")
        return value

    @field_validator("output")
    @classmethod
    def _validate_output(cls, value: str) -> str:
        if value not in OUTPUT_FORMATS:
            raise ValueError(f"must be one of {', '.join(OUTPUT_FORMATS)}")
        return value

    @field_validator("node")
    @classmethod
    def _validate_node(cls, value: str) -> str:
        if not value.startswith(NODE_URI_SCHEMES):
            raise ValueError("must be a tcp://, http(s):// or unix:// address")
        return value

    @field_validator("broadcast_mode")
    @classmethod
    def _validate_broadcast_mode(cls, value: str) -> str:
        if value not in BROADCAST_MODES:
            raise ValueError(f"must be one of {', '.join(BROADCAST_MODES)}")
        return value


def _normalize_keys(data: dict[str, object]) -> dict[str, object]:
    return {key.replace("-", "_"): value for key, value in data.items()}


def create_client_config(
    client_ctx: ClientContext,
    custom_template: str,
    custom_config: ClientConfig | None,
) -> ClientContext:
    """Read (or create) ``client.toml`` and merge it into ``client_ctx``.

    An empty ``custom_template`` selects the default template and defaults.

    Args:
        client_ctx: Context to derive from; its home directory locates the file.
        custom_template: Template used when the file does not exist yet.
        custom_config: Default values rendered into the template.

    Returns:
        A new context carrying the file's values, the parsed config and a keyring.

    Raises:
        ConfigurationError: If the file cannot be written, parsed or validated.
    """
    template = custom_template or DEFAULT_CLIENT_CONFIG_TEMPLATE
    defaults = custom_config if custom_template and custom_config is not None else ClientConfig()
    config_type = type(defaults)

    path = client_ctx.config_dir / CLIENT_CONFIG_FILE
    if not path.exists():
        if not defaults.chain_id and client_ctx.chain_id:
            defaults = defaults.model_copy(update={"chain_id": client_ctx.chain_id})
        try:
            write_template(path, template, defaults)
        except (OSError, TemplateError) as exc:
            raise ConfigurationError(f"failed to write {path}: {exc}", path=str(path)) from exc
        logger.info("Wrote default client config", extra={"path": str(path)})

    try:
        config = config_type.model_validate(_normalize_keys(load_toml(path)))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"failed to read {path}: {exc}", path=str(path)) from exc
    except ValidationError as exc:
        raise ConfigurationError(f"invalid client config {path}: {exc}", path=str(path)) from exc

    keyring_dir = client_ctx.effective_keyring_dir
    try:
        keyring = Keyring(config.keyring_backend, keyring_dir)
    except KeyringError as exc:
        raise ConfigurationError(str(exc), path=str(path)) from exc

    return client_ctx.with_updates(
        chain_id=config.chain_id,
        keyring_backend=config.keyring_backend,
        keyring_default_keyname=config.keyring_default_keyname,
        keyring_dir=keyring_dir,
        output_format=config.output,
        node_uri=config.node,
        broadcast_mode=config.broadcast_mode,
        keyring=keyring,
        client_config=config,
    )


__all__ = [
    "CLIENT_CONFIG_FILE",
    "ClientConfig",
    "DEFAULT_CLIENT_CONFIG_TEMPLATE",
    "create_client_config",
]
