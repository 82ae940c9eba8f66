"""Process configuration for nodekit.

Loads environment variables using pydantic-settings for type-safe configuration.
Covers the node home directory, chain spec selection and logging defaults.
"""

import os
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_LOADED = False
_ENV_LOCK = Lock()

DEFAULT_NODE_HOME = Path("~/.beacond").expanduser()


def _resolve_env_file() -> str | None:
    """Locate the .env file regardless of the current working directory.

    Preference order:
        1. NODEKIT_ENV_FILE environment variable (explicit override)
        2. Current working directory (common for local runs)
    """
    override = os.getenv("NODEKIT_ENV_FILE")
    if override:
        override_path = Path(override).expanduser()
        if override_path.is_file():
            return str(override_path)

    cwd_candidate = Path.cwd() / ".env"
    if cwd_candidate.is_file():
        return str(cwd_candidate)

    return None


def ensure_env_loaded() -> None:
    """Load environment variables from disk exactly once."""
    global _ENV_LOADED

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        env_path = _resolve_env_file()
        if env_path:
            load_dotenv(env_path, override=False)

        _ENV_LOADED = True


class NodeKitConfig(BaseSettings):
    """Process-level settings read from environment variables.

    Node-level settings (consensus, app, client) live in TOML files under the
    node home directory; these are only the knobs needed before those files
    can be located.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    node_home: Path = DEFAULT_NODE_HOME
    chain_spec: Literal["devnet", "testnet"] = "testnet"

    # ========== Observability ==========
    log_level: str = "INFO"
    log_format: Literal["json", "plain"] = "json"

    # ========== Client Defaults ==========
    keyring_backend: Literal["test", "memory"] = "test"
    node_rpc: str = Field(default="tcp://localhost:26657")

    @field_validator("node_home", mode="before")
    @classmethod
    def _expand_home(cls, value: object) -> object:
        if isinstance(value, str):
            return Path(value).expanduser()
        if isinstance(value, Path):
            return value.expanduser()
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return normalized


@lru_cache(maxsize=1)
def get_config() -> NodeKitConfig:
    """Return cached settings instance (process-local).

    Returns:
        NodeKitConfig: The configuration loaded from environment variables.
    """
    ensure_env_loaded()
    return NodeKitConfig()


__all__ = ["DEFAULT_NODE_HOME", "NodeKitConfig", "ensure_env_loaded", "get_config"]
