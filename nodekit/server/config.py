"""Application (``app.toml``) and consensus (``config.toml``) configuration.

Both files are rendered from templates on first use and validated with
pydantic on every invocation.
"""

from __future__ import annotations

import re
import socket
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_DURATION_PATTERN = re.compile(r"^\d+(ms|s|m|h)$")
_LISTEN_SCHEMES = ("tcp://", "unix://")
_ENGINE_SCHEMES = ("http://", "https://", "ipc://")


def _check_duration(value: str) -> str:
    if not _DURATION_PATTERN.match(value):
        raise ValueError(f"invalid duration {value!r} (expected e.g. 500ms, 3s, 1m)")
    return value


def _check_listen_address(value: str) -> str:
    if not value.startswith(_LISTEN_SCHEMES):
        raise ValueError(f"invalid listen address {value!r} (expected tcp:// or unix://)")
    return value


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)


# ========== Consensus (config.toml) ==========


class P2PConfig(_Section):
    laddr: str = "tcp://0.0.0.0:26656"
    external_address: str = ""
    seeds: str = ""
    persistent_peers: str = ""
    max_num_inbound_peers: int = Field(default=40, ge=0)
    max_num_outbound_peers: int = Field(default=10, ge=0)
    pex: bool = True

    @field_validator("laddr")
    @classmethod
    def _validate_laddr(cls, value: str) -> str:
        return _check_listen_address(value)


class RPCConfig(_Section):
    laddr: str = "tcp://127.0.0.1:26657"
    cors_allowed_origins: list[str] = Field(default_factory=list)
    max_open_connections: int = Field(default=900, ge=0)

    @field_validator("laddr")
    @classmethod
    def _validate_laddr(cls, value: str) -> str:
        return _check_listen_address(value)


class ConsensusConfig(_Section):
    timeout_propose: str = "3s"
    timeout_prevote: str = "1s"
    timeout_precommit: str = "1s"
    timeout_commit: str = "1s"
    create_empty_blocks: bool = True

    @field_validator("timeout_propose", "timeout_prevote", "timeout_precommit", "timeout_commit")
    @classmethod
    def _validate_timeouts(cls, value: str) -> str:
        return _check_duration(value)


class CometConfig(_Section):
    """Consensus engine configuration persisted in ``config/config.toml``."""

    moniker: str = Field(default_factory=socket.gethostname)
    db_backend: Literal["goleveldb", "pebbledb", "memdb"] = "pebbledb"
    log_level: str = "info"
    p2p: P2PConfig = Field(default_factory=P2PConfig)
    rpc: RPCConfig = Field(default_factory=RPCConfig)
    consensus: ConsensusConfig = Field(default_factory=ConsensusConfig)

    @field_validator("moniker")
    @classmethod
    def _validate_moniker(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("moniker must not be empty")
        return value


# ========== Application (app.toml) ==========


class EngineConfig(_Section):
    rpc_dial_url: str = "http://localhost:8551"
    rpc_timeout: str = "900ms"
    jwt_secret_path: str = "./jwt.hex"

    @field_validator("rpc_dial_url")
    @classmethod
    def _validate_dial_url(cls, value: str) -> str:
        if not value.startswith(_ENGINE_SCHEMES):
            raise ValueError(f"invalid engine url {value!r} (expected http(s):// or ipc://)")
        return value

    @field_validator("rpc_timeout")
    @classmethod
    def _validate_timeout(cls, value: str) -> str:
        return _check_duration(value)


class PayloadBuilderConfig(_Section):
    enabled: bool = True
    suggested_fee_recipient: str = "0x0000000000000000000000000000000000000000"

    @field_validator("suggested_fee_recipient")
    @classmethod
    def _validate_fee_recipient(cls, value: str) -> str:
        if not re.fullmatch(r"0x[0-9a-fA-F]{40}", value):
            raise ValueError("suggested_fee_recipient must be a 0x-prefixed 20-byte hex address")
        return value


class BeaconKitConfig(_Section):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    payload_builder: PayloadBuilderConfig = Field(default_factory=PayloadBuilderConfig)


class TelemetryConfig(_Section):
    enabled: bool = False
    service_name: str = ""
    prometheus_retention_time: int = Field(default=0, ge=0)


class AppConfig(_Section):
    """Application configuration persisted in ``config/app.toml``."""

    minimum_gas_prices: str = "0stake"
    pruning: Literal["default", "nothing", "everything", "custom"] = "default"
    pruning_keep_recent: int = Field(default=0, ge=0)
    pruning_interval: int = Field(default=0, ge=0)
    halt_height: int = Field(default=0, ge=0)
    min_retain_blocks: int = Field(default=0, ge=0)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    beacon_kit: BeaconKitConfig = Field(default_factory=BeaconKitConfig)

    @model_validator(mode="after")
    def _validate_pruning(self) -> AppConfig:
        if self.pruning == "custom" and self.pruning_interval < 10:
            raise ValueError("pruning-interval must be at least 10 with custom pruning")
        return self


DEFAULT_COMET_CONFIG_TEMPLATE = """\
# This is a TOML config file.
# For more information, see https://github.com/toml-lang/toml

# A custom human readable name for this node
moniker = {{ moniker }}

# Database backend: goleveldb | pebbledb | memdb
db_backend = {{ db_backend }}

# Output level for logging
log_level = {{ log_level }}

#######################################################
###       P2P Configuration Options                 ###
#######################################################
[p2p]

# Address to listen for incoming connections
laddr = {{ p2p.laddr }}

# Address to advertise to peers for them to dial
external_address = {{ p2p.external_address }}

# Comma separated list of seed nodes to connect to
seeds = {{ p2p.seeds }}

# Comma separated list of nodes to keep persistent connections to
persistent_peers = {{ p2p.persistent_peers }}

max_num_inbound_peers = {{ p2p.max_num_inbound_peers }}
max_num_outbound_peers = {{ p2p.max_num_outbound_peers }}

# Set true to enable the peer-exchange reactor
pex = {{ p2p.pex }}

#######################################################
###       RPC Server Configuration Options          ###
#######################################################
[rpc]

# TCP or UNIX socket address for the RPC server to listen on
laddr = {{ rpc.laddr }}

cors_allowed_origins = {{ rpc.cors_allowed_origins }}
max_open_connections = {{ rpc.max_open_connections }}

#######################################################
###         Consensus Configuration Options         ###
#######################################################
[consensus]

timeout_propose = {{ consensus.timeout_propose }}
timeout_prevote = {{ consensus.timeout_prevote }}
timeout_precommit = {{ consensus.timeout_precommit }}
timeout_commit = {{ consensus.timeout_commit }}

# EmptyBlocks mode
create_empty_blocks = {{ consensus.create_empty_blocks }}
"""

DEFAULT_APP_CONFIG_TEMPLATE = """\
# This is a TOML config file.
# For more information, see https://github.com/toml-lang/toml

###############################################################################
###                           Base Configuration                            ###
###############################################################################

# The minimum gas prices a validator is willing to accept for processing a
# transaction.
minimum-gas-prices = {{ minimum_gas_prices }}

# default | nothing | everything | custom
pruning = {{ pruning }}

# These are applied if and only if the pruning strategy is custom.
pruning-keep-recent = {{ pruning_keep_recent }}
pruning-interval = {{ pruning_interval }}

# HaltHeight contains a non-zero block height at which a node will gracefully
# halt and shutdown that can be used to assist upgrades and testing.
halt-height = {{ halt_height }}

# MinRetainBlocks defines the minimum block height offset from the current
# block being committed, such that all blocks past this offset are pruned.
min-retain-blocks = {{ min_retain_blocks }}

###############################################################################
###                         Telemetry Configuration                         ###
###############################################################################

[telemetry]

enabled = {{ telemetry.enabled }}
service-name = {{ telemetry.service_name }}
prometheus-retention-time = {{ telemetry.prometheus_retention_time }}
"""

BEACON_KIT_CONFIG_TEMPLATE = """
###############################################################################
###                                BeaconKit                                ###
###############################################################################

[beacon-kit.engine]
# HTTP url of the execution client JSON-RPC endpoint.
rpc-dial-url = {{ beacon_kit.engine.rpc_dial_url }}

# RPC timeout for execution client requests.
rpc-timeout = {{ beacon_kit.engine.rpc_timeout }}

# Path to the execution client JWT-secret
jwt-secret-path = {{ beacon_kit.engine.jwt_secret_path }}

[beacon-kit.payload-builder]
# Enabled determines if the local payload builder is enabled.
enabled = {{ beacon_kit.payload_builder.enabled }}

# Post bellatrix, this address will receive the transaction fees produced by
# any blocks from this node.
suggested-fee-recipient = {{ beacon_kit.payload_builder.suggested_fee_recipient }}
"""


def normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Convert dashed TOML keys to the underscore names used by the models."""
    return {
        str(key).replace("-", "_"): normalize_keys(value) if isinstance(value, Mapping) else value
        for key, value in data.items()
    }


__all__ = [
    "AppConfig",
    "BEACON_KIT_CONFIG_TEMPLATE",
    "BeaconKitConfig",
    "CometConfig",
    "ConsensusConfig",
    "DEFAULT_APP_CONFIG_TEMPLATE",
    "DEFAULT_COMET_CONFIG_TEMPLATE",
    "EngineConfig",
    "P2PConfig",
    "PayloadBuilderConfig",
    "RPCConfig",
    "TelemetryConfig",
    "normalize_keys",
]
