"""Transaction encoding configuration.

The node's CLI never builds transactions itself, so the only implementation
is a no-op config that satisfies anything depending on ``TxConfig``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TxConfig:
    """Transaction encoding settings consumed by client-side commands."""

    sign_mode: str = "direct"
    encoder: str = "noop"

    def encode(self, tx: bytes) -> bytes:
        raise NotImplementedError("transaction encoding is not supported by this node")


def noop_tx_config() -> TxConfig:
    return TxConfig()


__all__ = ["TxConfig", "noop_tx_config"]
