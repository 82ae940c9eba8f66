"""Chain specifications for supported networks.

A ``ChainSpec`` is resolved once when the root command is built and handed to
command registration (``init`` writes it into genesis) and to the modules.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

GWEI_PER_ETH = 1_000_000_000


class ChainSpec(BaseModel):
    """Network and protocol parameters for a chain."""

    model_config = ConfigDict(frozen=True)

    name: str
    deposit_eth1_chain_id: int = Field(gt=0)
    deposit_contract_address: str = "0x4242424242424242424242424242424242424242"

    # ========== Gwei Values ==========
    min_deposit_amount: int = 1 * GWEI_PER_ETH
    max_effective_balance: int = 32 * GWEI_PER_ETH
    ejection_balance: int = 16 * GWEI_PER_ETH
    effective_balance_increment: int = 1 * GWEI_PER_ETH

    # ========== Time Parameters ==========
    slots_per_epoch: int = Field(default=32, gt=0)
    slots_per_historical_root: int = 8
    min_epochs_for_blob_sidecars_requests: int = 4096

    # ========== Forks ==========
    genesis_fork_version: str = "0x04000000"
    deneb_fork_epoch: int = 0
    electra_fork_epoch: int = 9_999_999_999

    # ========== Limits ==========
    validator_registry_limit: int = 1_099_511_627_776
    max_deposits_per_block: int = 16
    max_withdrawals_per_payload: int = 16
    max_blobs_per_block: int = 6
    max_validators_per_withdrawals_sweep: int = 1 << 14

    @field_validator("deposit_contract_address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        if not value.startswith("0x") or len(value) != 42:
            raise ValueError("deposit_contract_address must be a 0x-prefixed 20-byte hex address")
        int(value[2:], 16)
        return value.lower()

    @field_validator("genesis_fork_version")
    @classmethod
    def _validate_fork_version(cls, value: str) -> str:
        if not value.startswith("0x") or len(value) != 10:
            raise ValueError("genesis_fork_version must be a 0x-prefixed 4-byte hex value")
        int(value[2:], 16)
        return value

    def active_fork_version(self, epoch: int) -> str:
        """Return the fork name active at ``epoch``."""
        if epoch >= self.electra_fork_epoch:
            return "electra"
        if epoch >= self.deneb_fork_epoch:
            return "deneb"
        return "phase0"


def devnet_chain_spec() -> ChainSpec:
    return ChainSpec(name="devnet", deposit_eth1_chain_id=80087)


def testnet_chain_spec() -> ChainSpec:
    return ChainSpec(
        name="testnet",
        deposit_eth1_chain_id=80084,
        max_validators_per_withdrawals_sweep=1 << 12,
    )


CHAIN_SPECS = {
    "devnet": devnet_chain_spec,
    "testnet": testnet_chain_spec,
}


def chain_spec_for(spec_type: str) -> ChainSpec:
    """Return the chain spec registered under ``spec_type``.

    Raises:
        ValueError: If no spec is registered under that name.
    """
    try:
        return CHAIN_SPECS[spec_type]()
    except KeyError:
        known = ", ".join(sorted(CHAIN_SPECS))
        raise ValueError(f"unknown chain spec {spec_type!r} (expected one of {known})") from None


__all__ = [
    "CHAIN_SPECS",
    "ChainSpec",
    "chain_spec_for",
    "devnet_chain_spec",
    "testnet_chain_spec",
]
