"""Data types and dataclasses for ocr-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from web3 import Web3

from .constants import (
    ARTIFACT_FILES,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TRANSACTION_TIMEOUT,
    ZERO_ADDRESS,
)


class ChainFamily(Enum):
    """
    Groups of chains sharing one client and ABI compatibility profile.

    Value strings match the chain_family entries of NETWORK_CONFIG.
    """

    EVM = "evm"


class ContractKind(Enum):
    """Contract kinds the deployer knows how to deploy."""

    TOKEN = "token"
    FLUX_AGGREGATOR = "flux_aggregator"
    OFFCHAIN_AGGREGATOR = "offchain_aggregator"
    STORAGE = "storage"
    VRF = "vrf"

    @property
    def artifact_file(self) -> str:
        """File name of this kind's artifact in the artifacts directory."""
        return ARTIFACT_FILES[self.value]


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed attempt count with a fixed (linear) delay between attempts."""

    attempts: int = DEFAULT_RETRY_ATTEMPTS
    delay: float = DEFAULT_RETRY_DELAY  # seconds

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError("Retry attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("Retry delay must not be negative")


@dataclass
class NetworkDescriptor:
    """
    Static facts about a target chain.

    Only the fee token address may change after construction, and only through
    set_fee_token_address().
    """

    network_id: str  # e.g., "rsk_regtest"
    name: str  # Human readable chain name
    rpc_url: str
    chain_id: int  # Configured chain ID, never fetched from the chain
    chain_family: ChainFamily = ChainFamily.EVM
    fee_token_address: Optional[str] = None  # Checksummed address
    private_keys: List[str] = field(default_factory=list, repr=False)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    transaction_timeout: float = DEFAULT_TRANSACTION_TIMEOUT

    def set_fee_token_address(self, address: str) -> None:
        """
        Record the address of a freshly deployed fee token.

        Args:
            address: Token contract address (any case)

        Raises:
            ValueError: If address is not a valid hex address
        """
        if not Web3.is_address(address):
            raise ValueError(f"Invalid fee token address: {address}")
        self.fee_token_address = Web3.to_checksum_address(address)


@dataclass(frozen=True)
class ContractArtifact:
    """Pre-compiled contract: ABI and creation bytecode."""

    name: str  # e.g., "LinkToken"
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode
    source_format: Optional[str] = None  # "hardhat", "foundry" or "plain"


@dataclass(frozen=True)
class DeployResult:
    """What the chain returns for a mined deployment transaction."""

    address: str  # Checksummed contract address
    tx_hash: str
    contract: Any  # web3 Contract bound to address


@dataclass
class FluxAggregatorOptions:
    """Constructor options for the flux aggregator contract."""

    payment_amount: int
    timeout: int  # seconds
    validator: str
    min_sub_value: int
    max_sub_value: int
    decimals: int
    description: str


@dataclass
class OffchainAggregatorOptions:
    """Constructor options for the off-chain reporting aggregator contract."""

    maximum_gas_price: int
    reasonable_gas_price: int
    micro_link_per_eth: int
    link_gwei_per_observation: int
    link_gwei_per_transmission: int
    minimum_answer: int
    maximum_answer: int
    billing_access_controller: str
    requester_access_controller: str
    decimals: int
    description: str


def default_flux_aggregator_options() -> FluxAggregatorOptions:
    """Basic defaults for a flux aggregator on a development chain."""
    return FluxAggregatorOptions(
        payment_amount=1,
        timeout=30,
        validator=ZERO_ADDRESS,
        min_sub_value=3,
        max_sub_value=7,
        decimals=0,
        description="Hardhat Flux Aggregator",
    )


def default_offchain_aggregator_options() -> OffchainAggregatorOptions:
    """Base defaults for deploying an off-chain reporting aggregator."""
    return OffchainAggregatorOptions(
        maximum_gas_price=500000000,
        reasonable_gas_price=28000,
        micro_link_per_eth=500,
        link_gwei_per_observation=500,
        link_gwei_per_transmission=500,
        minimum_answer=1,
        maximum_answer=5000,
        billing_access_controller=ZERO_ADDRESS,
        requester_access_controller=ZERO_ADDRESS,
        decimals=8,
        description="Test OCR",
    )
