"""
ocr-deployments: Python library for provisioning off-chain reporting test networks
"""

from importlib.metadata import PackageNotFoundError, version

from .client import BlockchainClient, EthereumClient, connect, new_blockchain_client
from .context import CallContext
from .contracts import (
    FluxAggregatorHandle,
    OffchainAggregatorHandle,
    StorageHandle,
    TokenHandle,
    VRFHandle,
)
from .deployer import (
    ContractDeployer,
    EthereumContractDeployer,
    adjust_gas_price,
    new_contract_deployer,
)
from .environment import DeploymentSuite, setup_environment
from .exceptions import (
    ArtifactNotFoundError,
    ChainConnectionError,
    DefectiveArtifactError,
    DeploymentCancelledError,
    DeploymentError,
    EmptySetError,
    GasPriceFetchError,
    IndexOutOfRangeError,
    KeyDecodeError,
    NetworkNotFoundError,
    TransactionSubmissionError,
    TypeAssertionError,
    UnsupportedClientError,
)
from .networks import get_network_descriptor, new_rsk_dev_network, new_rsk_test_network
from .types import (
    ChainFamily,
    ContractKind,
    FluxAggregatorOptions,
    NetworkDescriptor,
    OffchainAggregatorOptions,
    RetryPolicy,
    default_flux_aggregator_options,
    default_offchain_aggregator_options,
)
from .wallets import WalletSet

try:
    __version__ = version("ocr-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "BlockchainClient",
    "EthereumClient",
    "connect",
    "new_blockchain_client",
    "CallContext",
    "ContractDeployer",
    "EthereumContractDeployer",
    "adjust_gas_price",
    "new_contract_deployer",
    "DeploymentSuite",
    "setup_environment",
    "TokenHandle",
    "FluxAggregatorHandle",
    "OffchainAggregatorHandle",
    "StorageHandle",
    "VRFHandle",
    "get_network_descriptor",
    "new_rsk_dev_network",
    "new_rsk_test_network",
    "ChainFamily",
    "ContractKind",
    "NetworkDescriptor",
    "RetryPolicy",
    "FluxAggregatorOptions",
    "OffchainAggregatorOptions",
    "default_flux_aggregator_options",
    "default_offchain_aggregator_options",
    "WalletSet",
    "DeploymentError",
    "ChainConnectionError",
    "NetworkNotFoundError",
    "KeyDecodeError",
    "IndexOutOfRangeError",
    "EmptySetError",
    "UnsupportedClientError",
    "GasPriceFetchError",
    "TransactionSubmissionError",
    "TypeAssertionError",
    "ArtifactNotFoundError",
    "DefectiveArtifactError",
    "DeploymentCancelledError",
]
