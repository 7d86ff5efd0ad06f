"""Contract deployment across chain families."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Type, Union

from web3 import Web3

from .artifacts import load_artifact
from .client import BlockchainClient
from .constants import GAS_PRICE_MARKUP_PERCENT, SLOW_FINALITY_CHAIN_IDS
from .context import CallContext
from .contracts import (
    HANDLE_TYPES,
    ContractHandle,
    FluxAggregatorHandle,
    OffchainAggregatorHandle,
    StorageHandle,
    TokenHandle,
    VRFHandle,
)
from .exceptions import DeploymentError, TypeAssertionError, UnsupportedClientError
from .types import (
    ChainFamily,
    ContractArtifact,
    ContractKind,
    DeployResult,
    FluxAggregatorOptions,
    OffchainAggregatorOptions,
)
from .wallets import Wallet

logger = logging.getLogger(__name__)


def adjust_gas_price(client: BlockchainClient, ctx: Optional[CallContext] = None) -> int:
    """
    Suggested gas price, marked up on slow-finality chains.

    Chains in SLOW_FINALITY_CHAIN_IDS get suggested + suggested * 2 // 100,
    in integer arithmetic. Other chains get the suggested price unchanged.

    Args:
        client: Connected client; its configured chain ID selects the policy
        ctx: Call context

    Returns:
        Gas price in wei

    Raises:
        GasPriceFetchError: If the suggested price cannot be fetched
    """
    suggested = client.suggest_gas_price(ctx)
    # Membership is by value; chain IDs are plain ints
    if client.chain_id in SLOW_FINALITY_CHAIN_IDS:
        adjusted = suggested + suggested * GAS_PRICE_MARKUP_PERCENT // 100
        logger.info(
            "Chain %d gas price marked up %d%%: %d -> %d",
            client.chain_id,
            GAS_PRICE_MARKUP_PERCENT,
            suggested,
            adjusted,
        )
        return adjusted
    return suggested


class ContractDeployer(ABC):
    """Deployment methods every chain family implementation provides."""

    def __init__(
        self,
        client: BlockchainClient,
        artifacts_dir: Optional[Union[Path, str]] = None,
    ):
        self.client = client
        self.artifacts_dir = artifacts_dir
        self._artifacts: Dict[ContractKind, ContractArtifact] = {}

    def artifact(self, kind: ContractKind) -> ContractArtifact:
        """Compiled artifact for kind, loaded once per deployer."""
        if kind not in self._artifacts:
            self._artifacts[kind] = load_artifact(kind, self.artifacts_dir)
        return self._artifacts[kind]

    def adjust_gas_price(self, ctx: Optional[CallContext] = None) -> int:
        return adjust_gas_price(self.client, ctx)

    @abstractmethod
    def deploy_token_contract(
        self, from_wallet: Wallet, ctx: Optional[CallContext] = None
    ) -> TokenHandle: ...

    @abstractmethod
    def instance_token_contract(self, address: str, from_wallet: Wallet) -> TokenHandle: ...

    @abstractmethod
    def deploy_flux_aggregator_contract(
        self,
        from_wallet: Wallet,
        options: FluxAggregatorOptions,
        ctx: Optional[CallContext] = None,
    ) -> FluxAggregatorHandle: ...

    @abstractmethod
    def deploy_offchain_aggregator(
        self,
        from_wallet: Wallet,
        options: OffchainAggregatorOptions,
        ctx: Optional[CallContext] = None,
    ) -> OffchainAggregatorHandle: ...

    @abstractmethod
    def deploy_storage_contract(
        self, from_wallet: Wallet, ctx: Optional[CallContext] = None
    ) -> StorageHandle: ...

    @abstractmethod
    def deploy_vrf_contract(
        self, from_wallet: Wallet, ctx: Optional[CallContext] = None
    ) -> VRFHandle: ...


class EthereumContractDeployer(ContractDeployer):
    """Deploys contracts on any EVM-compatible chain."""

    def _deploy(
        self,
        kind: ContractKind,
        contract_name: str,
        from_wallet: Wallet,
        constructor_args: Sequence[Any],
        ctx: Optional[CallContext],
    ) -> DeployResult:
        artifact = self.artifact(kind)
        gas_price = self.adjust_gas_price(ctx)
        return self.client.deploy_contract(
            from_wallet, contract_name, artifact, constructor_args, gas_price, ctx
        )

    def _wrap(
        self,
        kind: ContractKind,
        result: DeployResult,
        from_wallet: Wallet,
    ) -> Any:
        handle = HANDLE_TYPES[kind](self.client, result.contract, from_wallet, result.address)
        if not isinstance(handle, ContractHandle) or handle.kind is not kind:
            raise TypeAssertionError(f"Unexpected handle {type(handle).__name__} for {kind.value}")
        return handle

    def _fee_token_address(self, contract_name: str) -> str:
        address = self.client.network.fee_token_address
        if address is None:
            raise DeploymentError(
                f"{contract_name} needs a fee token: deploy or configure one on "
                f"'{self.client.network.network_id}' first"
            )
        return address

    def deploy_token_contract(
        self, from_wallet: Wallet, ctx: Optional[CallContext] = None
    ) -> TokenHandle:
        """
        Deploy a fee token and record its address on the network descriptor.

        The descriptor is only updated after the deployment has been mined.
        """
        result = self._deploy(ContractKind.TOKEN, "LINK Token", from_wallet, (), ctx)
        handle = self._wrap(ContractKind.TOKEN, result, from_wallet)
        self.client.network.set_fee_token_address(result.address)
        return handle

    def instance_token_contract(self, address: str, from_wallet: Wallet) -> TokenHandle:
        """
        Bind to an already deployed fee token.

        No chain I/O happens; the first read call will reveal a wrong address.
        """
        address = Web3.to_checksum_address(address)
        contract = self.client.contract_at(address, self.artifact(ContractKind.TOKEN).abi)
        return TokenHandle(self.client, contract, from_wallet, address)

    def deploy_flux_aggregator_contract(
        self,
        from_wallet: Wallet,
        options: FluxAggregatorOptions,
        ctx: Optional[CallContext] = None,
    ) -> FluxAggregatorHandle:
        args = (
            self._fee_token_address("Flux Aggregator"),
            options.payment_amount,
            options.timeout,
            Web3.to_checksum_address(options.validator),
            options.min_sub_value,
            options.max_sub_value,
            options.decimals,
            options.description,
        )
        result = self._deploy(
            ContractKind.FLUX_AGGREGATOR, "Flux Aggregator", from_wallet, args, ctx
        )
        return self._wrap(ContractKind.FLUX_AGGREGATOR, result, from_wallet)

    def deploy_offchain_aggregator(
        self,
        from_wallet: Wallet,
        options: OffchainAggregatorOptions,
        ctx: Optional[CallContext] = None,
    ) -> OffchainAggregatorHandle:
        args = (
            options.maximum_gas_price,
            options.reasonable_gas_price,
            options.micro_link_per_eth,
            options.link_gwei_per_observation,
            options.link_gwei_per_transmission,
            self._fee_token_address("OffChain Aggregator"),
            options.minimum_answer,
            options.maximum_answer,
            Web3.to_checksum_address(options.billing_access_controller),
            Web3.to_checksum_address(options.requester_access_controller),
            options.decimals,
            options.description,
        )
        result = self._deploy(
            ContractKind.OFFCHAIN_AGGREGATOR, "OffChain Aggregator", from_wallet, args, ctx
        )
        return self._wrap(ContractKind.OFFCHAIN_AGGREGATOR, result, from_wallet)

    def deploy_storage_contract(
        self, from_wallet: Wallet, ctx: Optional[CallContext] = None
    ) -> StorageHandle:
        result = self._deploy(ContractKind.STORAGE, "Storage", from_wallet, (), ctx)
        return self._wrap(ContractKind.STORAGE, result, from_wallet)

    def deploy_vrf_contract(
        self, from_wallet: Wallet, ctx: Optional[CallContext] = None
    ) -> VRFHandle:
        result = self._deploy(ContractKind.VRF, "VRF", from_wallet, (), ctx)
        return self._wrap(ContractKind.VRF, result, from_wallet)


# One deployer implementation per chain family
_DEPLOYERS: Dict[ChainFamily, Type[ContractDeployer]] = {
    ChainFamily.EVM: EthereumContractDeployer,
}


def new_contract_deployer(
    client: BlockchainClient,
    artifacts_dir: Optional[Union[Path, str]] = None,
) -> ContractDeployer:
    """
    Deployer matching the client's chain family.

    Args:
        client: Connected client
        artifacts_dir: Directory holding the compiled contract artifacts

    Raises:
        UnsupportedClientError: If no deployer exists for the client
    """
    deployer_cls = _DEPLOYERS.get(getattr(client, "family", None))
    if deployer_cls is None:
        raise UnsupportedClientError(
            f"Unknown blockchain client implementation: {type(client).__name__}"
        )
    return deployer_cls(client, artifacts_dir)
