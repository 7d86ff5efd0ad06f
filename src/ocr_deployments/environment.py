"""One-call setup of client, wallets and deployer for a network."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from .client import BlockchainClient, new_blockchain_client
from .context import CallContext
from .contracts import TokenHandle
from .deployer import ContractDeployer, new_contract_deployer
from .networks import network_wallets
from .types import NetworkDescriptor
from .wallets import WalletSet

logger = logging.getLogger(__name__)


@dataclass
class DeploymentSuite:
    """Everything an orchestrator needs to deploy and fund contracts on one network."""

    network: NetworkDescriptor
    client: BlockchainClient
    wallets: WalletSet
    deployer: ContractDeployer
    token: Optional[TokenHandle] = None  # None until a fee token is known


def setup_environment(
    network_init: Callable[[], NetworkDescriptor],
    artifacts_dir: Optional[Union[Path, str]] = None,
    ctx: Optional[CallContext] = None,
) -> DeploymentSuite:
    """
    Build the network, connect, decode wallets and prepare a deployer.

    If the network already knows its fee token address, the token is bound
    so it can be reused across runs instead of being deployed again.

    Args:
        network_init: Returns the network descriptor (e.g., new_rsk_dev_network)
        artifacts_dir: Directory holding compiled contract artifacts
        ctx: Call context for the connection

    Returns:
        DeploymentSuite

    Raises:
        NetworkNotFoundError: If the network is not configured
        ChainConnectionError: If the RPC endpoint cannot be reached
        KeyDecodeError: If a private key is malformed
        UnsupportedClientError: If no client or deployer matches the chain family
    """
    network = network_init()
    client = new_blockchain_client(network, ctx=ctx)
    wallets = network_wallets(network)
    deployer = new_contract_deployer(client, artifacts_dir)

    token = None
    if network.fee_token_address is not None:
        token = deployer.instance_token_contract(network.fee_token_address, wallets.default())
        logger.info("Using existing fee token at %s", token.address)

    return DeploymentSuite(
        network=network,
        client=client,
        wallets=wallets,
        deployer=deployer,
        token=token,
    )
