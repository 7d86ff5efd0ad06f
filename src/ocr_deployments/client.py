"""Blockchain client implementations, one per chain family."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar

import requests
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from .constants import RECEIPT_POLL_LATENCY
from .context import CallContext, background
from .exceptions import (
    ChainConnectionError,
    GasPriceFetchError,
    TransactionSubmissionError,
    TypeAssertionError,
    UnsupportedClientError,
)
from .retry import TRANSIENT_ERRORS, call_with_retry
from .types import ChainFamily, ContractArtifact, DeployResult, NetworkDescriptor, RetryPolicy
from .wallets import Wallet

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BlockchainClient(ABC):
    """
    A live connection to one network.

    Not safe for concurrent use: parallel work across networks needs one
    client per network.
    """

    family: Optional[ChainFamily] = None

    def __init__(self, network: NetworkDescriptor, retry: Optional[RetryPolicy] = None):
        self.network = network
        self.retry = retry if retry is not None else network.retry

    @property
    def chain_id(self) -> int:
        """Configured chain ID of the network; not queried from the chain."""
        return self.network.chain_id

    @abstractmethod
    def suggest_gas_price(self, ctx: Optional[CallContext] = None) -> int:
        """Gas price in wei currently suggested by the chain."""

    @abstractmethod
    def deploy_contract(
        self,
        from_wallet: Wallet,
        contract_name: str,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
        gas_price: Optional[int] = None,
        ctx: Optional[CallContext] = None,
    ) -> DeployResult:
        """Deploy a compiled contract and wait until it is mined."""

    @abstractmethod
    def contract_at(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        """Bind an ABI to an already deployed contract."""

    @abstractmethod
    def call(self, function_call: Any, ctx: Optional[CallContext] = None) -> Any:
        """Run a read-only contract function."""

    @abstractmethod
    def transact(
        self,
        from_wallet: Wallet,
        function_call: Any,
        description: str,
        gas_price: Optional[int] = None,
        ctx: Optional[CallContext] = None,
    ) -> Dict[str, Any]:
        """Send a state-changing contract function and wait for its receipt."""

    @abstractmethod
    def fund(
        self,
        from_wallet: Wallet,
        to_address: str,
        native_amount: int,
        ctx: Optional[CallContext] = None,
    ) -> Dict[str, Any]:
        """Transfer native currency and wait for the transfer to be mined."""


class EthereumClient(BlockchainClient):
    """Client for EVM-compatible chains over JSON-RPC."""

    family = ChainFamily.EVM

    def __init__(
        self,
        network: NetworkDescriptor,
        web3: Web3,
        retry: Optional[RetryPolicy] = None,
    ):
        super().__init__(network, retry)
        self.web3 = web3

    @classmethod
    def connect(
        cls,
        network: NetworkDescriptor,
        retry: Optional[RetryPolicy] = None,
        ctx: Optional[CallContext] = None,
    ) -> "EthereumClient":
        """
        Dial the network's RPC endpoint and check that it answers.

        Args:
            network: Network to connect to
            retry: Retry policy (defaults to the network's)
            ctx: Call context

        Returns:
            Connected EthereumClient

        Raises:
            ChainConnectionError: If the URL is bad or the endpoint does not answer
        """
        policy = retry if retry is not None else network.retry
        try:
            # web3's own exception retries are disabled so only our policy applies
            provider = Web3.HTTPProvider(
                network.rpc_url,
                request_kwargs={"timeout": network.transaction_timeout},
                exception_retry_configuration=None,
            )
            web3 = Web3(provider)
            client_version = call_with_retry(
                lambda: web3.client_version,
                policy,
                f"dial {network.rpc_url}",
                ctx=ctx,
            )
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise ChainConnectionError(
                f"Could not connect to {network.name} at {network.rpc_url}: {e}"
            ) from e

        logger.info(
            "Connected to %s (chain ID %d) at %s: %s",
            network.name,
            network.chain_id,
            network.rpc_url,
            client_version,
        )
        return cls(network, web3, retry=policy)

    def _retry(self, func: Callable[[], T], description: str, ctx: Optional[CallContext]) -> T:
        return call_with_retry(func, self.retry, description, ctx=ctx)

    def suggest_gas_price(self, ctx: Optional[CallContext] = None) -> int:
        """
        Fetch the chain's suggested gas price (eth_gasPrice).

        Raises:
            GasPriceFetchError: If the RPC call fails
        """
        try:
            return self._retry(lambda: self.web3.eth.gas_price, "eth_gasPrice", ctx)
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise GasPriceFetchError(
                f"Could not fetch gas price from {self.network.name}: {e}"
            ) from e

    def _base_transaction(
        self, from_wallet: Wallet, gas_price: Optional[int], ctx: Optional[CallContext]
    ) -> Dict[str, Any]:
        nonce = self._retry(
            lambda: self.web3.eth.get_transaction_count(from_wallet.address, "pending"),
            "eth_getTransactionCount",
            ctx,
        )
        if gas_price is None:
            gas_price = self.suggest_gas_price(ctx)
        return {
            "from": from_wallet.address,
            "nonce": nonce,
            "gasPrice": gas_price,
            "chainId": self.chain_id,
        }

    def _broadcast(self, signed: Any, description: str, ctx: CallContext) -> Any:
        """
        Send a signed transaction and return its hash.

        A transport failure can hide a send the node already accepted. If a
        later attempt is then refused (e.g., "already known"), the locally
        computed hash is returned so the caller waits for that receipt.
        """
        interrupted = []

        def send():
            try:
                return self.web3.eth.send_raw_transaction(signed.raw_transaction)
            except TRANSIENT_ERRORS:
                interrupted.append(True)
                raise

        try:
            return self._retry(send, "eth_sendRawTransaction", ctx)
        except (Web3Exception, ValueError) as e:
            if not interrupted:
                raise TransactionSubmissionError(
                    f"{description} transaction rejected: {e}"
                ) from e
            logger.warning(
                "%s resend refused after an interrupted send (%s), waiting for %s",
                description,
                e,
                Web3.to_hex(signed.hash),
            )
            return signed.hash
        except requests.RequestException as e:
            raise TransactionSubmissionError(
                f"{description} transaction could not be sent: {e}"
            ) from e

    def _wait_for_receipt(
        self, tx_hash: Any, description: str, ctx: CallContext
    ) -> Dict[str, Any]:
        """Poll for the receipt, checking ctx between polls."""
        timeout = ctx.cap_timeout(self.network.transaction_timeout)
        deadline = time.monotonic() + timeout
        while True:
            ctx.check()
            try:
                return self._retry(
                    lambda: self.web3.eth.get_transaction_receipt(tx_hash),
                    "eth_getTransactionReceipt",
                    ctx,
                )
            except TransactionNotFound:
                pass
            except requests.RequestException as e:
                raise TransactionSubmissionError(
                    f"Lost connection waiting for {description} transaction "
                    f"{Web3.to_hex(tx_hash)}: {e}"
                ) from e
            if time.monotonic() >= deadline:
                raise TransactionSubmissionError(
                    f"{description} transaction {Web3.to_hex(tx_hash)} not mined within {timeout}s"
                )
            time.sleep(RECEIPT_POLL_LATENCY)

    def _sign_and_send(
        self,
        from_wallet: Wallet,
        transaction: Dict[str, Any],
        description: str,
        ctx: Optional[CallContext],
    ) -> Dict[str, Any]:
        """Sign locally, broadcast and wait for the receipt."""
        ctx = ctx or background()
        signed = from_wallet.sign_transaction(transaction)
        tx_hash = self._broadcast(signed, description, ctx)
        logger.info("%s transaction sent: %s", description, Web3.to_hex(tx_hash))

        receipt = self._wait_for_receipt(tx_hash, description, ctx)
        if receipt.get("status") == 0:
            raise TransactionSubmissionError(
                f"{description} transaction {Web3.to_hex(tx_hash)} reverted"
            )
        return receipt

    def deploy_contract(
        self,
        from_wallet: Wallet,
        contract_name: str,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
        gas_price: Optional[int] = None,
        ctx: Optional[CallContext] = None,
    ) -> DeployResult:
        """
        Deploy a compiled contract signed by from_wallet.

        Args:
            from_wallet: Signing wallet, pays for the deployment
            contract_name: Readable name used in logs and errors
            artifact: ABI and creation bytecode
            constructor_args: Positional constructor arguments
            gas_price: Gas price in wei (defaults to the suggested price)
            ctx: Call context

        Returns:
            DeployResult with the new address, transaction hash and binding

        Raises:
            TransactionSubmissionError: If the chain rejects, reverts or never mines
                the deployment, or the connection is lost once retries run out
            TypeAssertionError: If the mined receipt carries no contract address
            DeploymentCancelledError: If ctx is cancelled or expires
        """
        factory = self.web3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        try:
            transaction = self._base_transaction(from_wallet, gas_price, ctx)
            transaction = self._retry(
                lambda: factory.constructor(*constructor_args).build_transaction(transaction),
                "eth_estimateGas",
                ctx,
            )
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise TransactionSubmissionError(f"{contract_name} deployment rejected: {e}") from e

        logger.info(
            "Deploying %s from %s at gas price %d",
            contract_name,
            from_wallet.address,
            transaction["gasPrice"],
        )
        receipt = self._sign_and_send(from_wallet, transaction, contract_name, ctx)

        address = receipt.get("contractAddress")
        if not address:
            raise TypeAssertionError(
                f"{contract_name} deployment receipt has no contract address"
            )
        address = Web3.to_checksum_address(address)
        logger.info("%s deployed at %s", contract_name, address)

        return DeployResult(
            address=address,
            tx_hash=Web3.to_hex(receipt["transactionHash"]),
            contract=self.contract_at(address, artifact.abi),
        )

    def contract_at(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def call(self, function_call: Any, ctx: Optional[CallContext] = None) -> Any:
        """
        Run a read-only contract function.

        Raises:
            requests.RequestException: If the connection is lost once retries run out
        """
        logger.debug("Calling %s on %s", function_call.fn_name, function_call.address)
        return self._retry(function_call.call, f"eth_call {function_call.fn_name}", ctx)

    def transact(
        self,
        from_wallet: Wallet,
        function_call: Any,
        description: str,
        gas_price: Optional[int] = None,
        ctx: Optional[CallContext] = None,
    ) -> Dict[str, Any]:
        """
        Send a contract function call as a signed transaction.

        Raises:
            TransactionSubmissionError: If the chain rejects or reverts it, or the
                connection is lost once retries run out
            DeploymentCancelledError: If ctx is cancelled or expires
        """
        try:
            transaction = self._base_transaction(from_wallet, gas_price, ctx)
            transaction = self._retry(
                lambda: function_call.build_transaction(transaction),
                "eth_estimateGas",
                ctx,
            )
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise TransactionSubmissionError(f"{description} rejected: {e}") from e
        return self._sign_and_send(from_wallet, transaction, description, ctx)

    def fund(
        self,
        from_wallet: Wallet,
        to_address: str,
        native_amount: int,
        ctx: Optional[CallContext] = None,
    ) -> Dict[str, Any]:
        """
        Send native currency to an address and wait for the transfer.

        Raises:
            TransactionSubmissionError: If the transfer is rejected or reverts, or the
                connection is lost once retries run out
            DeploymentCancelledError: If ctx is cancelled or expires
        """
        try:
            transaction = self._base_transaction(from_wallet, None, ctx)
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise TransactionSubmissionError(f"Funding {to_address} rejected: {e}") from e
        transaction.update(
            {
                "to": Web3.to_checksum_address(to_address),
                "value": native_amount,
                "gas": 21000,
            }
        )
        return self._sign_and_send(from_wallet, transaction, f"Funding {to_address}", ctx)


# One client implementation per chain family
_CLIENTS: Dict[ChainFamily, Type[EthereumClient]] = {
    ChainFamily.EVM: EthereumClient,
}


def new_blockchain_client(
    network: NetworkDescriptor,
    retry: Optional[RetryPolicy] = None,
    ctx: Optional[CallContext] = None,
) -> BlockchainClient:
    """
    Connect to a network with the client implementation of its chain family.

    Raises:
        UnsupportedClientError: If no client implementation matches the chain family
        ChainConnectionError: If the connection fails
    """
    client_cls = _CLIENTS.get(network.chain_family)
    if client_cls is None:
        raise UnsupportedClientError(
            f"No client implementation for chain family '{network.chain_family}'"
        )
    return client_cls.connect(network, retry=retry, ctx=ctx)


def connect(
    network: NetworkDescriptor,
    retry: Optional[RetryPolicy] = None,
    ctx: Optional[CallContext] = None,
) -> BlockchainClient:
    """Alias of new_blockchain_client."""
    return new_blockchain_client(network, retry=retry, ctx=ctx)
