"""Handles around deployed contracts."""

import logging
from typing import Any, Dict, List, Optional

from web3 import Web3

from .client import BlockchainClient
from .context import CallContext
from .types import ContractKind
from .wallets import Wallet

logger = logging.getLogger(__name__)


class ContractHandle:
    """
    A deployed contract: address, ABI binding, owning client and caller wallet.

    Write methods sign with the caller wallet unless another wallet is passed.
    """

    kind: ContractKind

    def __init__(
        self,
        client: BlockchainClient,
        contract: Any,
        caller_wallet: Wallet,
        address: Optional[str] = None,
    ):
        self.client = client
        self.contract = contract
        self.caller_wallet = caller_wallet
        self._address = address

    @property
    def address(self) -> Optional[str]:
        return self._address

    def _call(self, fn_name: str, *args, ctx: Optional[CallContext] = None) -> Any:
        function_call = getattr(self.contract.functions, fn_name)(*args)
        return self.client.call(function_call, ctx=ctx)

    def _transact(
        self,
        fn_name: str,
        *args,
        wallet: Optional[Wallet] = None,
        ctx: Optional[CallContext] = None,
    ) -> Dict[str, Any]:
        function_call = getattr(self.contract.functions, fn_name)(*args)
        return self.client.transact(
            wallet or self.caller_wallet,
            function_call,
            f"{self.__class__.__name__}.{fn_name}",
            ctx=ctx,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self._address!r})"


class TokenHandle(ContractHandle):
    """Fee token (ERC-677 style)."""

    kind = ContractKind.TOKEN

    def name(self, ctx: Optional[CallContext] = None) -> str:
        return self._call("name", ctx=ctx)

    def balance_of(self, address: str, ctx: Optional[CallContext] = None) -> int:
        """Token balance of address, in the token's smallest unit."""
        return self._call("balanceOf", Web3.to_checksum_address(address), ctx=ctx)

    def transfer(
        self,
        to_address: str,
        amount: int,
        wallet: Optional[Wallet] = None,
        ctx: Optional[CallContext] = None,
    ) -> Dict[str, Any]:
        logger.info("Transferring %d fee tokens to %s", amount, to_address)
        return self._transact(
            "transfer", Web3.to_checksum_address(to_address), amount, wallet=wallet, ctx=ctx
        )

    def fund(
        self,
        from_wallet: Wallet,
        to_address: str,
        native_amount: int,
        token_amount: int,
        ctx: Optional[CallContext] = None,
    ) -> None:
        """Send native currency and fee tokens to an address, waiting for both."""
        if native_amount > 0:
            self.client.fund(from_wallet, to_address, native_amount, ctx=ctx)
        if token_amount > 0:
            self.transfer(to_address, token_amount, wallet=from_wallet, ctx=ctx)


class _FundableAggregator(ContractHandle):
    def fund(
        self,
        from_wallet: Wallet,
        token: TokenHandle,
        native_amount: int,
        token_amount: int,
        ctx: Optional[CallContext] = None,
    ) -> None:
        """Pay the aggregator native currency and fee tokens for oracle rewards."""
        token.fund(from_wallet, self.address, native_amount, token_amount, ctx=ctx)

    def description(self, ctx: Optional[CallContext] = None) -> str:
        return self._call("description", ctx=ctx)

    def decimals(self, ctx: Optional[CallContext] = None) -> int:
        return self._call("decimals", ctx=ctx)

    def latest_answer(self, ctx: Optional[CallContext] = None) -> int:
        return self._call("latestAnswer", ctx=ctx)


class FluxAggregatorHandle(_FundableAggregator):
    """Flux (round based) price aggregator."""

    kind = ContractKind.FLUX_AGGREGATOR

    def get_oracles(self, ctx: Optional[CallContext] = None) -> List[str]:
        return self._call("getOracles", ctx=ctx)

    def update_available_funds(
        self, wallet: Optional[Wallet] = None, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        """Make the aggregator recount its token balance after funding."""
        return self._transact("updateAvailableFunds", wallet=wallet, ctx=ctx)


class OffchainAggregatorHandle(_FundableAggregator):
    """Off-chain reporting aggregator."""

    kind = ContractKind.OFFCHAIN_AGGREGATOR

    def link_token(self, ctx: Optional[CallContext] = None) -> str:
        """Address of the fee token the aggregator pays out in."""
        return self._call("getLinkToken", ctx=ctx)

    def transmitters(self, ctx: Optional[CallContext] = None) -> List[str]:
        return self._call("transmitters", ctx=ctx)

    def set_payees(
        self,
        transmitters: List[str],
        payees: List[str],
        wallet: Optional[Wallet] = None,
        ctx: Optional[CallContext] = None,
    ) -> Dict[str, Any]:
        """
        Register who is paid for each transmitter.

        Raises:
            ValueError: If transmitters and payees differ in length
        """
        if len(transmitters) != len(payees):
            raise ValueError("Each transmitter needs exactly one payee")
        return self._transact(
            "setPayees",
            [Web3.to_checksum_address(t) for t in transmitters],
            [Web3.to_checksum_address(p) for p in payees],
            wallet=wallet,
            ctx=ctx,
        )


class StorageHandle(ContractHandle):
    """Plain value store."""

    kind = ContractKind.STORAGE

    def set(
        self, value: int, wallet: Optional[Wallet] = None, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        return self._transact("set", value, wallet=wallet, ctx=ctx)

    def get(self, ctx: Optional[CallContext] = None) -> int:
        return self._call("get", ctx=ctx)


class VRFHandle(ContractHandle):
    """Verifiable random function helper contract."""

    kind = ContractKind.VRF

    def random_value_from_proof(self, proof: bytes, ctx: Optional[CallContext] = None) -> int:
        """Verify a VRF proof on chain and return its random output."""
        return self._call("randomValueFromVRFProof", proof, ctx=ctx)


HANDLE_TYPES = {
    ContractKind.TOKEN: TokenHandle,
    ContractKind.FLUX_AGGREGATOR: FluxAggregatorHandle,
    ContractKind.OFFCHAIN_AGGREGATOR: OffchainAggregatorHandle,
    ContractKind.STORAGE: StorageHandle,
    ContractKind.VRF: VRFHandle,
}
