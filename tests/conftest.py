"""Shared pytest fixtures for ocr-deployments tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest
import requests
import responses
import rlp
from eth_abi import encode
from web3 import Web3

from ocr_deployments.client import EthereumClient
from ocr_deployments.constants import NETWORK_CONFIG
from ocr_deployments.deployer import new_contract_deployer
from ocr_deployments.networks import get_network_descriptor
from ocr_deployments.types import RetryPolicy

# Well-known development keys (hardhat / anvil accounts 0-2)
TEST_KEYS = [
    "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
]
TEST_ADDRESSES = [
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
]

FAKE_RPC_URL = "http://fake-node.example.com:8545"


class FakeNode:
    """
    Minimal Ethereum JSON-RPC node answering the calls web3 makes while
    deploying, transacting and reading contracts.

    Transactions are "mined" instantly; every deployment gets a fresh address.
    """

    def __init__(self, url: str = FAKE_RPC_URL, chain_id: int = 31, gas_price: int = 10**9):
        self.url = url
        self.chain_id = chain_id
        self.gas_price = gas_price
        self.sent_transactions: List[Dict[str, Any]] = []
        self.methods_called: List[str] = []
        self.errors: Dict[str, Dict[str, Any]] = {}  # method -> JSON-RPC error object
        self.revert = False
        self.omit_contract_address = False
        self.drop_requests = 0  # next N requests fail at the connection level
        self.lose_responses: Dict[str, int] = {}  # method -> N processed requests whose reply is lost
        self.withhold_receipts = False
        self._call_results: Dict[str, str] = {}
        self._receipts: Dict[str, Dict[str, Any]] = {}
        self._next_contract = 0x1000
        self._transaction_count = 0

    def set_call_result(self, signature: str, types: Sequence[str], values: Sequence[Any]) -> None:
        """Answer eth_call for the function with this signature, e.g. "balanceOf(address)"."""
        selector = Web3.to_hex(Web3.keccak(text=signature)[:4])
        self._call_results[selector] = Web3.to_hex(encode(list(types), list(values)))

    def calls_to(self, method: str) -> int:
        return self.methods_called.count(method)

    def _is_known(self, raw_hex: str) -> bool:
        return Web3.to_hex(Web3.keccak(hexstr=raw_hex)) in self._receipts

    def _send_raw(self, raw_hex: str) -> str:
        raw = bytes.fromhex(raw_hex[2:])
        # Legacy transactions: [nonce, gasPrice, gas, to, value, data, v, r, s]
        fields = rlp.decode(raw)
        tx = {
            "nonce": int.from_bytes(fields[0], "big"),
            "gas_price": int.from_bytes(fields[1], "big"),
            "gas": int.from_bytes(fields[2], "big"),
            "to": Web3.to_hex(fields[3]) if fields[3] else None,
            "value": int.from_bytes(fields[4], "big"),
            "data": Web3.to_hex(fields[5]),
        }
        self.sent_transactions.append(tx)
        self._transaction_count += 1

        tx_hash = Web3.to_hex(Web3.keccak(raw))
        contract_address = None
        if tx["to"] is None and not self.omit_contract_address:
            contract_address = "0x" + f"{self._next_contract:040x}"
            self._next_contract += 1
        self._receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "transactionIndex": "0x0",
            "blockHash": "0x" + "ab" * 32,
            "blockNumber": hex(len(self.sent_transactions)),
            "cumulativeGasUsed": "0x5208",
            "gasUsed": "0x5208",
            "effectiveGasPrice": hex(tx["gas_price"]),
            "contractAddress": contract_address,
            "logs": [],
            "logsBloom": "0x" + "00" * 256,
            "status": "0x0" if self.revert else "0x1",
            "type": "0x0",
        }
        return tx_hash

    def _result(self, method: str, params: List[Any]) -> Any:
        if method == "web3_clientVersion":
            return "FakeNode/v1.0.0"
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "eth_gasPrice":
            return hex(self.gas_price)
        if method == "eth_getTransactionCount":
            return hex(self._transaction_count)
        if method == "eth_estimateGas":
            return hex(2_000_000)
        if method == "eth_sendRawTransaction":
            return self._send_raw(params[0])
        if method == "eth_getTransactionReceipt":
            if self.withhold_receipts:
                return None
            return self._receipts.get(params[0])
        if method == "eth_call":
            data = params[0].get("data") or params[0].get("input") or "0x"
            return self._call_results.get(data[:10], "0x" + "00" * 32)
        raise AssertionError(f"FakeNode does not support {method}")

    def handle(self, request):
        body = json.loads(request.body)
        method = body["method"]
        self.methods_called.append(method)
        if self.drop_requests > 0:
            self.drop_requests -= 1
            raise requests.exceptions.ConnectionError(f"connection reset during {method}")
        params = body.get("params", [])
        response: Dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
        if method in self.errors:
            response["error"] = self.errors[method]
        elif method == "eth_sendRawTransaction" and self._is_known(params[0]):
            response["error"] = {"code": -32000, "message": "already known"}
        else:
            response["result"] = self._result(method, params)
        if self.lose_responses.get(method, 0) > 0:
            self.lose_responses[method] -= 1
            raise requests.exceptions.ReadTimeout(f"no reply to {method}")
        return (200, {}, json.dumps(response))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of the tests."""
    for name in ("OCR_PRIVATE_KEYS", "OCR_RETRY_ATTEMPTS", "OCR_RETRY_DELAY", "OCR_ARTIFACTS_DIR"):
        monkeypatch.delenv(name, raising=False)
    for network_config in NETWORK_CONFIG.values():
        monkeypatch.delenv(network_config["rpc_env"], raising=False)
        monkeypatch.delenv(network_config["fee_token_env"], raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Directory holding one compiled artifact per contract kind."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def fake_node():
    """A FakeNode served at FAKE_RPC_URL for the duration of the test."""
    node = FakeNode()
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add_callback(
            responses.POST,
            node.url,
            callback=node.handle,
            content_type="application/json",
        )
        yield node


@pytest.fixture
def no_retry() -> RetryPolicy:
    return RetryPolicy(attempts=1, delay=0)


@pytest.fixture
def dev_keys() -> List[str]:
    return list(TEST_KEYS)


@pytest.fixture
def dev_addresses() -> List[str]:
    return list(TEST_ADDRESSES)


@pytest.fixture
def network_factory(fake_node: FakeNode):
    """Build a descriptor pointed at fake_node, which then reports the same chain ID."""

    def factory(network_id: str, fee_token_address: Optional[str] = None):
        descriptor = get_network_descriptor(
            network_id,
            rpc_url=fake_node.url,
            private_keys=TEST_KEYS,
            fee_token_address=fee_token_address,
            retry=RetryPolicy(attempts=2, delay=0),
        )
        fake_node.chain_id = descriptor.chain_id
        return descriptor

    return factory


@pytest.fixture
def network(network_factory):
    """RSK testnet (chain ID 31, slow-finality) descriptor served by fake_node."""
    return network_factory("rsk_testnet")


@pytest.fixture
def client(network):
    return EthereumClient.connect(network)


@pytest.fixture
def deployer(client, artifacts_dir: Path):
    return new_contract_deployer(client, artifacts_dir)
