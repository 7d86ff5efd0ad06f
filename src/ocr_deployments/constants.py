"""Configuration constants for ocr-deployments library."""

# Network configuration keyed by network identifier
# rpc_env / fee_token_env name the environment variables that override defaults
NETWORK_CONFIG = {
    "hardhat": {
        "chain_id": 31337,
        "chain_name": "Hardhat",
        "chain_family": "evm",
        "default_rpc_url": "http://localhost:8545",
        "rpc_env": "HARDHAT_RPC_URL",
        "fee_token_env": "HARDHAT_LINK_ADDRESS",
    },
    "kovan": {
        "chain_id": 42,
        "chain_name": "Kovan",
        "chain_family": "evm",
        "default_rpc_url": None,
        "rpc_env": "KOVAN_RPC_URL",
        "fee_token_env": "KOVAN_LINK_ADDRESS",
    },
    "goerli": {
        "chain_id": 5,
        "chain_name": "Goerli",
        "chain_family": "evm",
        "default_rpc_url": None,
        "rpc_env": "GOERLI_RPC_URL",
        "fee_token_env": "GOERLI_LINK_ADDRESS",
    },
    "rsk_regtest": {
        "chain_id": 33,
        "chain_name": "RSK Regtest",
        "chain_family": "evm",
        "default_rpc_url": "http://localhost:4444",
        "rpc_env": "RSK_REGTEST_RPC_URL",
        "fee_token_env": "RSK_REGTEST_LINK_ADDRESS",
    },
    "rsk_testnet": {
        "chain_id": 31,
        "chain_name": "RSK Testnet",
        "chain_family": "evm",
        "default_rpc_url": "https://public-node.testnet.rsk.co",
        "rpc_env": "RSK_TESTNET_RPC_URL",
        "fee_token_env": "RSK_TESTNET_LINK_ADDRESS",
    },
    "rsk_mainnet": {
        "chain_id": 30,
        "chain_name": "RSK Mainnet",
        "chain_family": "evm",
        "default_rpc_url": "https://public-node.rsk.co",
        "rpc_env": "RSK_MAINNET_RPC_URL",
        "fee_token_env": "RSK_MAINNET_LINK_ADDRESS",
    },
}

# Chains whose suggested gas price gets a fixed markup (RSK mainnet, testnet, regtest)
SLOW_FINALITY_CHAIN_IDS = frozenset({30, 31, 33})
GAS_PRICE_MARKUP_PERCENT = 2

# Environment variables shared by all networks
PRIVATE_KEYS_ENV = "OCR_PRIVATE_KEYS"
RETRY_ATTEMPTS_ENV = "OCR_RETRY_ATTEMPTS"
RETRY_DELAY_ENV = "OCR_RETRY_DELAY"
ARTIFACTS_DIR_ENV = "OCR_ARTIFACTS_DIR"

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds between attempts, linear

DEFAULT_TRANSACTION_TIMEOUT = 120  # seconds to wait for a receipt
RECEIPT_POLL_LATENCY = 0.1

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Artifact file names per contract kind
ARTIFACT_FILES = {
    "token": "LinkToken.json",
    "flux_aggregator": "FluxAggregator.json",
    "offchain_aggregator": "OffchainAggregator.json",
    "storage": "Store.json",
    "vrf": "VRF.json",
}
