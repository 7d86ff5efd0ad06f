"""Network descriptors built from NETWORK_CONFIG and the environment."""

import os
from typing import List, Optional, Sequence

from .constants import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    NETWORK_CONFIG,
    PRIVATE_KEYS_ENV,
    RETRY_ATTEMPTS_ENV,
    RETRY_DELAY_ENV,
)
from .exceptions import NetworkNotFoundError
from .types import ChainFamily, NetworkDescriptor, RetryPolicy
from .wallets import WalletSet


def retry_policy_from_env() -> RetryPolicy:
    """
    Build the retry policy from $OCR_RETRY_ATTEMPTS and $OCR_RETRY_DELAY.

    Raises:
        ValueError: If either variable is set but not a number
    """
    attempts = os.environ.get(RETRY_ATTEMPTS_ENV)
    delay = os.environ.get(RETRY_DELAY_ENV)
    return RetryPolicy(
        attempts=int(attempts) if attempts else DEFAULT_RETRY_ATTEMPTS,
        delay=float(delay) if delay else DEFAULT_RETRY_DELAY,
    )


def private_keys_from_env() -> List[str]:
    """Comma separated keys from $OCR_PRIVATE_KEYS, empty entries dropped."""
    raw = os.environ.get(PRIVATE_KEYS_ENV, "")
    return [key for key in raw.split(",") if key.strip()]


def get_network_descriptor(
    network_id: str,
    rpc_url: Optional[str] = None,
    private_keys: Optional[Sequence[str]] = None,
    fee_token_address: Optional[str] = None,
    retry: Optional[RetryPolicy] = None,
) -> NetworkDescriptor:
    """
    Prepare settings for a connection to a configured network.

    Explicit arguments win over environment variables, which win over the
    defaults in NETWORK_CONFIG.

    Args:
        network_id: Key of NETWORK_CONFIG (e.g., "rsk_regtest")
        rpc_url: RPC endpoint (defaults to the network's rpc_env variable)
        private_keys: Raw private keys (defaults to $OCR_PRIVATE_KEYS)
        fee_token_address: Existing fee token (defaults to the network's fee_token_env)
        retry: Retry policy (defaults to $OCR_RETRY_ATTEMPTS / $OCR_RETRY_DELAY)

    Returns:
        NetworkDescriptor for the network

    Raises:
        NetworkNotFoundError: If network_id is unknown
        ValueError: If no RPC URL can be determined
    """
    if network_id not in NETWORK_CONFIG:
        raise NetworkNotFoundError(f"Network '{network_id}' is not configured")
    network_config = NETWORK_CONFIG[network_id]

    if rpc_url is None:
        rpc_url = os.environ.get(network_config["rpc_env"], network_config["default_rpc_url"])
    if rpc_url is None:
        raise ValueError(
            f"RPC URL required for '{network_id}': set ${network_config['rpc_env']} "
            "or pass rpc_url parameter"
        )

    if fee_token_address is None:
        fee_token_address = os.environ.get(network_config["fee_token_env"]) or None
    if private_keys is None:
        private_keys = private_keys_from_env()
    if retry is None:
        retry = retry_policy_from_env()

    descriptor = NetworkDescriptor(
        network_id=network_id,
        name=network_config["chain_name"],
        rpc_url=rpc_url,
        chain_id=network_config["chain_id"],
        chain_family=ChainFamily(network_config["chain_family"]),
        private_keys=list(private_keys),
        retry=retry,
    )
    if fee_token_address is not None:
        descriptor.set_fee_token_address(fee_token_address)
    return descriptor


def network_wallets(descriptor: NetworkDescriptor) -> WalletSet:
    """Decode the descriptor's key material into a wallet set."""
    return WalletSet.build(descriptor.private_keys)


def new_rsk_dev_network(**overrides) -> NetworkDescriptor:
    """Settings for a local RSK regtest node."""
    return get_network_descriptor("rsk_regtest", **overrides)


def new_rsk_test_network(**overrides) -> NetworkDescriptor:
    """Settings for the public RSK testnet."""
    return get_network_descriptor("rsk_testnet", **overrides)
