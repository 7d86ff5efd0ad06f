"""Uniform retry of transient chain I/O failures."""

import logging
import time
from typing import Callable, Optional, TypeVar

import requests

from .context import CallContext
from .types import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Only transport failures are retried, never RPC or validation errors
TRANSIENT_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


def call_with_retry(
    func: Callable[[], T],
    policy: RetryPolicy,
    description: str = "chain call",
    ctx: Optional[CallContext] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call func, retrying transient transport failures.

    Args:
        func: Zero-argument callable performing one chain call
        policy: Attempt count and linear delay
        description: Short label used in log messages
        ctx: Call context checked before every attempt
        sleep: Sleep function (injectable for tests)

    Returns:
        Whatever func returns

    Raises:
        DeploymentCancelledError: If ctx is cancelled or expired
        requests.exceptions.RequestException: Last transient error once attempts run out
    """
    for attempt in range(1, policy.attempts + 1):
        if ctx is not None:
            ctx.check()
        try:
            return func()
        except TRANSIENT_ERRORS as e:
            if attempt == policy.attempts:
                logger.warning(
                    "%s failed after %d attempts: %s", description, policy.attempts, e
                )
                raise
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                description,
                attempt,
                policy.attempts,
                policy.delay,
                e,
            )
            sleep(policy.delay)

    # Unreachable: RetryPolicy guarantees at least one attempt
    raise AssertionError("retry loop exited without result")
