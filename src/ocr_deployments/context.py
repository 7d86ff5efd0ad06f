"""Cancellation and deadline context threaded through chain calls."""

import threading
import time
from typing import Optional

from .exceptions import DeploymentCancelledError


class CallContext:
    """
    Cancellation flag plus an optional deadline.

    Chain call sites call check() before touching the network, so an operator
    can abort a stuck deployment from another thread with cancel().
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now until the context expires (None = never)
        """
        self._cancelled = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    def cancel(self) -> None:
        """Mark the context as cancelled."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """
        Raise if the context may no longer be used for chain calls.

        Raises:
            DeploymentCancelledError: If cancelled or past the deadline
        """
        if self.cancelled:
            raise DeploymentCancelledError("Call context was cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise DeploymentCancelledError("Call context deadline exceeded")

    def cap_timeout(self, timeout: float) -> float:
        """Shorten timeout so it does not run past the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)


def background() -> CallContext:
    """A context that is never cancelled and has no deadline."""
    return CallContext()
