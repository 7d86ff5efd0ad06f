"""Custom exception classes for ocr-deployments library."""


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ChainConnectionError(DeploymentError, ConnectionError):
    """Raised when the RPC endpoint cannot be dialed or does not answer."""

    pass


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network is not configured."""

    pass


class KeyDecodeError(DeploymentError, ValueError):
    """Raised when a private key cannot be decoded into a wallet."""

    pass


class IndexOutOfRangeError(DeploymentError, IndexError):
    """Raised when a wallet index is outside the wallet set."""

    pass


class EmptySetError(DeploymentError, LookupError):
    """Raised when the default wallet is requested from an empty wallet set."""

    pass


class UnsupportedClientError(DeploymentError, ValueError):
    """Raised when no client or deployer implementation matches a chain family."""

    pass


class GasPriceFetchError(DeploymentError, RuntimeError):
    """Raised when the chain's suggested gas price cannot be fetched."""

    pass


class TransactionSubmissionError(DeploymentError, RuntimeError):
    """Raised when the chain rejects or reverts a transaction."""

    pass


class TypeAssertionError(DeploymentError, TypeError):
    """Raised when a deployment yields an unexpected binding. Always a programmer error."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a contract artifact file is not found."""

    pass


class DefectiveArtifactError(DeploymentError, ValueError):
    """Raised when a contract artifact is missing its ABI or bytecode."""

    pass


class DeploymentCancelledError(DeploymentError, TimeoutError):
    """Raised when a call context is cancelled or its deadline has passed."""

    pass
