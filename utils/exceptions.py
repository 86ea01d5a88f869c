"""
Deployment Exceptions
Error taxonomy for the deployment pipeline
"""


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigurationError(DeploymentError, ValueError):
    """Raised when the network configuration is missing or malformed."""

    pass


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when the requested network is not configured."""

    pass


class RPCConnectionError(DeploymentError, ConnectionError):
    """Raised when the RPC endpoint cannot be reached."""

    pass


class NoSignerError(DeploymentError, ValueError):
    """Raised when no signer account is available for the active network."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a compiled contract artifact cannot be resolved."""

    pass


class InvalidArtifactError(DeploymentError, ValueError):
    """Raised when an artifact exists but cannot be deployed."""

    pass


class TransactionRevertedError(DeploymentError, RuntimeError):
    """Raised when the deployment transaction is mined with a failed status."""

    pass


class ConfirmationTimeoutError(DeploymentError, TimeoutError):
    """Raised when a receipt or confirmation wait exceeds its timeout."""

    pass


class VerificationError(DeploymentError, RuntimeError):
    """Raised when block explorer source verification fails."""

    pass
