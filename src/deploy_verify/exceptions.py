"""Custom exception classes for deploy-verify library."""

from typing import Optional


class DeploymentError(Exception):
    """
    Base exception for deployment-related errors.

    Whatever is already known about the deployment when the error is raised
    is attached, so a contract that reached the chain is still reported even
    if a later stage fails.
    """

    contract_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    confirmed_block: Optional[int] = None


class ConfigurationError(DeploymentError, ValueError):
    """Raised when a required setting (key, RPC URL) is missing or malformed."""

    pass


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network is not configured."""

    pass


class NetworkMismatchError(DeploymentError, ValueError):
    """Raised when the node's chain id does not match the configured network."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a compiled artifact cannot be resolved unambiguously."""

    pass


class NetworkUnreachable(DeploymentError, ConnectionError):
    """Raised when the RPC endpoint cannot be reached."""

    pass


class RpcError(DeploymentError, RuntimeError):
    """Raised when the node answers with a JSON-RPC error we do not classify."""

    pass


class InsufficientFunds(RpcError):
    """Raised when the signer cannot pay for gas_limit * gas_price."""

    pass


class NonceConflict(RpcError):
    """Raised when another transaction already used the sender's nonce."""

    pass


class ConstructorArgMismatch(DeploymentError, ValueError):
    """Raised when constructor arguments do not fit the artifact's constructor ABI."""

    pass


class DeploymentTimedOut(DeploymentError, TimeoutError):
    """Raised when the confirmation depth is not reached before the timeout."""

    pass


class TransactionReverted(DeploymentError):
    """Raised when the deployment was mined but left no code at the contract address."""

    pass


class VerificationUnavailable(DeploymentError):
    """Raised when the explorer could not take the verification after all retries."""

    pass


class VerificationRejected(DeploymentError):
    """Raised when the explorer deterministically rejected the submitted source."""

    pass


class DeploymentCancelled(DeploymentError):
    """Raised when the caller cancels waiting; the transaction itself stays on-chain."""

    pass
