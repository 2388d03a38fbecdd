"""
deploy-verify: deploy a contract, wait for confirmations and verify its source
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import resolve_artifact
from .context import DeploymentContext, resolve_context
from .encoding import encode_constructor_args
from .exceptions import (
    ArtifactNotFoundError,
    ConfigurationError,
    ConstructorArgMismatch,
    DeploymentCancelled,
    DeploymentError,
    DeploymentTimedOut,
    InsufficientFunds,
    NetworkMismatchError,
    NetworkNotFoundError,
    NetworkUnreachable,
    NonceConflict,
    RpcError,
    TransactionReverted,
    VerificationRejected,
    VerificationUnavailable,
)
from .orchestrator import DeploymentOrchestrator, ProgressEvent, deploy_and_verify
from .rpc import compute_contract_address
from .submitter import submit
from .types import (
    ConfirmedDeployment,
    ContractArtifact,
    DeploymentReport,
    DeploymentSpec,
    PendingDeployment,
    VerificationOutcome,
    VerificationRequest,
    VerificationStatus,
)
from .verifier import RetryPolicy, verify
from .waiter import await_confirmations

try:
    __version__ = version("deploy-verify")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "deploy_and_verify",
    "ProgressEvent",
    "DeploymentContext",
    "resolve_context",
    "resolve_artifact",
    "encode_constructor_args",
    "compute_contract_address",
    "submit",
    "await_confirmations",
    "verify",
    "RetryPolicy",
    "DeploymentSpec",
    "ContractArtifact",
    "PendingDeployment",
    "ConfirmedDeployment",
    "VerificationRequest",
    "VerificationOutcome",
    "VerificationStatus",
    "DeploymentReport",
    "DeploymentError",
    "ConfigurationError",
    "NetworkNotFoundError",
    "NetworkMismatchError",
    "ArtifactNotFoundError",
    "NetworkUnreachable",
    "RpcError",
    "InsufficientFunds",
    "NonceConflict",
    "ConstructorArgMismatch",
    "DeploymentTimedOut",
    "TransactionReverted",
    "VerificationUnavailable",
    "VerificationRejected",
    "DeploymentCancelled",
]
