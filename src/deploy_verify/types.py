"""Data types and dataclasses for deploy-verify library."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class DeploymentSpec:
    """What to deploy, where, and how deep to wait. Never mutated."""

    contract_name: str  # e.g., "Farm"
    constructor_args: Tuple[Any, ...]  # Ordered, typed per constructor ABI
    confirmations: int  # Required confirmation depth (>= 1)
    network: str  # Key into NETWORK_CONFIG, e.g., "matic"
    gas_limit: Optional[int] = None  # Estimated via RPC when None

    def __post_init__(self) -> None:
        # Lists are accepted for convenience but stored as a tuple
        object.__setattr__(self, "constructor_args", tuple(self.constructor_args))
        if self.confirmations < 1:
            raise ValueError(
                f"confirmations must be at least 1, got {self.confirmations}"
            )


@dataclass(frozen=True)
class BuildInfo:
    """Compiler run that produced an artifact (Hardhat build-info file)."""

    solc_version: str  # e.g., "0.7.6"
    solc_long_version: str  # e.g., "0.7.6+commit.7338295f"
    input: Dict[str, Any]  # Standard JSON input given to solc

    @property
    def optimizer(self) -> Dict[str, Any]:
        return self.input.get("settings", {}).get("optimizer", {})


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract as produced by the compiler toolchain."""

    name: str
    source_name: str  # e.g., "contracts/Farm.sol"
    abi: List[Dict[str, Any]]
    bytecode: str  # Creation bytecode, 0x-prefixed
    build_info: Optional[BuildInfo] = None

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.name}"

    def constructor_types(self) -> List[str]:
        """
        Get the ABI types of the constructor inputs.

        Returns:
            List of canonical ABI type strings, empty if there is no constructor
        """
        for item in self.abi:
            if item.get("type") == "constructor":
                return [_abi_type(arg) for arg in item.get("inputs", [])]
        return []

    def deployment_data(self, encoded_args: bytes) -> str:
        """Creation bytecode followed by the ABI-encoded constructor arguments."""
        return self.bytecode + encoded_args.hex()


def _abi_type(arg: Dict[str, Any]) -> str:
    # Tuples are spelled out from their components, keeping any array suffix
    abi_type = arg["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(_abi_type(c) for c in arg.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


@dataclass(frozen=True)
class PendingDeployment:
    """
    A broadcast, not yet confirmed, deployment transaction.

    The contract address depends only on the sender and the sender's nonce
    at submission time, never on the deployed code or its arguments.
    """

    transaction_hash: str
    contract_address: str  # Checksummed
    sender: str
    nonce: int
    submitted_at: datetime


@dataclass(frozen=True)
class ConfirmedDeployment:
    """A deployment buried under the requested number of blocks."""

    pending: PendingDeployment
    inclusion_block: int  # Block the transaction was (last) included in
    confirmed_block: int  # inclusion_block + depth - 1
    head_block: int  # Chain head observed when the depth was reached
    confirmations: int  # head_block - inclusion_block + 1

    @property
    def contract_address(self) -> str:
        return self.pending.contract_address

    @property
    def transaction_hash(self) -> str:
        return self.pending.transaction_hash


@dataclass(frozen=True)
class VerificationRequest:
    """Everything the explorer needs to recompile and compare the bytecode."""

    contract_address: str
    contract_name: str  # Fully qualified, e.g., "contracts/Farm.sol:Farm"
    compiler_version: str  # Explorer format, e.g., "v0.7.6+commit.7338295f"
    optimizer_enabled: bool
    optimizer_runs: int
    source_input: Dict[str, Any]  # Standard JSON input
    constructor_args_hex: str  # No 0x prefix


class VerificationStatus(Enum):
    """
    Verification result kinds.

    Value strings are what the report prints.
    """

    VERIFIED = "verified"
    PENDING_REVIEW = "pending-review"
    REJECTED = "rejected"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of the verification stage."""

    status: VerificationStatus
    reason: Optional[str] = None
    guid: Optional[str] = None  # Explorer receipt id, when one was issued

    @property
    def is_terminal(self) -> bool:
        return self.status in (VerificationStatus.VERIFIED, VerificationStatus.REJECTED)

    @classmethod
    def verified(cls, guid: Optional[str] = None) -> "VerificationOutcome":
        return cls(VerificationStatus.VERIFIED, guid=guid)

    @classmethod
    def pending_review(cls, guid: Optional[str], reason: str) -> "VerificationOutcome":
        return cls(VerificationStatus.PENDING_REVIEW, reason=reason, guid=guid)

    @classmethod
    def rejected(cls, reason: str, guid: Optional[str] = None) -> "VerificationOutcome":
        return cls(VerificationStatus.REJECTED, reason=reason, guid=guid)

    @classmethod
    def skipped(cls, reason: str) -> "VerificationOutcome":
        return cls(VerificationStatus.SKIPPED, reason=reason)


@dataclass(frozen=True)
class DeploymentReport:
    """Final result of one orchestration run."""

    network: str
    contract_address: str
    transaction_hash: str
    confirmed_block: int
    verification: VerificationOutcome
    explorer_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "network": self.network,
            "contract_address": self.contract_address,
            "transaction_hash": self.transaction_hash,
            "confirmed_block": self.confirmed_block,
            "verification": {
                "status": self.verification.status.value,
                "reason": self.verification.reason,
                "guid": self.verification.guid,
            },
        }
        if self.explorer_url:
            result["explorer_url"] = self.explorer_url
        return result
