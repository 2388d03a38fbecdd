"""Block-explorer source verification for deploy-verify library."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from .constants import (
    COMPILER_SETTINGS,
    VERIFY_BACKOFF_FACTOR,
    VERIFY_BASE_DELAY,
    VERIFY_MAX_ATTEMPTS,
    VERIFY_STATUS_POLL_ATTEMPTS,
    VERIFY_STATUS_POLL_INTERVAL,
)
from .exceptions import DeploymentCancelled, VerificationUnavailable
from .explorer import ExplorerState
from .types import (
    ConfirmedDeployment,
    ContractArtifact,
    DeploymentSpec,
    VerificationOutcome,
    VerificationRequest,
)
from .waiter import Sleep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff for verification submissions.

    The delay before attempt n+1 is base_delay * factor ** (n - 1); there is
    no delay after the last attempt or after success.
    """

    base_delay: float = VERIFY_BASE_DELAY
    factor: float = VERIFY_BACKOFF_FACTOR
    max_attempts: int = VERIFY_MAX_ATTEMPTS
    status_poll_interval: float = VERIFY_STATUS_POLL_INTERVAL
    status_poll_attempts: int = VERIFY_STATUS_POLL_ATTEMPTS

    def delay(self, attempt: int) -> float:
        """Delay after failed attempt number `attempt` (1-based)."""
        return self.base_delay * self.factor ** (attempt - 1)

    def delays(self) -> List[float]:
        return [self.delay(n) for n in range(1, self.max_attempts)]


def build_verification_request(
    confirmed: ConfirmedDeployment,
    artifact: ContractArtifact,
    encoded_args: bytes,
) -> VerificationRequest:
    """
    Build the explorer request for a confirmed deployment.

    The constructor arguments are the exact bytes that went into the
    deployment transaction; they are not re-encoded here.

    Args:
        confirmed: Confirmed deployment
        artifact: The artifact that was deployed (must carry build info)
        encoded_args: Constructor arguments from encode_constructor_args()

    Returns:
        VerificationRequest

    Raises:
        ValueError: If the artifact has no build info
    """
    build_info = artifact.build_info
    if build_info is None:
        raise ValueError(f"{artifact.name} has no build info; cannot verify source")

    optimizer = build_info.optimizer or COMPILER_SETTINGS["optimizer"]
    return VerificationRequest(
        contract_address=confirmed.contract_address,
        contract_name=artifact.fully_qualified_name,
        compiler_version=f"v{build_info.solc_long_version}",
        optimizer_enabled=bool(optimizer.get("enabled", False)),
        optimizer_runs=int(optimizer.get("runs", COMPILER_SETTINGS["optimizer"]["runs"])),
        source_input=build_info.input,
        constructor_args_hex=encoded_args.hex(),
    )


def _check_cancelled(cancel_event: Optional[asyncio.Event], address: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise DeploymentCancelled(f"Stopped verifying {address}")


async def _poll_status(
    explorer: Any,
    guid: str,
    address: str,
    policy: RetryPolicy,
    cancel_event: Optional[asyncio.Event],
    sleep: Sleep,
) -> VerificationOutcome:
    for _ in range(policy.status_poll_attempts):
        _check_cancelled(cancel_event, address)
        await sleep(policy.status_poll_interval)

        response = await asyncio.to_thread(explorer.check_status, guid)
        match response.state:
            case ExplorerState.VERIFIED:
                return VerificationOutcome.verified(guid)
            case ExplorerState.REJECTED:
                return VerificationOutcome.rejected(response.message, guid)
            case _:
                # Still queued, or a transient failure of the status endpoint
                logger.debug("Verification %s: %s", guid, response.message)

    return VerificationOutcome.pending_review(
        guid, f"Still pending after {policy.status_poll_attempts} status checks"
    )


async def verify(
    confirmed: ConfirmedDeployment,
    spec: DeploymentSpec,
    artifact: ContractArtifact,
    encoded_args: bytes,
    explorer: Optional[Any],
    policy: Optional[RetryPolicy] = None,
    cancel_event: Optional[asyncio.Event] = None,
    sleep: Sleep = asyncio.sleep,
) -> VerificationOutcome:
    """
    Register the deployed contract's source with the block explorer.

    Right after inclusion the explorer often has not indexed the contract
    yet; such answers (and transport failures) are retried per `policy`.
    A rejection is deterministic and is returned at once.

    Args:
        confirmed: Confirmed deployment
        spec: Deployment spec the contract was deployed from
        artifact: Deployed artifact
        encoded_args: Constructor arguments used in the deployment transaction
        explorer: EtherscanClient (or compatible); None skips verification
        policy: Retry policy (defaults to RetryPolicy())
        cancel_event: Checked before every attempt and status poll
        sleep: Awaitable used for backoff and polling delays

    Returns:
        VerificationOutcome: Verified, PendingReview, Rejected or Skipped

    Raises:
        VerificationUnavailable: If every attempt got a retryable answer
        DeploymentCancelled: If cancel_event is set
    """
    if explorer is None:
        return VerificationOutcome.skipped(f"No block explorer configured for '{spec.network}'")
    if artifact.build_info is None:
        return VerificationOutcome.skipped(f"No build info for {artifact.name}")

    policy = policy or RetryPolicy()
    request = build_verification_request(confirmed, artifact, encoded_args)
    address = confirmed.contract_address

    response = None
    for attempt in range(1, policy.max_attempts + 1):
        _check_cancelled(cancel_event, address)

        logger.info(
            "Verifying %s at %s (attempt %d/%d)",
            request.contract_name,
            address,
            attempt,
            policy.max_attempts,
        )
        response = await asyncio.to_thread(explorer.submit, request)

        match response.state:
            case ExplorerState.VERIFIED:
                return VerificationOutcome.verified(response.guid)
            case ExplorerState.REJECTED:
                return VerificationOutcome.rejected(response.message, response.guid)
            case ExplorerState.ACCEPTED if response.guid is None:
                return VerificationOutcome.pending_review(None, response.message)
            case ExplorerState.ACCEPTED:
                return await _poll_status(
                    explorer, response.guid, address, policy, cancel_event, sleep
                )

        if attempt < policy.max_attempts:
            delay = policy.delay(attempt)
            logger.info("Explorer not ready (%s); retrying in %.0fs", response.message, delay)
            await sleep(delay)

    raise VerificationUnavailable(
        f"Explorer did not accept verification of {address} after "
        f"{policy.max_attempts} attempts: {response.message if response else ''}"
    )
