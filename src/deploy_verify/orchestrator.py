"""Main API for deploy-verify library."""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .artifacts import resolve_artifact
from .constants import DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_POLL_INTERVAL
from .context import DeploymentContext
from .encoding import describe_constructor, encode_constructor_args
from .exceptions import DeploymentError, NetworkMismatchError, VerificationRejected
from .submitter import submit
from .types import (
    ConfirmedDeployment,
    DeploymentReport,
    DeploymentSpec,
    PendingDeployment,
    VerificationStatus,
)
from .verifier import RetryPolicy, verify
from .waiter import Sleep, await_confirmations

logger = logging.getLogger(__name__)


class ProgressEvent(Enum):
    """Stage boundaries reported while a deployment runs."""

    SUBMITTED = "submitted"  # Address and transaction hash known
    CONFIRMED = "confirmed"
    VERIFIED = "verified"  # Verification finished, whatever its outcome


ProgressCallback = Callable[[ProgressEvent, Any], None]


def _annotate(
    error: DeploymentError,
    pending: Optional[PendingDeployment],
    confirmed: Optional[ConfirmedDeployment] = None,
) -> DeploymentError:
    if pending is not None:
        error.contract_address = pending.contract_address
        error.transaction_hash = pending.transaction_hash
    if confirmed is not None:
        error.confirmed_block = confirmed.confirmed_block
    return error


class DeploymentOrchestrator:
    """Runs submit -> confirm -> verify for one contract on one network."""

    def __init__(
        self,
        context: DeploymentContext,
        artifacts_dir: Optional[Union[Path, str]] = None,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        retry_policy: Optional[RetryPolicy] = None,
        on_progress: Optional[ProgressCallback] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            context: Resolved network context (RPC, signer, explorer)
            artifacts_dir: Hardhat artifacts directory (defaults to ./artifacts)
            confirmation_timeout: Seconds to wait for the confirmation depth
            poll_interval: Seconds between confirmation polls
            retry_policy: Verification retry policy
            on_progress: Called with (ProgressEvent, value) at each stage boundary
            sleep: Awaitable used for every wait (replaceable in tests)
        """
        self.context = context
        self.artifacts_dir = artifacts_dir
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self.retry_policy = retry_policy or RetryPolicy()
        self.on_progress = on_progress
        self.sleep = sleep

    def _notify(self, event: ProgressEvent, value: Any) -> None:
        # Progress is advisory; a failing callback must not fail the run
        if self.on_progress is None:
            return
        try:
            self.on_progress(event, value)
        except Exception:
            logger.exception("Progress callback failed on %s", event.value)

    async def run(
        self, spec: DeploymentSpec, cancel_event: Optional[asyncio.Event] = None
    ) -> DeploymentReport:
        """
        Deploy, confirm and verify one contract.

        Stages run strictly in order and the first failure aborts the run;
        later stages are never started. The constructor arguments are encoded
        once and the same bytes go to both the transaction and the explorer.

        Cancelling (cancel_event or task cancellation) only stops waiting: an
        already broadcast transaction stays pending on-chain.

        Args:
            spec: What to deploy
            cancel_event: Checked at the top of every polling iteration

        Returns:
            DeploymentReport

        Raises:
            DeploymentError: The specific failure, annotated with the contract
                             address / transaction hash / confirmed block known
                             when it happened
        """
        if spec.network != self.context.network:
            raise NetworkMismatchError(
                f"Spec targets '{spec.network}' but context is connected to "
                f"'{self.context.network}'"
            )

        artifact = await asyncio.to_thread(
            resolve_artifact, spec.contract_name, self.artifacts_dir
        )
        logger.info(
            "Deploying %s %s with %s",
            artifact.name,
            describe_constructor(artifact.abi),
            list(spec.constructor_args),
        )
        encoded_args = encode_constructor_args(artifact, spec.constructor_args)

        pending = await asyncio.to_thread(submit, spec, artifact, encoded_args, self.context)
        logger.info(
            "%s deployed at %s (tx %s)",
            artifact.name,
            pending.contract_address,
            pending.transaction_hash,
        )
        self._notify(ProgressEvent.SUBMITTED, pending)

        try:
            confirmed = await await_confirmations(
                pending,
                spec.confirmations,
                self.confirmation_timeout,
                self.context.rpc,
                poll_interval=self.poll_interval,
                cancel_event=cancel_event,
                sleep=self.sleep,
            )
        except DeploymentError as e:
            _annotate(e, pending)
            raise
        logger.info(
            "%s confirmed at block %d (%d confirmations)",
            pending.contract_address,
            confirmed.confirmed_block,
            confirmed.confirmations,
        )
        self._notify(ProgressEvent.CONFIRMED, confirmed)

        try:
            outcome = await verify(
                confirmed,
                spec,
                artifact,
                encoded_args,
                self.context.explorer,
                policy=self.retry_policy,
                cancel_event=cancel_event,
                sleep=self.sleep,
            )
        except DeploymentError as e:
            _annotate(e, pending, confirmed)
            raise
        logger.info("Verification of %s: %s", pending.contract_address, outcome.status.value)
        self._notify(ProgressEvent.VERIFIED, outcome)

        if outcome.status is VerificationStatus.REJECTED:
            raise _annotate(
                VerificationRejected(f"Explorer rejected verification: {outcome.reason}"),
                pending,
                confirmed,
            )

        explorer_url = None
        if self.context.explorer is not None:
            explorer_url = self.context.explorer.contract_url(pending.contract_address)

        return DeploymentReport(
            network=spec.network,
            contract_address=pending.contract_address,
            transaction_hash=pending.transaction_hash,
            confirmed_block=confirmed.confirmed_block,
            verification=outcome,
            explorer_url=explorer_url,
        )


def deploy_and_verify(
    spec: DeploymentSpec,
    context: DeploymentContext,
    artifacts_dir: Optional[Union[Path, str]] = None,
    **kwargs: Any,
) -> DeploymentReport:
    """
    Synchronous entry point: run one deployment on a fresh event loop.

    Args:
        spec: What to deploy
        context: Resolved network context
        artifacts_dir: Hardhat artifacts directory
        **kwargs: Passed to DeploymentOrchestrator

    Returns:
        DeploymentReport

    Raises:
        DeploymentError: If any stage fails
    """
    orchestrator = DeploymentOrchestrator(context, artifacts_dir, **kwargs)
    return asyncio.run(orchestrator.run(spec))
