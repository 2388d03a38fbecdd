"""Confirmation waiting for deploy-verify library."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from .constants import DEFAULT_POLL_INTERVAL
from .exceptions import (
    DeploymentCancelled,
    DeploymentTimedOut,
    NetworkUnreachable,
    RpcError,
    TransactionReverted,
)
from .types import ConfirmedDeployment, PendingDeployment

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def _has_code(code: Optional[str]) -> bool:
    return bool(code) and code not in ("0x", "0x0")


async def _poll_once(
    pending: PendingDeployment,
    depth: int,
    rpc: Any,
    last_inclusion: Optional[int],
) -> Tuple[Optional[ConfirmedDeployment], Optional[int]]:
    """
    Check the deployment once.

    Returns:
        (ConfirmedDeployment or None, inclusion block seen by this poll or None)

    Raises:
        TransactionReverted: If the transaction failed or left no code behind
        NetworkUnreachable, RpcError: If a call to the node failed
    """
    receipt = await asyncio.to_thread(rpc.get_transaction_receipt, pending.transaction_hash)

    if receipt is None:
        if last_inclusion is not None:
            logger.warning(
                "Transaction %s no longer in block %d (reorg); waiting for re-inclusion",
                pending.transaction_hash,
                last_inclusion,
            )
        return None, None

    if receipt["status"] == 0:
        raise TransactionReverted(
            f"Deployment transaction {pending.transaction_hash} reverted "
            f"in block {receipt['blockNumber']}"
        )

    inclusion_block = receipt["blockNumber"]
    if inclusion_block != last_inclusion:
        logger.info(
            "Transaction %s included in block %d", pending.transaction_hash, inclusion_block
        )

    head = await asyncio.to_thread(rpc.block_number)
    confirmations = head - inclusion_block + 1
    if confirmations < depth:
        logger.debug(
            "%s: %d/%d confirmations", pending.transaction_hash, max(confirmations, 0), depth
        )
        return None, inclusion_block

    code = await asyncio.to_thread(rpc.get_code, pending.contract_address)
    if not _has_code(code):
        # Empty code is only a revert if the transaction is still in the same block
        recheck = await asyncio.to_thread(
            rpc.get_transaction_receipt, pending.transaction_hash
        )
        if recheck is None or recheck["blockNumber"] != inclusion_block:
            logger.warning(
                "Transaction %s left block %d while checking code (reorg); waiting",
                pending.transaction_hash,
                inclusion_block,
            )
            return None, None
        raise TransactionReverted(
            f"No contract code at {pending.contract_address} after "
            f"transaction {pending.transaction_hash}"
        )

    confirmed = ConfirmedDeployment(
        pending=pending,
        inclusion_block=inclusion_block,
        confirmed_block=inclusion_block + depth - 1,
        head_block=head,
        confirmations=confirmations,
    )
    return confirmed, inclusion_block


async def await_confirmations(
    pending: PendingDeployment,
    depth: int,
    timeout: float,
    rpc: Any,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel_event: Optional[asyncio.Event] = None,
    sleep: Sleep = asyncio.sleep,
) -> ConfirmedDeployment:
    """
    Wait until a deployment transaction is buried under `depth` blocks.

    The receipt is fetched again on every poll; the inclusion block is never
    cached. A receipt that disappears (the block was reorganised away) means
    "not included" and waiting resumes until the transaction is re-included
    or the timeout expires. A failed poll (node unreachable or an RPC error)
    is logged and retried at the next interval.

    Blocking RPC calls run in worker threads and waiting uses `sleep`, so
    several deployments can wait concurrently on one event loop.

    Args:
        pending: The broadcast deployment
        depth: Required confirmations; depth=1 means "included in a block"
        timeout: Seconds to wait in total
        rpc: Connection with get_transaction_receipt, block_number and get_code
        poll_interval: Seconds between polls
        cancel_event: Checked at the top of every poll
        sleep: Awaitable used between polls

    Returns:
        ConfirmedDeployment with confirmed_block = inclusion_block + depth - 1

    Raises:
        TransactionReverted: If the transaction failed or left no code behind
        DeploymentTimedOut: If the depth is not reached within timeout; the
                            last failed poll, if any, is chained
        DeploymentCancelled: If cancel_event is set
    """
    if depth < 1:
        raise ValueError(f"depth must be at least 1, got {depth}")

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    last_inclusion: Optional[int] = None
    last_error: Optional[Exception] = None

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise DeploymentCancelled(
                f"Stopped waiting for {pending.transaction_hash}; it may still be mined"
            )

        try:
            confirmed, last_inclusion = await _poll_once(pending, depth, rpc, last_inclusion)
        except (NetworkUnreachable, RpcError) as e:
            logger.warning("Polling %s failed: %s; retrying", pending.transaction_hash, e)
            last_error = e
        else:
            if confirmed is not None:
                return confirmed
            last_error = None

        if loop.time() >= deadline:
            raise DeploymentTimedOut(
                f"{pending.transaction_hash} did not reach {depth} confirmation(s) "
                f"within {timeout}s"
            ) from last_error
        await sleep(poll_interval)
