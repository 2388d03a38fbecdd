"""Deployment transaction submission for deploy-verify library."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from .context import DeploymentContext
from .rpc import compute_contract_address
from .types import ContractArtifact, DeploymentSpec, PendingDeployment

logger = logging.getLogger(__name__)


def build_deployment_transaction(
    spec: DeploymentSpec,
    artifact: ContractArtifact,
    encoded_args: bytes,
    context: DeploymentContext,
    nonce: int,
) -> Dict[str, Any]:
    """
    Build an unsigned legacy contract-creation transaction.

    Args:
        spec: Deployment spec (gas_limit, if set, is used as-is)
        artifact: Contract artifact providing the creation bytecode
        encoded_args: Constructor arguments from encode_constructor_args()
        context: Resolved network context
        nonce: Sender nonce to use

    Returns:
        Transaction dict ready for eth-account signing (no "to": creation)
    """
    data = artifact.deployment_data(encoded_args)

    gas_price = context.gas_price
    if gas_price is None:
        gas_price = context.rpc.gas_price()

    gas_limit = spec.gas_limit
    if gas_limit is None:
        gas_limit = context.rpc.estimate_gas({"from": context.sender, "data": data})

    return {
        "nonce": nonce,
        "gasPrice": gas_price,
        "gas": gas_limit,
        "value": 0,
        "data": data,
        "chainId": context.chain_id,
    }


def submit(
    spec: DeploymentSpec,
    artifact: ContractArtifact,
    encoded_args: bytes,
    context: DeploymentContext,
) -> PendingDeployment:
    """
    Sign and broadcast the deployment transaction.

    Not idempotent: every call broadcasts a new transaction and, once mined,
    creates a new contract instance. The contract address is
    f(sender, sender nonce at submission) and is known before the
    transaction is mined. "Deploy if absent" must be decided by the caller
    before calling this.

    Args:
        spec: Deployment spec
        artifact: Contract artifact to deploy
        encoded_args: ABI-encoded constructor arguments, shared with verification
        context: Resolved network context (RPC connection and signer)

    Returns:
        PendingDeployment

    Raises:
        NetworkUnreachable: If the node cannot be reached
        InsufficientFunds: If the signer cannot pay gas_limit * gas_price
        NonceConflict: If the nonce was taken by another transaction meanwhile
        RpcError: For any other rejection by the node
    """
    sender = context.sender
    nonce = context.rpc.get_transaction_count(sender, "pending")
    contract_address = compute_contract_address(sender, nonce)

    transaction = build_deployment_transaction(spec, artifact, encoded_args, context, nonce)
    signed = context.account.sign_transaction(transaction)

    logger.info(
        "Submitting %s deployment from %s (nonce %d, gas %d @ %d wei)",
        spec.contract_name,
        sender,
        nonce,
        transaction["gas"],
        transaction["gasPrice"],
    )
    transaction_hash = context.rpc.send_raw_transaction(signed.raw_transaction)

    return PendingDeployment(
        transaction_hash=transaction_hash,
        contract_address=contract_address,
        sender=sender,
        nonce=nonce,
        submitted_at=datetime.now(timezone.utc),
    )
