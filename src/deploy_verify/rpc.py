"""JSON-RPC connection to an EVM node for deploy-verify library."""

import itertools
import logging
from typing import Any, Dict, List, Optional

import requests
import rlp
from eth_utils import keccak, to_bytes, to_checksum_address

from .constants import RPC_TIMEOUT
from .exceptions import InsufficientFunds, NetworkUnreachable, NonceConflict, RpcError

logger = logging.getLogger(__name__)

# Lower-cased fragments of node error messages, per geth / bor / hardhat wording
_INSUFFICIENT_FUNDS_MARKERS = ("insufficient funds",)
_NONCE_CONFLICT_MARKERS = (
    "nonce too low",
    "already known",
    "known transaction",
    "replacement transaction underpriced",
    "nonce has already been used",
)


def compute_contract_address(sender: str, nonce: int) -> str:
    """
    Compute the address a contract-creation transaction deploys to.

    The address is keccak(rlp([sender, nonce]))[12:]; it depends only on the
    sender and its nonce at submission time, not on the code or arguments.
    Two submissions from the same sender therefore never share an address.

    Args:
        sender: Deploying account address
        nonce: Sender's transaction count when the deployment is submitted

    Returns:
        Checksummed contract address
    """
    encoded = rlp.encode([to_bytes(hexstr=sender), nonce])
    return to_checksum_address(keccak(encoded)[12:])


def _classify_rpc_error(method: str, error: Dict[str, Any]) -> RpcError:
    message = str(error.get("message", error))
    lowered = message.lower()
    if any(marker in lowered for marker in _INSUFFICIENT_FUNDS_MARKERS):
        return InsufficientFunds(f"{method} rejected: {message}")
    if any(marker in lowered for marker in _NONCE_CONFLICT_MARKERS):
        return NonceConflict(f"{method} rejected: {message}")
    return RpcError(f"RPC error from {method}: {message}")


class RpcConnection:
    """
    Minimal JSON-RPC client for the calls the deployment pipeline needs.

    Holds no per-call state, so one instance can serve many concurrent
    polls (each from its own worker thread).
    """

    def __init__(self, url: str, timeout: float = RPC_TIMEOUT):
        self.url = url
        self.timeout = timeout
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"RpcConnection({self.url!r})"

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Perform a single JSON-RPC call.

        Args:
            method: RPC method name, e.g. "eth_blockNumber"
            params: Positional parameters

        Returns:
            The "result" member of the response (may be None)

        Raises:
            NetworkUnreachable: If the node cannot be reached or answers non-200
            InsufficientFunds: If the node reports the sender cannot pay
            NonceConflict: If the node reports the nonce is already used
            RpcError: For any other JSON-RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }
        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkUnreachable(f"Network error during {method}: {e}") from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise NetworkUnreachable(
                f"{method} failed with HTTP status {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise RpcError(f"Malformed response to {method}: {response.text[:200]}") from e

        # Check for RPC errors
        if "error" in result:
            raise _classify_rpc_error(method, result["error"])

        return result.get("result")

    def chain_id(self) -> int:
        return int(self.call("eth_chainId"), 16)

    def block_number(self) -> int:
        return int(self.call("eth_blockNumber"), 16)

    def gas_price(self) -> int:
        return int(self.call("eth_gasPrice"), 16)

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return int(self.call("eth_getTransactionCount", [address, block]), 16)

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        return int(self.call("eth_estimateGas", [transaction]), 16)

    def send_raw_transaction(self, raw_transaction: bytes) -> str:
        """Broadcast a signed transaction and return its hash."""
        return self.call("eth_sendRawTransaction", ["0x" + raw_transaction.hex()])

    def get_transaction_receipt(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a transaction receipt.

        Returns:
            Receipt dict with "blockNumber" and "status" as ints,
            or None while the transaction is not part of the canonical chain
        """
        receipt = self.call("eth_getTransactionReceipt", [transaction_hash])
        if receipt is None or receipt.get("blockNumber") is None:
            return None

        # Pre-byzantium receipts carry no status; treat as success
        status = receipt.get("status")
        return {
            **receipt,
            "blockNumber": int(receipt["blockNumber"], 16),
            "status": int(status, 16) if status is not None else 1,
        }

    def get_code(self, address: str, block: str = "latest") -> str:
        return self.call("eth_getCode", [address, block])
