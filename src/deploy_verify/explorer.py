"""Etherscan-compatible verification API client for deploy-verify library."""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import requests

from .constants import RPC_TIMEOUT
from .types import VerificationRequest

logger = logging.getLogger(__name__)


class ExplorerState(Enum):
    """How the explorer answered a submission or status check."""

    ACCEPTED = "accepted"  # Queued for compilation, poll with the guid
    VERIFIED = "verified"
    NOT_FOUND = "not-found"  # Contract not indexed yet
    UNAVAILABLE = "unavailable"  # Rate limited or transport failure
    REJECTED = "rejected"


@dataclass(frozen=True)
class ExplorerResponse:
    state: ExplorerState
    message: str = ""
    guid: Optional[str] = None


def interpret_response(payload: Dict[str, Any]) -> ExplorerResponse:
    """
    Map an Etherscan-style {"status", "message", "result"} payload to an ExplorerResponse.

    Args:
        payload: Decoded JSON body from verifysourcecode or checkverifystatus

    Returns:
        ExplorerResponse; for an accepted submission the guid is the result string
    """
    status = str(payload.get("status", "0"))
    result = str(payload.get("result", ""))
    lowered = result.lower()

    if "already verified" in lowered:
        return ExplorerResponse(ExplorerState.VERIFIED, result)
    if "pending in queue" in lowered or "in progress" in lowered:
        return ExplorerResponse(ExplorerState.ACCEPTED, result)
    if "pass - verified" in lowered:
        return ExplorerResponse(ExplorerState.VERIFIED, result)
    if "unable to locate contractcode" in lowered or "does not have bytecode" in lowered:
        return ExplorerResponse(ExplorerState.NOT_FOUND, result)
    if "rate limit" in lowered:
        return ExplorerResponse(ExplorerState.UNAVAILABLE, result)

    if status == "1":
        # Successful verifysourcecode returns the receipt guid as result
        return ExplorerResponse(ExplorerState.ACCEPTED, "Submitted", guid=result)

    return ExplorerResponse(ExplorerState.REJECTED, result or str(payload.get("message", "")))


class EtherscanClient:
    """
    Client for the contract verification endpoints of an Etherscan-style API.

    Blocking; callers running inside an event loop hand calls to a thread.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        browser_url: Optional[str] = None,
        timeout: float = RPC_TIMEOUT,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.browser_url = browser_url
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"EtherscanClient({self.api_url!r})"

    def contract_url(self, address: str) -> Optional[str]:
        if not self.browser_url:
            return None
        return f"{self.browser_url}/address/{address}#code"

    def _request(self, method: str, **kwargs: Any) -> ExplorerResponse:
        try:
            response = requests.request(method, self.api_url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            return ExplorerResponse(ExplorerState.UNAVAILABLE, f"Network error: {e}")

        if response.status_code != 200:
            return ExplorerResponse(
                ExplorerState.UNAVAILABLE, f"HTTP status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError:
            return ExplorerResponse(
                ExplorerState.UNAVAILABLE, f"Malformed response: {response.text[:200]}"
            )

        return interpret_response(payload)

    def submit(self, request: VerificationRequest) -> ExplorerResponse:
        """
        Submit source for verification (action=verifysourcecode).

        Sends the standard JSON input the contract was compiled from, the way
        hardhat-etherscan does.

        Args:
            request: Verification request built from the confirmed deployment

        Returns:
            ExplorerResponse; ACCEPTED carries the guid to poll
        """
        data = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": request.contract_address,
            "sourceCode": json.dumps(request.source_input),
            "codeformat": "solidity-standard-json-input",
            "contractname": request.contract_name,
            "compilerversion": request.compiler_version,
            "optimizationUsed": "1" if request.optimizer_enabled else "0",
            "runs": str(request.optimizer_runs),
            # Misspelling is part of the Etherscan API
            "constructorArguements": request.constructor_args_hex,
        }
        logger.debug(
            "Submitting %s at %s to %s",
            request.contract_name,
            request.contract_address,
            self.api_url,
        )
        return self._request("POST", data=data)

    def check_status(self, guid: str) -> ExplorerResponse:
        """Poll the outcome of an accepted submission (action=checkverifystatus)."""
        params = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "checkverifystatus",
            "guid": guid,
        }
        response = self._request("GET", params=params)
        return ExplorerResponse(response.state, response.message, guid=guid)
