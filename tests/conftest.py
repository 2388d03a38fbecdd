"""Shared pytest fixtures for deploy-verify tests."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest
from eth_account import Account
from eth_utils import keccak

from deploy_verify.artifacts import resolve_artifact
from deploy_verify.constants import HARDHAT_DEFAULT_PRIVATE_KEY
from deploy_verify.context import DeploymentContext
from deploy_verify.explorer import ExplorerResponse, ExplorerState
from deploy_verify.types import ContractArtifact, DeploymentSpec, PendingDeployment

# Hardhat account 0 and the address of its first deployment (nonce 0)
HARDHAT_ACCOUNT_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
HARDHAT_FIRST_CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

FARM_ARGS = (
    "0x766f03e47674608cccf7414f6c4ddf3d963ae394",
    100,
    "0x1111111111111111111111111111111111111111",
    23595875,
    23595875,
)


class FakeRpc:
    """
    Scripted stand-in for RpcConnection.

    `receipts` is consumed one entry per receipt poll, `heads` one entry per
    block_number call and `code` (a string or a list) one entry per get_code
    call; the last entry of each repeats forever. An exception in a script
    is raised instead of returned.
    """

    def __init__(
        self,
        receipts: Optional[List[Optional[Dict[str, int]]]] = None,
        heads: Optional[List[int]] = None,
        code: Union[str, List[str]] = "0x6080604052600080fdfe",
        nonce: int = 0,
        gas_price: int = 1_000_000_000,
        gas: int = 1_500_000,
    ):
        self.receipts = list(receipts or [None])
        self.heads = list(heads or [0])
        self.codes = list(code) if isinstance(code, list) else [code]
        self.nonce = nonce
        self._gas_price = gas_price
        self.gas = gas
        self.calls: List[str] = []
        self.sent: List[bytes] = []

    @staticmethod
    def _next(script: list) -> Any:
        value = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(value, Exception):
            raise value
        return value

    def get_transaction_receipt(self, transaction_hash: str) -> Optional[Dict[str, int]]:
        self.calls.append("get_transaction_receipt")
        return self._next(self.receipts)

    def block_number(self) -> int:
        self.calls.append("block_number")
        return self._next(self.heads)

    def get_code(self, address: str, block: str = "latest") -> str:
        self.calls.append("get_code")
        return self._next(self.codes)

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        self.calls.append("get_transaction_count")
        return self.nonce

    def gas_price(self) -> int:
        self.calls.append("gas_price")
        return self._gas_price

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        self.calls.append("estimate_gas")
        return self.gas

    def send_raw_transaction(self, raw_transaction: bytes) -> str:
        self.calls.append("send_raw_transaction")
        self.sent.append(raw_transaction)
        return "0x" + keccak(raw_transaction).hex()


class FakeExplorer:
    """Scripted stand-in for EtherscanClient recording every request."""

    def __init__(
        self,
        submit_responses: List[ExplorerResponse],
        status_responses: Optional[List[ExplorerResponse]] = None,
    ):
        self.submit_responses = list(submit_responses)
        self.status_responses = list(status_responses or [])
        self.submissions: List[Any] = []
        self.status_checks: List[str] = []

    def submit(self, request: Any) -> ExplorerResponse:
        self.submissions.append(request)
        return self.submit_responses.pop(0)

    def check_status(self, guid: str) -> ExplorerResponse:
        self.status_checks.append(guid)
        return self.status_responses.pop(0)

    def contract_url(self, address: str) -> str:
        return f"https://explorer.example.com/address/{address}#code"


class SleepRecorder:
    """Replacement for asyncio.sleep that records delays and returns at once."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def included(block: int, status: int = 1) -> Dict[str, int]:
    return {"blockNumber": block, "status": status}


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the Hardhat artifacts fixture directory."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def farm_artifact(artifacts_dir: Path) -> ContractArtifact:
    """Resolve the Farm artifact fixture."""
    return resolve_artifact("Farm", artifacts_dir)


@pytest.fixture
def farm_spec() -> DeploymentSpec:
    """Farm deployment on localhost needing 2 confirmations."""
    return DeploymentSpec(
        contract_name="Farm",
        constructor_args=FARM_ARGS,
        confirmations=2,
        network="localhost",
    )


@pytest.fixture
def hardhat_account():
    """Hardhat account 0 as an eth-account LocalAccount."""
    return Account.from_key(HARDHAT_DEFAULT_PRIVATE_KEY)


@pytest.fixture
def pending() -> PendingDeployment:
    """A submitted Farm deployment from Hardhat account 0."""
    return PendingDeployment(
        transaction_hash="0x" + "ab" * 32,
        contract_address=HARDHAT_FIRST_CONTRACT,
        sender=HARDHAT_ACCOUNT_0,
        nonce=0,
        submitted_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fake_rpc_cls():
    """The FakeRpc class, for tests that script their own chain."""
    return FakeRpc


@pytest.fixture
def fake_explorer_cls():
    """The FakeExplorer class, for tests that script explorer answers."""
    return FakeExplorer


@pytest.fixture
def make_context(hardhat_account):
    """Build a localhost DeploymentContext around a fake RPC and explorer."""

    def _make(rpc: Any, explorer: Any = None, gas_price: Optional[int] = None):
        return DeploymentContext(
            network="localhost",
            chain_id=31337,
            rpc=rpc,
            account=hardhat_account,
            gas_price=gas_price,
            explorer=explorer,
        )

    return _make


@pytest.fixture
def explorer_response():
    """Shorthand constructor for ExplorerResponse."""

    def _make(state: str, message: str = "", guid: Optional[str] = None) -> ExplorerResponse:
        return ExplorerResponse(ExplorerState[state], message, guid)

    return _make


@pytest.fixture
def receipt_at():
    """Build a receipt dict as RpcConnection.get_transaction_receipt returns it."""
    return included
