"""Unit tests for network and account resolution."""

import pytest
import responses

from deploy_verify.context import get_network_config, load_account, resolve_context
from deploy_verify.exceptions import (
    ConfigurationError,
    NetworkMismatchError,
    NetworkNotFoundError,
    NetworkUnreachable,
)
from deploy_verify.explorer import EtherscanClient

RPC_URL = "http://rpc.test:8545"
HARDHAT_ACCOUNT_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
# Hardhat account 1
OTHER_KEY = "59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
OTHER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's keys and RPC overrides out of these tests."""
    for name in (
        "PRIVATE_KEY",
        "ETHERSCAN_API_KEY",
        "LOCALHOST_RPC_URL",
        "MATIC_RPC_URL",
        "MUMBAI_RPC_URL",
    ):
        monkeypatch.delenv(name, raising=False)


def mock_chain_id(chain_id: int, url: str = RPC_URL) -> None:
    responses.add(
        responses.POST,
        url,
        json={"jsonrpc": "2.0", "id": 1, "result": hex(chain_id)},
        status=200,
    )


class TestGetNetworkConfig:
    """Test the get_network_config function."""

    def test_known_network(self):
        """Test that configured networks carry their chain id."""
        assert get_network_config("matic")["chain_id"] == 137
        assert get_network_config("mumbai")["chain_id"] == 80001

    def test_unknown_network(self):
        """Test that an unknown network is rejected with the choices."""
        with pytest.raises(NetworkNotFoundError, match="localhost"):
            get_network_config("ropsten")


class TestLoadAccount:
    """Test the load_account function."""

    def test_localhost_defaults_to_hardhat_account(self):
        """Test the Hardhat account 0 fallback on localhost."""
        assert load_account("localhost").address == HARDHAT_ACCOUNT_0

    def test_key_from_environment_without_prefix(self, monkeypatch):
        """Test that $PRIVATE_KEY without 0x is accepted."""
        monkeypatch.setenv("PRIVATE_KEY", OTHER_KEY)

        assert load_account("matic").address == OTHER_ADDRESS

    def test_explicit_key_wins(self, monkeypatch):
        """Test that a passed key overrides the environment."""
        monkeypatch.setenv("PRIVATE_KEY", "00" * 31 + "01")

        assert load_account("localhost", "0x" + OTHER_KEY).address == OTHER_ADDRESS

    def test_missing_key_on_public_network(self):
        """Test that public networks never fall back to a default key."""
        with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
            load_account("matic")

    def test_malformed_key(self):
        """Test that a malformed key is a configuration error."""
        with pytest.raises(ConfigurationError):
            load_account("matic", "not-a-key")


class TestResolveContext:
    """Test the resolve_context function."""

    @responses.activate
    def test_localhost_context(self):
        """Test localhost: node gas price, no explorer."""
        mock_chain_id(31337)

        context = resolve_context("localhost", rpc_url=RPC_URL)

        assert context.network == "localhost"
        assert context.chain_id == 31337
        assert context.sender == HARDHAT_ACCOUNT_0
        assert context.gas_price is None
        assert context.explorer is None

    @responses.activate
    def test_chain_id_mismatch(self):
        """Test that a node on another chain is refused before anything is sent."""
        mock_chain_id(31337)

        with pytest.raises(NetworkMismatchError, match="137"):
            resolve_context("matic", rpc_url=RPC_URL, private_key=OTHER_KEY)

        assert len(responses.calls) == 1

    @responses.activate
    def test_explorer_created_with_api_key(self):
        """Test that an API key enables verification on Polygonscan."""
        mock_chain_id(137)

        context = resolve_context(
            "matic", rpc_url=RPC_URL, private_key=OTHER_KEY, explorer_api_key="abc"
        )

        assert isinstance(context.explorer, EtherscanClient)
        assert context.explorer.api_url == "https://api.polygonscan.com/api"
        assert context.explorer.api_key == "abc"
        assert context.gas_price == 30_000_000_000

    @responses.activate
    def test_api_key_from_environment(self, monkeypatch):
        """Test that $ETHERSCAN_API_KEY is picked up."""
        monkeypatch.setenv("ETHERSCAN_API_KEY", "from-env")
        mock_chain_id(80001)

        context = resolve_context("mumbai", rpc_url=RPC_URL, private_key=OTHER_KEY)

        assert context.explorer.api_key == "from-env"

    @responses.activate
    def test_no_api_key_skips_verification(self, caplog):
        """Test that a missing API key disables the explorer with a warning."""
        mock_chain_id(137)

        context = resolve_context("matic", rpc_url=RPC_URL, private_key=OTHER_KEY)

        assert context.explorer is None
        assert "ETHERSCAN_API_KEY" in caplog.text

    @responses.activate
    def test_verify_disabled(self):
        """Test that verify=False never creates an explorer client."""
        mock_chain_id(137)

        context = resolve_context(
            "matic", rpc_url=RPC_URL, private_key=OTHER_KEY,
            explorer_api_key="abc", verify=False,
        )

        assert context.explorer is None

    @responses.activate
    def test_rpc_url_from_environment(self, monkeypatch):
        """Test the per-network RPC URL override."""
        monkeypatch.setenv("LOCALHOST_RPC_URL", "http://node.test:8545")
        mock_chain_id(31337, url="http://node.test:8545")

        context = resolve_context("localhost")

        assert context.rpc.url == "http://node.test:8545"

    def test_skip_chain_id_check(self):
        """Test that check_chain_id=False makes no request."""
        context = resolve_context("localhost", rpc_url=RPC_URL, check_chain_id=False)

        assert context.chain_id == 31337

    @responses.activate
    def test_unreachable_node(self):
        """Test that a node that cannot be reached surfaces as NetworkUnreachable."""
        with pytest.raises(NetworkUnreachable):
            resolve_context("localhost", rpc_url=RPC_URL)
