"""Resolved network/account context for deploy-verify library."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .constants import HARDHAT_DEFAULT_PRIVATE_KEY, NETWORK_CONFIG, PRIVATE_KEY_ENV
from .exceptions import ConfigurationError, NetworkMismatchError, NetworkNotFoundError
from .explorer import EtherscanClient
from .rpc import RpcConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentContext:
    """
    Everything the pipeline needs to talk to one network.

    Passed explicitly into each stage instead of being read from process-wide
    state, so stages can be exercised with fake connections.
    """

    network: str
    chain_id: int
    rpc: Any  # RpcConnection or anything with the same methods
    account: LocalAccount
    gas_price: Optional[int] = None  # None: ask the node
    explorer: Optional[Any] = None  # EtherscanClient, or None when not verifiable

    @property
    def sender(self) -> str:
        return self.account.address


def get_network_config(network: str) -> Dict[str, Any]:
    """
    Look up a configured network.

    Raises:
        NetworkNotFoundError: If network is not configured
    """
    if network not in NETWORK_CONFIG:
        raise NetworkNotFoundError(
            f"Network '{network}' not configured; choose from {', '.join(NETWORK_CONFIG)}"
        )
    return NETWORK_CONFIG[network]


def load_account(network: str, private_key: Optional[str] = None) -> LocalAccount:
    """
    Load the signing account.

    Args:
        network: Network name; "localhost" falls back to Hardhat account 0
        private_key: Hex private key, with or without 0x (defaults to $PRIVATE_KEY)

    Returns:
        eth-account LocalAccount

    Raises:
        ConfigurationError: If no key is available or it is malformed
    """
    if private_key is None:
        private_key = os.environ.get(PRIVATE_KEY_ENV)
    if not private_key:
        if network == "localhost":
            private_key = HARDHAT_DEFAULT_PRIVATE_KEY
        else:
            raise ConfigurationError(
                f"Private key required for network '{network}': set ${PRIVATE_KEY_ENV} "
                "or pass private_key"
            )

    # The key is commonly stored without its 0x prefix
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid private key for network '{network}'") from e


def resolve_context(
    network: str,
    rpc_url: Optional[str] = None,
    private_key: Optional[str] = None,
    explorer_api_key: Optional[str] = None,
    verify: bool = True,
    check_chain_id: bool = True,
) -> DeploymentContext:
    """
    Build a DeploymentContext from NETWORK_CONFIG and the environment.

    Args:
        network: Network name ("localhost", "matic" or "mumbai")
        rpc_url: RPC URL (defaults to the network's env override, then its config)
        private_key: Signing key (defaults to $PRIVATE_KEY)
        explorer_api_key: Explorer API key (defaults to the network's api key env)
        verify: If False, no explorer client is created
        check_chain_id: Compare the node's eth_chainId with the configured one

    Returns:
        DeploymentContext

    Raises:
        NetworkNotFoundError: If network not configured
        ConfigurationError: If the signing key is missing or invalid
        NetworkMismatchError: If the node serves a different chain
        NetworkUnreachable: If the chain id check cannot reach the node
    """
    config = get_network_config(network)

    if rpc_url is None:
        rpc_url = os.environ.get(config["rpc_env"]) or config["rpc_url"]
    rpc = RpcConnection(rpc_url)

    account = load_account(network, private_key)

    if check_chain_id:
        node_chain_id = rpc.chain_id()
        if node_chain_id != config["chain_id"]:
            raise NetworkMismatchError(
                f"chain_id of {rpc_url} ({node_chain_id}) does not match "
                f"configured chain_id of '{network}' ({config['chain_id']})"
            )

    explorer = None
    if verify and config["explorer_api_url"]:
        if explorer_api_key is None:
            explorer_api_key = os.environ.get(config["api_key_env"])
        if explorer_api_key:
            explorer = EtherscanClient(
                config["explorer_api_url"],
                explorer_api_key,
                browser_url=config["explorer_url"],
            )
        else:
            logger.warning(
                "%s is not set; verification on %s will be skipped",
                config["api_key_env"],
                network,
            )

    return DeploymentContext(
        network=network,
        chain_id=config["chain_id"],
        rpc=rpc,
        account=account,
        gas_price=config["gas_price"],
        explorer=explorer,
    )
