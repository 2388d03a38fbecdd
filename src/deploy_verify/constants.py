"""Configuration constants for deploy-verify library."""

# Networks the Farm deployment targets
# Gas prices are fixed per network (30 gwei) rather than taken from the node
NETWORK_CONFIG = {
    "localhost": {
        "chain_id": 31337,
        "chain_name": "Hardhat Node",
        "rpc_url": "http://localhost:8545",
        "rpc_env": "LOCALHOST_RPC_URL",
        "gas_price": None,  # Ask the node
        "explorer_api_url": None,  # Nothing to verify against
        "explorer_url": None,
        "api_key_env": None,
    },
    "matic": {
        "chain_id": 137,
        "chain_name": "Polygon Mainnet",
        "rpc_url": "https://polygon-rpc.com",
        "rpc_env": "MATIC_RPC_URL",
        "gas_price": 30_000_000_000,  # 30 gwei
        "explorer_api_url": "https://api.polygonscan.com/api",
        "explorer_url": "https://polygonscan.com",
        "api_key_env": "ETHERSCAN_API_KEY",
    },
    "mumbai": {
        "chain_id": 80001,
        "chain_name": "Polygon Mumbai",
        "rpc_url": "https://rpc-mumbai.maticvigil.com/",
        "rpc_env": "MUMBAI_RPC_URL",
        "gas_price": 30_000_000_000,  # 30 gwei
        "explorer_api_url": "https://api-testnet.polygonscan.com/api",
        "explorer_url": "https://mumbai.polygonscan.com",
        "api_key_env": "ETHERSCAN_API_KEY",
    },
}

PRIVATE_KEY_ENV = "PRIVATE_KEY"

# Account 0 of every Hardhat node; only ever used for "localhost"
HARDHAT_DEFAULT_PRIVATE_KEY = (
    "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
)

# Compiler settings the contracts are built with; used when build info lacks them
COMPILER_SETTINGS = {
    "version": "0.7.6",
    "optimizer": {
        "enabled": True,
        "runs": 200,
    },
}

# Confirmation waiting
DEFAULT_CONFIRMATIONS = 6
DEFAULT_POLL_INTERVAL = 2.0  # seconds between receipt/head polls
DEFAULT_CONFIRMATION_TIMEOUT = 600.0  # seconds

# Verification retries while the explorer has not indexed the contract yet
VERIFY_BASE_DELAY = 5.0  # seconds
VERIFY_BACKOFF_FACTOR = 2.0
VERIFY_MAX_ATTEMPTS = 5

# Polling of an accepted verification (checkverifystatus)
VERIFY_STATUS_POLL_INTERVAL = 5.0  # seconds
VERIFY_STATUS_POLL_ATTEMPTS = 10

RPC_TIMEOUT = 30  # seconds per HTTP request
