"""Configuration constants for sandbox-deployments library."""

# Endpoint configuration
PXE_URL_ENV = "PXE_URL"
DEFAULT_PXE_URL = "http://localhost:8080"

# Timing (seconds)
MIN_POLL_INTERVAL = 0.1  # Floor for every polling loop, no busy-waiting
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_READY_TIMEOUT = 120.0
DEFAULT_DEPLOY_TIMEOUT = 300.0
DEFAULT_REQUEST_TIMEOUT = 30.0
MIN_REQUEST_TIMEOUT = 0.05  # Floor when a request is capped by a nearly spent deadline

# JSON-RPC method names exposed by the execution service
RPC_METHODS = {
    "node_info": "pxe_getNodeInfo",
    "registered_accounts": "pxe_getRegisteredAccounts",
    "send_tx": "pxe_sendTx",
    "tx_receipt": "pxe_getTxReceipt",
}

# Remote transaction statuses, grouped by outcome
PENDING_STATUSES = frozenset({"pending"})
MINED_STATUSES = frozenset({"mined", "success"})
FAILED_STATUSES = frozenset({"failed", "dropped", "reverted"})

# CREATE2-style address derivation prefix
ADDRESS_PREFIX = b"\xff"

# Default role names, assigned in order to provisioned wallets
DEFAULT_ROLES = ("deployer", "admin")

# Well-known sandbox test keys (public development keys, never use with real funds).
# Order is significant: wallets are provisioned in this order.
INITIAL_TEST_SECRET_KEYS = (
    "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
)
