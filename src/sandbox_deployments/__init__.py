"""
sandbox-deployments: verification harness for contract deployments on a private execution sandbox
"""

from importlib.metadata import PackageNotFoundError, version

from .accounts import assign_roles, get_test_identities, provision_accounts
from .addresses import derive_address, validate_constructor_args
from .artifacts import load_artifact, parse_artifact
from .client import PXEClient
from .deployer import DeploymentOrchestrator, build_deployment_transaction
from .exceptions import (
    AddressMismatch,
    ArgumentMismatch,
    ArtifactError,
    DeploymentStateError,
    HarnessError,
    IdentityProvisioningError,
    PollingCancelled,
    RPCError,
    ServiceUnavailable,
    TransactionFailed,
    TransactionTimedOut,
)
from .readiness import wait_until_ready
from .sandbox import setup_sandbox
from .types import (
    AccountWallet,
    ContractDescriptor,
    DeploymentReceipt,
    DeploymentState,
    Salt,
    TestAccounts,
    TransactionHandle,
)

try:
    __version__ = version("sandbox-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "PXEClient",
    "setup_sandbox",
    "wait_until_ready",
    "get_test_identities",
    "assign_roles",
    "provision_accounts",
    "derive_address",
    "validate_constructor_args",
    "load_artifact",
    "parse_artifact",
    "build_deployment_transaction",
    "DeploymentOrchestrator",
    "AccountWallet",
    "ContractDescriptor",
    "DeploymentReceipt",
    "DeploymentState",
    "Salt",
    "TestAccounts",
    "TransactionHandle",
    "HarnessError",
    "ServiceUnavailable",
    "IdentityProvisioningError",
    "ArgumentMismatch",
    "AddressMismatch",
    "TransactionFailed",
    "TransactionTimedOut",
    "PollingCancelled",
    "DeploymentStateError",
    "RPCError",
    "ArtifactError",
]
