"""Test identity provisioning for sandbox-deployments library."""

import logging
from typing import Sequence, Tuple

from .client import PXEClient
from .constants import DEFAULT_ROLES, INITIAL_TEST_SECRET_KEYS
from .exceptions import IdentityProvisioningError
from .types import AccountWallet, TestAccounts

logger = logging.getLogger(__name__)


def get_test_identities(
    service: PXEClient, secret_keys: Sequence[str] = INITIAL_TEST_SECRET_KEYS
) -> Tuple[AccountWallet, ...]:
    """
    Get the wallets of the sandbox's initial test accounts.

    Wallets follow the order of secret_keys, not the order the service
    lists accounts in, so repeated calls return the same sequence.

    Args:
        service: Service handle
        secret_keys: Well-known test keys, in role order

    Returns:
        Non-empty tuple of wallets registered with the service

    Raises:
        IdentityProvisioningError: If none of the test accounts are registered
    """
    registered = {address.lower() for address in service.get_registered_accounts()}

    wallets = tuple(
        wallet
        for wallet in (AccountWallet.from_key(key) for key in secret_keys)
        if wallet.address.lower() in registered
    )

    if not wallets:
        raise IdentityProvisioningError(required=1, available=0)

    logger.debug("Provisioned %d test wallet(s) from %s", len(wallets), service.url)
    return wallets


def assign_roles(
    wallets: Sequence[AccountWallet], roles: Sequence[str] = DEFAULT_ROLES
) -> TestAccounts:
    """
    Assign named roles to wallets, first role to first wallet.

    Raises:
        IdentityProvisioningError: If there are fewer wallets than roles
        ValueError: If a role name repeats
    """
    if len(set(roles)) != len(roles):
        raise ValueError(f"Duplicate role names: {list(roles)}")

    if len(wallets) < len(roles):
        raise IdentityProvisioningError(required=len(roles), available=len(wallets))

    return TestAccounts(wallets=tuple(wallets), roles=tuple(zip(roles, wallets)))


def provision_accounts(
    service: PXEClient,
    roles: Sequence[str] = DEFAULT_ROLES,
    secret_keys: Sequence[str] = INITIAL_TEST_SECRET_KEYS,
) -> TestAccounts:
    """Fetch test identities and assign roles in one step."""
    accounts = assign_roles(get_test_identities(service, secret_keys), roles)
    for role, wallet in accounts.roles:
        logger.info("Role %s -> %s", role, wallet.address)
    return accounts
