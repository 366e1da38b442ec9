"""Deployment lifecycle orchestration for sandbox-deployments library."""

import logging
import threading
import time
from typing import Any, Optional, Sequence

from eth_utils import is_same_address, keccak

from .addresses import derive_address, deployer_address, encode_constructor_args
from .client import PXEClient
from .constants import (
    DEFAULT_DEPLOY_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    FAILED_STATUSES,
    MIN_POLL_INTERVAL,
    MIN_REQUEST_TIMEOUT,
    MINED_STATUSES,
    PENDING_STATUSES,
)
from .exceptions import (
    AddressMismatch,
    DeploymentStateError,
    HarnessError,
    PollingCancelled,
    RPCError,
    TransactionFailed,
    TransactionTimedOut,
)
from .types import (
    AccountWallet,
    ContractDescriptor,
    DeploymentReceipt,
    DeploymentState,
    DeploymentTransaction,
    Salt,
    TransactionHandle,
    TxReceipt,
)

logger = logging.getLogger(__name__)


def build_deployment_transaction(
    descriptor: ContractDescriptor,
    args: Sequence[Any],
    salt: Salt,
    deployer: AccountWallet,
) -> DeploymentTransaction:
    """
    Build and sign a deployment transaction locally.

    Raises:
        ArgumentMismatch: If args don't match the constructor signature
    """
    expected_address = derive_address(descriptor, args, salt, deployer)
    encoded_args = encode_constructor_args(descriptor, args)
    sender = deployer_address(deployer)

    tx_hash = keccak(
        bytes.fromhex(descriptor.artifact_hash[2:])
        + encoded_args
        + salt.to_bytes()
        + bytes.fromhex(sender[2:])
    )

    return DeploymentTransaction(
        artifact_hash=descriptor.artifact_hash,
        constructor_args="0x" + encoded_args.hex(),
        salt=salt.hex(),
        deployer=sender,
        expected_address=expected_address,
        tx_hash="0x" + tx_hash.hex(),
        signature=deployer.sign_hash(tx_hash),
    )


class DeploymentOrchestrator:
    """
    Drives one deployment through BUILT -> SUBMITTED -> PENDING -> terminal.

    The transaction is submitted at most once. Polling stops at the first
    MINED or FAILED observation, at the deadline, or on cancel().
    """

    def __init__(
        self,
        service: PXEClient,
        descriptor: ContractDescriptor,
        args: Sequence[Any],
        salt: Salt,
        deployer: AccountWallet,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """
        Build the deployment transaction. No network contact happens here.

        Raises:
            ArgumentMismatch: If args don't match the constructor signature
        """
        self.service = service
        self.descriptor = descriptor
        self.poll_interval = max(poll_interval, MIN_POLL_INTERVAL)
        self.transaction = build_deployment_transaction(descriptor, args, salt, deployer)
        self.state = DeploymentState.BUILT
        self.handle: Optional[TransactionHandle] = None
        self.last_receipt: Optional[TxReceipt] = None
        self.polls = 0

        self._outcome: Optional[DeploymentReceipt] = None
        self._error: Optional[HarnessError] = None
        self._cancelled = threading.Event()

    @property
    def expected_address(self) -> str:
        return self.transaction.expected_address

    def submit(self) -> TransactionHandle:
        """
        Hand the transaction to the service.

        Raises:
            DeploymentStateError: If already submitted
            RPCError: If the service could not be reached; not retried
        """
        if self.state is not DeploymentState.BUILT:
            raise DeploymentStateError(
                f"Deployment already submitted (state {self.state.value})", state=self.state
            )

        tx_hash = self.service.send_tx(self.transaction)
        self.handle = TransactionHandle(tx_hash=tx_hash, expected_address=self.expected_address)
        self._transition(DeploymentState.SUBMITTED)
        return self.handle

    def poll(self, timeout: Optional[float] = None) -> DeploymentState:
        """
        Read the transaction status once.

        Terminal states are returned as-is without contacting the service.

        Args:
            timeout: Upper bound for the status request, in seconds

        Raises:
            DeploymentStateError: If not yet submitted
            RPCError: On transport errors or an unknown remote status
        """
        if self.state.is_terminal:
            return self.state
        if self.handle is None:
            raise DeploymentStateError("Deployment has not been submitted", state=self.state)

        if self.state is DeploymentState.SUBMITTED:
            self._transition(DeploymentState.PENDING)

        receipt = self.service.get_tx_receipt(self.handle.tx_hash, timeout=timeout)
        self.polls += 1
        self.last_receipt = receipt
        logger.debug("Poll %d of %s: %s", self.polls, self.handle.tx_hash, receipt.status)

        if receipt.status in PENDING_STATUSES:
            return self.state

        if receipt.status in MINED_STATUSES:
            self._transition(DeploymentState.MINED)
            if receipt.contract_address is None or not is_same_address(
                receipt.contract_address, self.expected_address
            ):
                self._error = AddressMismatch(
                    self.expected_address, receipt.contract_address, self.handle.tx_hash
                )
            else:
                self._outcome = DeploymentReceipt(
                    address=self.expected_address,
                    tx_hash=self.handle.tx_hash,
                    block_number=receipt.block_number,
                    polls=self.polls,
                )
            return self.state

        if receipt.status in FAILED_STATUSES:
            self._transition(DeploymentState.FAILED)
            self._error = TransactionFailed(self.handle.tx_hash, receipt.error or receipt.status)
            return self.state

        raise RPCError(
            f"Unknown status '{receipt.status}' for transaction {self.handle.tx_hash}",
            method="pxe_getTxReceipt",
        )

    def wait(self, timeout: float = DEFAULT_DEPLOY_TIMEOUT) -> DeploymentReceipt:
        """
        Poll until the deployment settles.

        Args:
            timeout: Seconds before giving up with TIMED_OUT

        Returns:
            DeploymentReceipt for a deployment mined at the derived address

        Raises:
            AddressMismatch: If mined at a different address
            TransactionFailed: If the service rejected the transaction
            TransactionTimedOut: If the deadline passed; outcome unknown
            PollingCancelled: If cancel() was called
            DeploymentStateError: If not yet submitted
        """
        deadline = time.monotonic() + timeout

        while not self.state.is_terminal:
            if self._cancelled.is_set():
                raise PollingCancelled(self.handle.tx_hash if self.handle else "<unsubmitted>")

            polls = self.polls
            try:
                self.poll(timeout=deadline - time.monotonic())
            except RPCError:
                # A status request cut short by the deadline leaves the outcome unknown
                if self.polls != polls or deadline - time.monotonic() > MIN_REQUEST_TIMEOUT:
                    raise
                self._time_out(timeout)
                break
            if self.state.is_terminal:
                break

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._time_out(timeout)
                break

            self._cancelled.wait(min(self.poll_interval, remaining))

        return self.result()

    def result(self) -> DeploymentReceipt:
        """
        Surface the stored terminal outcome.

        Raises:
            DeploymentStateError: If not in a terminal state yet
        """
        if self._error is not None:
            raise self._error
        if self._outcome is None:
            raise DeploymentStateError(
                f"Deployment not settled (state {self.state.value})", state=self.state
            )
        return self._outcome

    def deploy(self, timeout: float = DEFAULT_DEPLOY_TIMEOUT) -> DeploymentReceipt:
        """Submit and wait for settlement."""
        self.submit()
        return self.wait(timeout)

    def cancel(self) -> None:
        """
        Stop local polling.

        The submitted transaction is not retracted on the service.
        """
        self._cancelled.set()

    def _time_out(self, timeout: float) -> None:
        self._transition(DeploymentState.TIMED_OUT)
        self._error = TransactionTimedOut(self.handle.tx_hash, self.polls, timeout)

    def _transition(self, state: DeploymentState) -> None:
        logger.info(
            "%s deployment %s: %s -> %s",
            self.descriptor.name,
            self.expected_address,
            self.state.value,
            state.value,
        )
        self.state = state
