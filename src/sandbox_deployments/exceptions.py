"""Custom exception classes for sandbox-deployments library."""

from typing import Any, Optional


class HarnessError(Exception):
    """Base exception for deployment harness errors."""

    stage = "harness"


class ServiceUnavailable(HarnessError, ConnectionError):
    """Raised when the execution service never became ready before the deadline."""

    stage = "readiness"

    def __init__(
        self,
        endpoint: str,
        attempts: int,
        timeout: float,
        last_error: Optional[BaseException] = None,
    ):
        self.endpoint = endpoint
        self.attempts = attempts
        self.timeout = timeout
        self.last_error = last_error
        message = (
            f"Service at {endpoint} not ready after {attempts} attempt(s) "
            f"in {timeout:g}s"
        )
        if last_error is not None:
            message += f" (last error: {last_error})"
        super().__init__(message)


class IdentityProvisioningError(HarnessError, LookupError):
    """Raised when the service provides fewer test identities than required."""

    stage = "provisioning"

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Required {required} test identities, service provided {available}"
        )


class ArgumentMismatch(HarnessError, TypeError):
    """Raised when constructor arguments do not match the constructor signature."""

    stage = "derivation"

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        expected: Any = None,
        received: Any = None,
    ):
        self.index = index
        self.expected = expected
        self.received = received
        super().__init__(message)


class AddressMismatch(HarnessError, ValueError):
    """Raised when the service reports a different address than the derived one."""

    stage = "confirmation"

    def __init__(self, expected: str, actual: Optional[str], tx_hash: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.tx_hash = tx_hash
        super().__init__(
            f"Deployed address {actual} does not match derived address {expected}"
            + (f" (tx {tx_hash})" if tx_hash else "")
        )


class TransactionFailed(HarnessError, RuntimeError):
    """Raised when the service rejects a submitted deployment."""

    stage = "confirmation"

    def __init__(self, tx_hash: str, reason: str):
        self.tx_hash = tx_hash
        self.reason = reason
        super().__init__(f"Transaction {tx_hash} failed: {reason}")


class TransactionTimedOut(HarnessError, TimeoutError):
    """
    Raised when polling exceeds the deadline without a terminal status.

    The outcome on the service is unknown; this is not a confirmed rejection.
    """

    stage = "confirmation"

    def __init__(self, tx_hash: str, attempts: int, timeout: float):
        self.tx_hash = tx_hash
        self.attempts = attempts
        self.timeout = timeout
        super().__init__(
            f"Transaction {tx_hash} not settled after {attempts} poll(s) "
            f"in {timeout:g}s; outcome unknown"
        )


class PollingCancelled(HarnessError):
    """Raised when the caller abandons polling of a submitted transaction."""

    stage = "confirmation"

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Polling of transaction {tx_hash} was cancelled")


class DeploymentStateError(HarnessError, RuntimeError):
    """Raised when an operation is not allowed in the current deployment state."""

    stage = "submission"

    def __init__(self, message: str, state: Any = None):
        self.state = state
        super().__init__(message)


class RPCError(HarnessError, RuntimeError):
    """Raised on transport failures or error responses from the service."""

    stage = "rpc"

    def __init__(self, message: str, method: Optional[str] = None, code: Optional[int] = None):
        self.method = method
        self.code = code
        super().__init__(message)


class ArtifactError(HarnessError, ValueError):
    """Raised when a contract artifact is missing required fields."""

    stage = "artifact"

    pass
