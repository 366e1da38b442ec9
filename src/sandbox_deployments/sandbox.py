"""Session setup for sandbox-deployments library."""

from typing import Optional

from .client import PXEClient
from .constants import DEFAULT_POLL_INTERVAL, DEFAULT_READY_TIMEOUT
from .exceptions import ServiceUnavailable
from .readiness import wait_until_ready


def setup_sandbox(
    url: Optional[str] = None,
    timeout: float = DEFAULT_READY_TIMEOUT,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> PXEClient:
    """
    Connect to the sandbox and wait for it to become ready.

    Intended as the once-per-session setup hook of a test suite.

    Args:
        url: Service endpoint (defaults to $PXE_URL, then http://localhost:8080)
        timeout: Seconds to wait for readiness
        interval: Delay between readiness attempts

    Returns:
        A ready PXEClient

    Raises:
        ServiceUnavailable: If the sandbox did not become ready in time; the
                            client is closed before this propagates
    """
    service = PXEClient(url)
    try:
        wait_until_ready(service, timeout=timeout, interval=interval)
    except ServiceUnavailable:
        service.close()
        raise
    return service
