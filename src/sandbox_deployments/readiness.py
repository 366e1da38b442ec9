"""Service readiness probing for sandbox-deployments library."""

import logging
import time
from typing import Any, Dict, Optional

from .client import PXEClient
from .constants import DEFAULT_POLL_INTERVAL, DEFAULT_READY_TIMEOUT, MIN_POLL_INTERVAL
from .exceptions import RPCError, ServiceUnavailable

logger = logging.getLogger(__name__)


def wait_until_ready(
    service: PXEClient,
    timeout: float = DEFAULT_READY_TIMEOUT,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> Dict[str, Any]:
    """
    Poll the service health endpoint until it responds.

    Each request is bounded by the time left before the deadline, so a
    stalled endpoint cannot hold the wait past timeout.

    Args:
        service: Service handle
        timeout: Seconds to keep trying
        interval: Delay between attempts (never below MIN_POLL_INTERVAL)

    Returns:
        Node info reported by the service

    Raises:
        ServiceUnavailable: If the service did not respond before the deadline
    """
    interval = max(interval, MIN_POLL_INTERVAL)
    deadline = time.monotonic() + timeout
    attempts = 0
    last_error: Optional[RPCError] = None

    while True:
        attempts += 1
        try:
            info = service.get_node_info(timeout=deadline - time.monotonic())
        except RPCError as e:
            last_error = e
            logger.debug("Service %s not ready (attempt %d): %s", service.url, attempts, e)
        else:
            logger.info("Service %s ready after %d attempt(s)", service.url, attempts)
            return info

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ServiceUnavailable(service.url, attempts, timeout, last_error)

        time.sleep(min(interval, remaining))
