"""JSON-RPC client for the private execution service."""

import itertools
import logging
from typing import Any, Dict, List, Optional

import requests

from .constants import DEFAULT_REQUEST_TIMEOUT, MIN_REQUEST_TIMEOUT, RPC_METHODS
from .endpoints import resolve_endpoint
from .exceptions import RPCError
from .types import DeploymentTransaction, TxReceipt

logger = logging.getLogger(__name__)


class PXEClient:
    """
    Explicit handle to a private execution service.

    Every component receives this handle as an argument; nothing reads a
    global client.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """
        Initialize the client.

        Args:
            url: Service endpoint (defaults to $PXE_URL, then http://localhost:8080)
            session: Optional requests session to reuse
            request_timeout: Per-request timeout in seconds
        """
        self.url = resolve_endpoint(url)
        self.request_timeout = request_timeout
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"PXEClient({self.url!r})"

    def __enter__(self) -> "PXEClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections. A session passed in by the caller is left open."""
        if self._owns_session:
            self._session.close()

    def call(
        self, method: str, params: Optional[List[Any]] = None, timeout: Optional[float] = None
    ) -> Any:
        """
        Issue a JSON-RPC call.

        Args:
            method: RPC method name
            params: Positional parameters
            timeout: Caller's remaining time budget; caps request_timeout

        Returns:
            The "result" member of the response

        Raises:
            RPCError: On network errors, non-200 responses, malformed bodies
                      or RPC error members
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }
        request_timeout = self.request_timeout
        if timeout is not None:
            request_timeout = max(min(request_timeout, timeout), MIN_REQUEST_TIMEOUT)
        logger.debug("RPC %s -> %s (timeout %.2fs)", method, self.url, request_timeout)

        try:
            response = self._session.post(self.url, json=payload, timeout=request_timeout)
        except requests.RequestException as e:
            raise RPCError(f"Network error during RPC call {method}: {e}", method=method) from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise RPCError(
                f"RPC request {method} failed with status {response.status_code}",
                method=method,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise RPCError(f"Invalid JSON in response to {method}", method=method) from e

        if not isinstance(result, dict):
            raise RPCError(
                f"Malformed response to {method}: expected object, got {type(result).__name__}",
                method=method,
            )

        # Check for RPC errors
        if "error" in result:
            error = result["error"]
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RPCError(f"RPC error in {method}: {message}", method=method, code=code)

        if "result" not in result:
            raise RPCError(f"RPC response to {method} has no result", method=method)

        return result["result"]

    def get_node_info(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Health/status request."""
        return self.call(RPC_METHODS["node_info"], timeout=timeout)

    def get_registered_accounts(self) -> List[str]:
        """
        List addresses of accounts registered with the service.

        Accepts both plain address strings and {"address": ...} objects.
        """
        method = RPC_METHODS["registered_accounts"]
        accounts = self.call(method)
        if not isinstance(accounts, list):
            raise RPCError(f"Malformed result for {method}: {accounts!r}", method=method)
        try:
            return [a["address"] if isinstance(a, dict) else a for a in accounts]
        except KeyError as e:
            raise RPCError(f"Malformed account entry in {method}: {e}", method=method) from e

    def send_tx(self, tx: DeploymentTransaction) -> str:
        """Submit a deployment transaction, returning its hash."""
        method = RPC_METHODS["send_tx"]
        result = self.call(method, [tx.to_rpc()])
        if isinstance(result, dict):
            result = result.get("txHash")
        if not isinstance(result, str):
            raise RPCError(f"Malformed result for {method}: no transaction hash", method=method)
        return result

    def get_tx_receipt(self, tx_hash: str, timeout: Optional[float] = None) -> TxReceipt:
        """Look up the status of a submitted transaction."""
        method = RPC_METHODS["tx_receipt"]
        result = self.call(method, [tx_hash], timeout=timeout)
        try:
            return TxReceipt.from_rpc(result)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise RPCError(f"Malformed receipt for {tx_hash}: {result!r}", method=method) from e
