"""Shared pytest fixtures for sandbox-deployments tests."""

import json
import socket
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import requests
import responses
from eth_account import Account
from eth_hash.auto import keccak
from eth_utils import to_checksum_address

from sandbox_deployments import PXEClient, load_artifact
from sandbox_deployments.constants import INITIAL_TEST_SECRET_KEYS
from sandbox_deployments.types import ContractDescriptor

PXE_TEST_URL = "http://pxe.test:8080"


class FakePXE:
    """
    In-process stand-in for the execution service, served through responses.

    Computes deployed addresses on its own from the submitted transaction fields.
    """

    def __init__(self, accounts: Optional[List[str]] = None):
        self.accounts = accounts if accounts is not None else [
            Account.from_key(key).address for key in INITIAL_TEST_SECRET_KEYS
        ]
        self.unhealthy_attempts = 0  # node_info calls that fail before healthy
        self.pending_polls = 1  # receipt lookups answered "pending" before settling
        self.outcome = "mined"  # "mined", "dropped", "failed" or "never"
        self.failure_reason = "Insufficient fee payer balance"
        self.reported_address: Optional[str] = None  # overrides computed address
        self.calls: List[str] = []
        self.submitted: Dict[str, Dict[str, Any]] = {}
        self._polls: Dict[str, int] = {}

    def count(self, method: str) -> int:
        return self.calls.count(method)

    def deployed_address(self, tx: Dict[str, Any]) -> str:
        init_hash = keccak(
            bytes.fromhex(tx["artifactHash"][2:]) + bytes.fromhex(tx["constructorArgs"][2:])
        )
        digest = keccak(
            b"\xff"
            + bytes.fromhex(tx["deployer"][2:])
            + bytes.fromhex(tx["salt"][2:])
            + init_hash
        )
        return to_checksum_address(digest[-20:])

    def handle(self, request):
        body = json.loads(request.body)
        method = body["method"]
        params = body.get("params", [])
        self.calls.append(method)

        if method == "pxe_getNodeInfo":
            if self.unhealthy_attempts > 0:
                self.unhealthy_attempts -= 1
                return (503, {}, "starting")
            return self._result(body, {"nodeVersion": "0.1.0", "chainId": 31337})

        if method == "pxe_getRegisteredAccounts":
            return self._result(body, [{"address": a} for a in self.accounts])

        if method == "pxe_sendTx":
            tx = params[0]
            tx_hash = tx["hash"]
            self.submitted[tx_hash] = tx
            self._polls[tx_hash] = 0
            return self._result(body, {"txHash": tx_hash})

        if method == "pxe_getTxReceipt":
            tx_hash = params[0]
            if tx_hash not in self.submitted:
                return self._error(body, -32000, f"Unknown transaction {tx_hash}")
            self._polls[tx_hash] += 1
            receipt: Dict[str, Any] = {"txHash": tx_hash, "status": "pending"}
            if self.outcome != "never" and self._polls[tx_hash] > self.pending_polls:
                receipt["status"] = self.outcome
                if self.outcome == "mined":
                    receipt["contractAddress"] = self.reported_address or self.deployed_address(
                        self.submitted[tx_hash]
                    )
                    receipt["blockNumber"] = "0x2a"
                else:
                    receipt["error"] = self.failure_reason
            return self._result(body, receipt)

        return self._error(body, -32601, f"Method {method} not found")

    def _result(self, body, result):
        return (200, {}, json.dumps({"jsonrpc": "2.0", "id": body["id"], "result": result}))

    def _error(self, body, code, message):
        return (
            200,
            {},
            json.dumps(
                {"jsonrpc": "2.0", "id": body["id"], "error": {"code": code, "message": message}}
            ),
        )


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def token_artifact_path(fixtures_dir: Path) -> Path:
    """Return path to the sample Token artifact."""
    return fixtures_dir / "Token.json"


@pytest.fixture
def token_descriptor(token_artifact_path: Path) -> ContractDescriptor:
    """Load the Token contract descriptor."""
    return load_artifact(token_artifact_path)


@pytest.fixture
def voting_descriptor(fixtures_dir: Path) -> ContractDescriptor:
    """Load the Voting contract descriptor."""
    return load_artifact(fixtures_dir / "Voting.json")


@pytest.fixture
def pxe_url() -> str:
    """URL the fake service is served at."""
    return PXE_TEST_URL


@pytest.fixture
def fake_pxe(pxe_url: str):
    """Serve a FakePXE at pxe_url for the duration of a test."""
    pxe = FakePXE()
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add_callback(
            responses.POST,
            pxe_url,
            callback=pxe.handle,
            content_type="application/json",
        )
        yield pxe


@pytest.fixture
def service(fake_pxe: FakePXE, pxe_url: str) -> PXEClient:
    """Client pointed at the fake service."""
    return PXEClient(pxe_url)


@pytest.fixture
def stalled_url():
    """
    URL of a local socket that completes the TCP handshake but never answers.

    Connections sit in the listen backlog, so requests block until their read timeout.
    """
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        listener.bind(("127.0.0.1", 0))
        listener.listen(8)
        host, port = listener.getsockname()
        yield f"http://{host}:{port}"
    finally:
        listener.close()


@pytest.fixture
def direct_session():
    """Session that ignores proxy settings from the environment."""
    session = requests.Session()
    session.trust_env = False
    yield session
    session.close()
