"""Data types and dataclasses for sandbox-deployments library."""

import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount


@dataclass(frozen=True)
class ConstructorParam:
    """A single constructor parameter from the contract ABI."""

    name: str
    type: str  # Canonical ABI type, e.g. "address", "(uint256,bool)"


@dataclass(frozen=True)
class ContractDescriptor:
    """Immutable description of a compiled contract."""

    name: str
    artifact_hash: str  # 0x-prefixed keccak-256 of the creation bytecode
    constructor_params: Tuple[ConstructorParam, ...] = ()
    function_selectors: Tuple[Tuple[str, str], ...] = ()  # (signature, 0x-selector)

    @property
    def constructor_types(self) -> Tuple[str, ...]:
        return tuple(p.type for p in self.constructor_params)

    def selector(self, signature: str) -> str:
        """
        Look up the 4-byte selector of a function.

        Args:
            signature: Canonical signature, e.g. "transfer(address,uint256)"

        Raises:
            KeyError: If the contract has no such function
        """
        for sig, selector in self.function_selectors:
            if sig == signature:
                return selector
        raise KeyError(f"Function '{signature}' not found in {self.name}")


@dataclass(frozen=True)
class Salt:
    """Single-use 256-bit value that makes a deployment address unique."""

    value: int

    def __post_init__(self):
        if not 0 <= self.value < 2**256:
            raise ValueError(f"Salt must be in [0, 2**256), got {self.value}")

    @classmethod
    def random(cls) -> "Salt":
        return cls(secrets.randbits(256))

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(32, "big")

    def hex(self) -> str:
        return "0x" + self.to_bytes().hex()


@dataclass(frozen=True)
class AccountWallet:
    """A test identity together with its signing capability."""

    address: str  # Checksummed address
    account: LocalAccount = field(repr=False, compare=False)

    @classmethod
    def from_key(cls, secret_key: str) -> "AccountWallet":
        account = Account.from_key(secret_key)
        return cls(address=account.address, account=account)

    def sign_hash(self, message_hash: bytes) -> str:
        """Sign a 32-byte hash, returning the 0x-hex signature."""
        signed = self.account.sign_message(encode_defunct(primitive=message_hash))
        return "0x" + bytes(signed.signature).hex()


@dataclass(frozen=True)
class TestAccounts:
    """Provisioned wallets with named roles."""

    __test__ = False  # Not a pytest test class

    wallets: Tuple[AccountWallet, ...]
    roles: Tuple[Tuple[str, AccountWallet], ...]

    def role(self, name: str) -> AccountWallet:
        for role_name, wallet in self.roles:
            if role_name == name:
                return wallet
        raise KeyError(f"No wallet assigned to role '{name}'")

    def __getitem__(self, name: str) -> AccountWallet:
        return self.role(name)

    def __iter__(self) -> Iterator[AccountWallet]:
        return iter(self.wallets)

    def __len__(self) -> int:
        return len(self.wallets)

    @property
    def deployer(self) -> AccountWallet:
        return self.role("deployer")

    @property
    def admin(self) -> AccountWallet:
        return self.role("admin")


class DeploymentState(Enum):
    """
    Deployment lifecycle states.

    BUILT -> SUBMITTED -> PENDING -> {MINED, FAILED, TIMED_OUT}
    """

    BUILT = "built"
    SUBMITTED = "submitted"
    PENDING = "pending"
    MINED = "mined"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (DeploymentState.MINED, DeploymentState.FAILED, DeploymentState.TIMED_OUT)


@dataclass(frozen=True)
class DeploymentTransaction:
    """A deployment transaction built locally, before any network contact."""

    artifact_hash: str
    constructor_args: str  # 0x-hex ABI encoding
    salt: str  # 0x-hex, 32 bytes
    deployer: str
    expected_address: str
    tx_hash: str  # Local hash the deployer signed
    signature: str

    def to_rpc(self) -> Dict[str, Any]:
        return {
            "artifactHash": self.artifact_hash,
            "constructorArgs": self.constructor_args,
            "salt": self.salt,
            "deployer": self.deployer,
            "from": self.deployer,
            "hash": self.tx_hash,
            "signature": self.signature,
        }


@dataclass(frozen=True)
class TransactionHandle:
    """Reference to a submitted deployment."""

    tx_hash: str
    expected_address: str


@dataclass(frozen=True)
class TxReceipt:
    """Transaction status as reported by the service."""

    tx_hash: str
    status: str
    contract_address: Optional[str] = None
    block_number: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def from_rpc(cls, data: Mapping[str, Any]) -> "TxReceipt":
        block_number = data.get("blockNumber")
        if isinstance(block_number, str):
            block_number = int(block_number, 16)
        return cls(
            tx_hash=data["txHash"],
            status=str(data["status"]).lower(),
            contract_address=data.get("contractAddress"),
            block_number=block_number,
            error=data.get("error"),
        )


@dataclass(frozen=True)
class DeploymentReceipt:
    """Confirmed deployment."""

    address: str
    tx_hash: str
    block_number: Optional[int]
    polls: int
