"""Deterministic deployment address derivation for sandbox-deployments library."""

from typing import Any, Sequence, Tuple, Union

from eth_abi import encode, is_encodable
from eth_utils import is_address, keccak, to_canonical_address, to_checksum_address

from .constants import ADDRESS_PREFIX
from .exceptions import ArgumentMismatch
from .types import AccountWallet, ContractDescriptor, Salt


def validate_constructor_args(descriptor: ContractDescriptor, args: Sequence[Any]) -> Tuple[Any, ...]:
    """
    Check constructor arguments against the descriptor's constructor signature.

    Args:
        descriptor: Contract descriptor
        args: Ordered constructor arguments

    Returns:
        Arguments as a tuple

    Raises:
        ArgumentMismatch: On arity mismatch or a value not encodable as its ABI type
    """
    args = tuple(args)
    types = descriptor.constructor_types

    if len(args) != len(types):
        raise ArgumentMismatch(
            f"{descriptor.name} constructor takes {len(types)} argument(s), got {len(args)}",
            expected=types,
            received=args,
        )

    for index, (abi_type, value) in enumerate(zip(types, args)):
        # bool is an int subclass; only a bool param takes one
        if isinstance(value, bool) and abi_type != "bool":
            encodable = False
        else:
            encodable = is_encodable(abi_type, value)
        if not encodable:
            param = descriptor.constructor_params[index]
            raise ArgumentMismatch(
                f"{descriptor.name} constructor argument {index} ({param.name or '?'}) "
                f"expects {abi_type}, got {value!r}",
                index=index,
                expected=abi_type,
                received=value,
            )

    return args


def encode_constructor_args(descriptor: ContractDescriptor, args: Sequence[Any]) -> bytes:
    """ABI-encode validated constructor arguments."""
    args = validate_constructor_args(descriptor, args)
    return encode(list(descriptor.constructor_types), list(args))


def compute_initialization_hash(descriptor: ContractDescriptor, args: Sequence[Any]) -> bytes:
    """
    Commit to the contract code and its constructor arguments.

    Returns:
        keccak256(artifact_hash ++ abi_encode(args))
    """
    artifact = bytes.fromhex(descriptor.artifact_hash[2:])
    return keccak(artifact + encode_constructor_args(descriptor, args))


def deployer_address(deployer: Union[str, AccountWallet]) -> str:
    """Normalize a deployer to its checksummed address."""
    address = deployer.address if isinstance(deployer, AccountWallet) else deployer
    if not is_address(address):
        raise ArgumentMismatch(f"Invalid deployer address: {address!r}", received=address)
    return to_checksum_address(address)


def derive_address(
    descriptor: ContractDescriptor,
    args: Sequence[Any],
    salt: Salt,
    deployer: Union[str, AccountWallet],
) -> str:
    """
    Compute the address a deployment will receive, without network access.

    CREATE2-style commitment:
        keccak256(0xff ++ deployer ++ salt ++ initialization_hash)[12:]

    Args:
        descriptor: Contract descriptor
        args: Constructor arguments
        salt: Deployment salt
        deployer: Deployer wallet or address

    Returns:
        Checksummed contract address

    Raises:
        ArgumentMismatch: If args don't match the constructor or deployer is malformed
    """
    init_hash = compute_initialization_hash(descriptor, args)
    deployer_bytes = to_canonical_address(deployer_address(deployer))

    digest = keccak(ADDRESS_PREFIX + deployer_bytes + salt.to_bytes() + init_hash)
    return to_checksum_address(digest[-20:])
