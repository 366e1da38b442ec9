"""Unit tests for deterministic address derivation."""

from dataclasses import replace

import pytest
import responses
from eth_utils import is_checksum_address

from sandbox_deployments.addresses import (
    compute_initialization_hash,
    derive_address,
    validate_constructor_args,
)
from sandbox_deployments.constants import INITIAL_TEST_SECRET_KEYS
from sandbox_deployments.exceptions import ArgumentMismatch
from sandbox_deployments.types import AccountWallet, Salt

DEPLOYER = AccountWallet.from_key(INITIAL_TEST_SECRET_KEYS[0])
ADMIN = AccountWallet.from_key(INITIAL_TEST_SECRET_KEYS[1])
OTHER = AccountWallet.from_key(INITIAL_TEST_SECRET_KEYS[2])


def token_args(admin=ADMIN.address, name="TokenA", symbol="AAA", decimals=18):
    return [admin, name, symbol, decimals]


class TestDeterminism:
    """Test that derivation is a pure function of its inputs."""

    def test_same_inputs_same_address(self, token_descriptor):
        """Test that identical inputs yield identical addresses."""
        salt = Salt.random()

        first = derive_address(token_descriptor, token_args(), salt, DEPLOYER)
        second = derive_address(token_descriptor, token_args(), salt, DEPLOYER)

        assert first == second

    def test_returns_checksummed_address(self, token_descriptor):
        """Test that the derived address is checksummed."""
        address = derive_address(token_descriptor, token_args(), Salt(1), DEPLOYER)
        assert is_checksum_address(address)

    def test_wallet_and_address_are_equivalent_deployers(self, token_descriptor):
        """Test that a wallet and its bare address derive the same result."""
        salt = Salt(42)
        by_wallet = derive_address(token_descriptor, token_args(), salt, DEPLOYER)
        by_address = derive_address(token_descriptor, token_args(), salt, DEPLOYER.address)
        by_lowercase = derive_address(
            token_descriptor, token_args(), salt, DEPLOYER.address.lower()
        )

        assert by_wallet == by_address == by_lowercase

    def test_tuple_and_list_args_are_equivalent(self, token_descriptor):
        """Test that the container type of args does not matter."""
        salt = Salt(7)
        assert derive_address(token_descriptor, token_args(), salt, DEPLOYER) == derive_address(
            token_descriptor, tuple(token_args()), salt, DEPLOYER
        )

    def test_makes_no_network_calls(self, token_descriptor):
        """Test that derivation never touches the network."""
        with responses.RequestsMock() as rsps:
            derive_address(token_descriptor, token_args(), Salt.random(), DEPLOYER)
            assert len(rsps.calls) == 0


class TestSensitivity:
    """Test that changing any single input changes the address."""

    def test_different_salt(self, token_descriptor):
        """Test that independently generated salts give different addresses."""
        a = derive_address(token_descriptor, token_args(), Salt.random(), DEPLOYER)
        b = derive_address(token_descriptor, token_args(), Salt.random(), DEPLOYER)
        assert a != b

    def test_different_deployer(self, token_descriptor):
        """Test that the same deployment by two deployers gives two addresses."""
        salt = Salt.random()
        a = derive_address(token_descriptor, token_args(), salt, DEPLOYER)
        b = derive_address(token_descriptor, token_args(), salt, OTHER)
        assert a != b

    @pytest.mark.parametrize(
        "changed",
        [
            {"admin": OTHER.address},
            {"name": "TokenB"},
            {"symbol": "BBB"},
            {"decimals": 6},
        ],
    )
    def test_different_args(self, token_descriptor, changed):
        """Test that changing one constructor argument changes the address."""
        salt = Salt.random()
        a = derive_address(token_descriptor, token_args(), salt, DEPLOYER)
        b = derive_address(token_descriptor, token_args(**changed), salt, DEPLOYER)
        assert a != b

    def test_different_descriptor(self, voting_descriptor, token_descriptor):
        """Test that a different contract with compatible args gets another address."""
        salt = Salt.random()
        voting = derive_address(voting_descriptor, [ADMIN.address], salt, DEPLOYER)

        token = derive_address(token_descriptor, token_args(), salt, DEPLOYER)
        assert voting != token

    def test_initialization_hash_depends_on_artifact(self, token_descriptor):
        """Test that the commitment covers the artifact identity."""
        other = replace(token_descriptor, artifact_hash="0x" + "00" * 32)
        assert compute_initialization_hash(token_descriptor, token_args()) != (
            compute_initialization_hash(other, token_args())
        )


class TestArgumentValidation:
    """Test constructor argument validation."""

    def test_accepts_well_formed_args(self, token_descriptor):
        """Test that matching args pass validation unchanged."""
        assert validate_constructor_args(token_descriptor, token_args()) == tuple(token_args())

    @pytest.mark.parametrize(
        "args",
        [
            [],
            [ADMIN.address, "TokenA", "AAA"],
            [ADMIN.address, "TokenA", "AAA", 18, "extra"],
        ],
    )
    def test_wrong_arity(self, token_descriptor, args):
        """Test that the wrong number of args raises ArgumentMismatch."""
        with pytest.raises(ArgumentMismatch) as exc_info:
            derive_address(token_descriptor, args, Salt(1), DEPLOYER)

        assert exc_info.value.index is None
        assert exc_info.value.expected == ("address", "string", "string", "uint8")

    @pytest.mark.parametrize(
        "index,value",
        [
            (0, "not-an-address"),
            (1, 12345),
            (2, None),
            (3, "18"),
            (3, 256),  # out of range for uint8
            (3, -1),
            (3, True),
        ],
    )
    def test_wrong_type(self, token_descriptor, index, value):
        """Test that a value not matching its ABI type raises ArgumentMismatch."""
        args = token_args()
        args[index] = value

        with pytest.raises(ArgumentMismatch) as exc_info:
            validate_constructor_args(token_descriptor, args)

        assert exc_info.value.index == index
        assert exc_info.value.expected == token_descriptor.constructor_types[index]

    def test_invalid_deployer(self, token_descriptor):
        """Test that a malformed deployer address raises ArgumentMismatch."""
        with pytest.raises(ArgumentMismatch):
            derive_address(token_descriptor, token_args(), Salt(1), "0x1234")


class TestSalt:
    """Test the Salt type."""

    def test_random_salts_differ(self):
        """Test that random salts are not reused."""
        assert Salt.random() != Salt.random()

    def test_serializes_to_32_bytes(self):
        """Test the fixed-width big-endian serialization."""
        assert Salt(1).to_bytes() == b"\x00" * 31 + b"\x01"
        assert Salt(1).hex() == "0x" + "00" * 31 + "01"

    @pytest.mark.parametrize("value", [-1, 2**256])
    def test_rejects_out_of_range(self, value):
        """Test that values outside 256 bits are rejected."""
        with pytest.raises(ValueError):
            Salt(value)
