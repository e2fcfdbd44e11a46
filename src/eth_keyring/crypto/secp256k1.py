"""
SECP256K1 key operations for Ethereum accounts.

Provides private key validation, public key derivation and Ethereum
address computation (Keccak-256 of the uncompressed public key, last 20 bytes).
"""

from __future__ import annotations
import os
from typing import Optional, Union

from Crypto.Hash import keccak
from ecdsa import SigningKey, SECP256k1

from ..runtime.address import strip_hex_prefix, is_hex_string
from ..runtime.errors import InvalidPrivateKeyError

SECP256K1_N = SECP256k1.order


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum's hash function).

    Note: This is different from SHA3-256. Ethereum uses Keccak-256.
    """
    return keccak.new(digest_bits=256).update(data).digest()


def is_valid_private_key(private_key_bytes: bytes) -> bool:
    """Check that bytes encode a scalar in [1, n-1]."""
    if len(private_key_bytes) != 32:
        return False
    k = int.from_bytes(private_key_bytes, "big")
    return 0 < k < SECP256K1_N


def private_key_to_bytes(private_key: Union[str, bytes]) -> bytes:
    """
    Parse a private key given as hex (prefix optional) or raw bytes.

    Raises:
        InvalidPrivateKeyError: If the value is not a valid secp256k1 scalar
    """
    if isinstance(private_key, (bytes, bytearray)):
        key_bytes = bytes(private_key)
    elif isinstance(private_key, str):
        hex_value = strip_hex_prefix(private_key.strip())
        if not hex_value or len(hex_value) % 2 or not is_hex_string(hex_value):
            raise InvalidPrivateKeyError()
        key_bytes = bytes.fromhex(hex_value)
    else:
        raise InvalidPrivateKeyError(details={"type": type(private_key).__name__})

    if not is_valid_private_key(key_bytes):
        raise InvalidPrivateKeyError()
    return key_bytes


def eth_hash(public_key_bytes: bytes) -> bytes:
    """
    Compute Ethereum-style public key hash: Keccak-256 truncated to 20 bytes.

    Args:
        public_key_bytes: Uncompressed public key bytes (65 bytes with 0x04, or 64 raw)
    """
    if len(public_key_bytes) == 65 and public_key_bytes[0] == 0x04:
        public_key_bytes = public_key_bytes[1:]
    elif len(public_key_bytes) != 64:
        raise ValueError(f"Invalid Ethereum public key length: {len(public_key_bytes)}")

    return keccak256(public_key_bytes)[-20:]


def eth_address(public_key_bytes: bytes) -> str:
    """Lower-case ``0x`` address for an uncompressed public key."""
    return "0x" + eth_hash(public_key_bytes).hex()


class Secp256k1KeyPair:
    """
    SECP256K1 key pair for Ethereum accounts.

    Private key bytes are kept in a mutable buffer so they can be wiped.
    """

    def __init__(self, private_key_bytes: Optional[bytes] = None):
        """
        Initialize key pair.

        Args:
            private_key_bytes: 32-byte private key (random when omitted)
        """
        if private_key_bytes is None:
            private_key_bytes = os.urandom(32)
            while not is_valid_private_key(private_key_bytes):
                private_key_bytes = os.urandom(32)
        elif not is_valid_private_key(private_key_bytes):
            raise InvalidPrivateKeyError()

        self._private_key_bytes = bytearray(private_key_bytes)
        signing_key = SigningKey.from_string(bytes(private_key_bytes), curve=SECP256k1)
        self.public_key_bytes = signing_key.get_verifying_key().to_string("uncompressed")

    @classmethod
    def generate(cls) -> Secp256k1KeyPair:
        """Generate a new random key pair."""
        return cls()

    @classmethod
    def from_hex(cls, private_key_hex: str) -> Secp256k1KeyPair:
        """Create key pair from private key hex string."""
        return cls(private_key_to_bytes(private_key_hex))

    @property
    def address(self) -> str:
        """Normalized Ethereum address."""
        return eth_address(self.public_key_bytes)

    def to_hex(self) -> str:
        """Get private key as hex string (no prefix)."""
        return bytes(self._private_key_bytes).hex()

    def to_bytes(self) -> bytes:
        """Get private key as bytes."""
        return bytes(self._private_key_bytes)

    def wipe(self) -> None:
        """Overwrite the private key buffer."""
        for i in range(len(self._private_key_bytes)):
            self._private_key_bytes[i] = 0

    def __str__(self) -> str:
        return f"Secp256k1KeyPair(address={self.address})"

    __repr__ = __str__


def private_key_to_address(private_key: Union[str, bytes]) -> str:
    """Normalized address for a private key."""
    return Secp256k1KeyPair(private_key_to_bytes(private_key)).address


__all__ = [
    "SECP256K1_N",
    "keccak256",
    "is_valid_private_key",
    "private_key_to_bytes",
    "eth_hash",
    "eth_address",
    "Secp256k1KeyPair",
    "private_key_to_address",
]
