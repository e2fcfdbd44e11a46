"""
Cryptographic primitives for Ethereum keyrings.

Provides secp256k1 key handling, Keccak-256, address derivation and
BIP39 mnemonic handling.
"""

from .secp256k1 import (
    SECP256K1_N,
    keccak256,
    is_valid_private_key,
    private_key_to_bytes,
    eth_address,
    Secp256k1KeyPair,
    private_key_to_address,
)
from .hd import (
    DEFAULT_HD_PATH,
    is_valid_mnemonic,
    validate_mnemonic,
    generate_mnemonic,
    mnemonic_to_seed,
)

__all__ = [
    "SECP256K1_N",
    "keccak256",
    "is_valid_private_key",
    "private_key_to_bytes",
    "eth_address",
    "Secp256k1KeyPair",
    "private_key_to_address",
    "DEFAULT_HD_PATH",
    "is_valid_mnemonic",
    "validate_mnemonic",
    "generate_mnemonic",
    "mnemonic_to_seed",
]
