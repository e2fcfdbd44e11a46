"""
BIP39 mnemonics and BIP32 hierarchical key derivation.

Seeds come from the ``mnemonic`` package; account keys are derived from the
seed along ``<hd_path>/<index>`` with eth-account's BIP32 implementation.
"""

from __future__ import annotations
from eth_account.hdaccount import key_from_seed
from eth_account.hdaccount.deterministic import HDPath
from mnemonic import Mnemonic

from ..runtime.errors import InvalidSeedPhraseError

DEFAULT_HD_PATH = "m/44'/60'/0'/0"

_mnemo = Mnemonic("english")


def normalize_mnemonic(phrase: str) -> str:
    """Collapse whitespace and lower-case a phrase."""
    return " ".join(phrase.strip().lower().split())


def is_valid_mnemonic(phrase) -> bool:
    """Check BIP39 word list membership and checksum."""
    if not isinstance(phrase, str) or not phrase.strip():
        return False
    try:
        return _mnemo.check(normalize_mnemonic(phrase))
    except (ValueError, LookupError):
        return False


def validate_mnemonic(phrase) -> str:
    """
    Return the normalized phrase or raise.

    Raises:
        InvalidSeedPhraseError: If the phrase fails BIP39 validation
    """
    if not is_valid_mnemonic(phrase):
        raise InvalidSeedPhraseError()
    return normalize_mnemonic(phrase)


def generate_mnemonic(strength: int = 128) -> str:
    """Fresh random BIP39 phrase (128 bits -> 12 words)."""
    return _mnemo.generate(strength=strength)


def mnemonic_to_seed(phrase: str, passphrase: str = "") -> bytes:
    """BIP39 seed (PBKDF2-HMAC-SHA512, 2048 rounds)."""
    return Mnemonic.to_seed(normalize_mnemonic(phrase), passphrase=passphrase)


def validate_hd_path(path: str) -> str:
    """
    Check a derivation path like ``m/44'/60'/0'/0``.

    Raises:
        ValueError: If the path is malformed
    """
    HDPath(path)
    return path


def derive_private_key(seed: bytes, hd_path: str, index: int) -> bytes:
    """Private key of account ``<hd_path>/<index>`` (BIP32 CKDpriv)."""
    return key_from_seed(seed, f"{hd_path}/{index}")


__all__ = [
    "DEFAULT_HD_PATH",
    "normalize_mnemonic",
    "is_valid_mnemonic",
    "validate_mnemonic",
    "generate_mnemonic",
    "mnemonic_to_seed",
    "validate_hd_path",
    "derive_private_key",
]
