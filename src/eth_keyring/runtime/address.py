"""
Address normalization helpers.

All equality checks in the controller use the normalized form:
lower-case hex with a single ``0x`` prefix.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Union
import re

_HEX_RE = re.compile(r"^[0-9a-f]*$")


def strip_hex_prefix(value: str) -> str:
    """Remove a leading ``0x``/``0X`` if present."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def add_hex_prefix(value: str) -> str:
    """Add a ``0x`` prefix if missing."""
    if value[:2] in ("0x", "0X"):
        return "0x" + value[2:]
    return "0x" + value


def normalize_address(address: Optional[Union[str, bytes, int]]) -> Optional[str]:
    """
    Normalize an address to lower-case ``0x``-prefixed hex.

    Args:
        address: Address as hex string (any case, prefix optional), raw bytes or int

    Returns:
        Normalized address, or None when address is None
    """
    if address is None:
        return None
    if isinstance(address, (bytes, bytearray)):
        return "0x" + bytes(address).hex()
    if isinstance(address, int):
        return "0x" + format(address, "x")
    return add_hex_prefix(address.strip()).lower()


def normalize_addresses(addresses: Iterable[str]) -> List[str]:
    """Normalize every address in order."""
    return [normalize_address(address) for address in addresses]


def is_hex_string(value: str) -> bool:
    """Check that value is hex, with or without prefix."""
    return bool(_HEX_RE.match(strip_hex_prefix(value).lower()))


__all__ = [
    "strip_hex_prefix",
    "add_hex_prefix",
    "normalize_address",
    "normalize_addresses",
    "is_hex_string",
]
