"""
Keyring providers.

Provides the provider contract and the two bundled keyring types.
"""

from .base import Keyring
from .simple import SimpleKeyring
from .hd import HdKeyring

__all__ = [
    "Keyring",
    "SimpleKeyring",
    "HdKeyring",
]
