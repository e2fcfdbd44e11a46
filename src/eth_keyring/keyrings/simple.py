"""
Simple keyring: an explicit list of imported private keys.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..crypto.secp256k1 import Secp256k1KeyPair, private_key_to_bytes
from ..runtime.address import normalize_address
from ..runtime.errors import KeyringProviderError
from .base import Keyring, unknown_address
from . import signing

logger = logging.getLogger(__name__)


class SimpleKeyring(Keyring):
    """
    Keyring holding independent secp256k1 keys.

    Options and serialized payload are both a list of private key hex
    strings (prefix optional on input, none on output).
    """

    type = "Simple Key Pair"

    def __init__(self, opts: Optional[Sequence[str]] = None):
        self._wallets: List[Secp256k1KeyPair] = []
        if opts:
            self._wallets = self._load(opts)

    @staticmethod
    def _load(private_keys: Any) -> List[Secp256k1KeyPair]:
        if not isinstance(private_keys, (list, tuple)):
            raise KeyringProviderError("Simple keyring expects a list of private keys",
                                       details={"type": type(private_keys).__name__})
        return [Secp256k1KeyPair(private_key_to_bytes(key)) for key in private_keys]

    async def serialize(self) -> List[str]:
        return [wallet.to_hex() for wallet in self._wallets]

    async def deserialize(self, data: Any) -> None:
        wallets = self._load(data or [])
        self.destroy()
        self._wallets = wallets

    async def get_accounts(self) -> List[str]:
        return [wallet.address for wallet in self._wallets]

    async def add_accounts(self, count: int = 1) -> List[str]:
        new_wallets = [Secp256k1KeyPair.generate() for _ in range(count)]
        self._wallets.extend(new_wallets)
        logger.debug(f"Generated {count} key(s) in simple keyring")
        return [wallet.address for wallet in new_wallets]

    def _get_wallet(self, address: str) -> Secp256k1KeyPair:
        target = normalize_address(address)
        for wallet in self._wallets:
            if wallet.address == target:
                return wallet
        raise unknown_address(address)

    async def export_account(self, address: str) -> str:
        return self._get_wallet(address).to_hex()

    async def sign_transaction(self, address: str, transaction: Dict[str, Any],
                               opts: Optional[Dict[str, Any]] = None) -> str:
        wallet = self._get_wallet(address)
        return signing.sign_transaction(wallet.to_bytes(), transaction, opts)

    async def sign_message(self, address: str, data: Any,
                           opts: Optional[Dict[str, Any]] = None) -> str:
        return signing.sign_personal_message(self._get_wallet(address).to_bytes(), data)

    async def sign_typed_data(self, address: str, data: Any,
                              opts: Optional[Dict[str, Any]] = None) -> str:
        return signing.sign_typed_data(self._get_wallet(address).to_bytes(), data, opts)

    def destroy(self) -> None:
        for wallet in self._wallets:
            wallet.wipe()
        self._wallets = []


__all__ = ["SimpleKeyring"]
