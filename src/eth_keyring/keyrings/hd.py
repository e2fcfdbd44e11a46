"""
Hierarchical-deterministic keyring (BIP39 mnemonic, BIP32/BIP44 derivation).
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from ..crypto.hd import (
    DEFAULT_HD_PATH,
    derive_private_key,
    generate_mnemonic,
    mnemonic_to_seed,
    validate_hd_path,
    validate_mnemonic,
)
from ..crypto.secp256k1 import Secp256k1KeyPair
from ..runtime.address import normalize_address
from ..runtime.errors import KeyringProviderError
from .base import Keyring, unknown_address
from . import signing

logger = logging.getLogger(__name__)


class HdKeyring(Keyring):
    """
    Keyring deriving accounts ``<hdPath>/0``, ``<hdPath>/1``, ... from one mnemonic.

    Options / serialized payload::

        {"mnemonic": str, "numberOfAccounts": int, "hdPath": str}

    When options are given without a mnemonic a fresh random one is generated.
    """

    type = "HD Key Tree"

    def __init__(self, opts: Optional[Dict[str, Any]] = None):
        self.mnemonic: Optional[str] = None
        self.hd_path = DEFAULT_HD_PATH
        self._seed: Optional[bytearray] = None
        self._wallets: List[Secp256k1KeyPair] = []
        if opts is not None:
            self._init(opts)

    def _init(self, opts: Dict[str, Any]) -> None:
        if not isinstance(opts, dict):
            raise KeyringProviderError("HD keyring expects an options mapping",
                                       details={"type": type(opts).__name__})

        self.destroy()
        self.hd_path = opts.get("hdPath") or DEFAULT_HD_PATH
        mnemonic = opts.get("mnemonic")
        if mnemonic:
            self._init_from_mnemonic(validate_mnemonic(mnemonic))
        elif opts.get("numberOfAccounts"):
            self._init_from_mnemonic(generate_mnemonic())

        number_of_accounts = int(opts.get("numberOfAccounts") or 0)
        if number_of_accounts:
            self._derive(number_of_accounts)

    def _init_from_mnemonic(self, mnemonic: str) -> None:
        self.mnemonic = mnemonic
        try:
            validate_hd_path(self.hd_path)
        except ValueError as e:
            raise KeyringProviderError(f"Invalid HD path: {e}", cause=e)
        self._seed = bytearray(mnemonic_to_seed(mnemonic))

    def _derive(self, count: int) -> List[Secp256k1KeyPair]:
        if self._seed is None:
            self._init_from_mnemonic(generate_mnemonic())

        start = len(self._wallets)
        new_wallets = [
            Secp256k1KeyPair(derive_private_key(bytes(self._seed), self.hd_path, index))
            for index in range(start, start + count)
        ]
        self._wallets.extend(new_wallets)
        logger.debug(f"Derived HD accounts {start}..{start + count - 1} on {self.hd_path}")
        return new_wallets

    async def serialize(self) -> Dict[str, Any]:
        return {
            "mnemonic": self.mnemonic,
            "numberOfAccounts": len(self._wallets),
            "hdPath": self.hd_path,
        }

    async def deserialize(self, data: Any) -> None:
        self._init(data or {})

    async def get_accounts(self) -> List[str]:
        return [wallet.address for wallet in self._wallets]

    async def add_accounts(self, count: int = 1) -> List[str]:
        return [wallet.address for wallet in self._derive(count)]

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
        if self._seed is not None:
            self._seed[:] = bytes(len(self._seed))
        self._seed = None
        self.mnemonic = None


__all__ = ["HdKeyring"]
