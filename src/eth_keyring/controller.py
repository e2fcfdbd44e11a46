"""
Keyring controller.

Owns the live keyrings, the persisted encrypted vault and the redacted
display state, and routes export/sign requests to the keyring owning an
address.

Every mutation follows the same order: build or change keyrings, persist
the full keyring list as one encrypted vault, commit to memory, refresh the
display state, then notify listeners. Mutations are serialized by a single
``asyncio.Lock`` so two concurrent calls cannot interleave their persists.

Example:
    ```python
    controller = KeyringController()
    await controller.create_new_vault_and_restore("password", mnemonic)
    accounts = await controller.get_accounts()
    signature = await controller.sign_message({"from": accounts[0], "data": "hello"})
    ```
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Sequence, Type
import asyncio
import inspect
import logging

from pydantic import ValidationError

from .config import ControllerConfig
from .crypto.hd import is_valid_mnemonic
from .crypto.secp256k1 import private_key_to_address
from .events import EventEmitter, LOCK, NEW_ACCOUNT, UNLOCKED, UPDATE, VAULT_CREATED
from .keyrings.base import Keyring
from .keyrings.hd import HdKeyring
from .keyrings.simple import SimpleKeyring
from .models import DisplayRecord, MemStoreState, SerializedKeyring
from .network import NetworkClient, estimate_fees
from .registry import KeyringRegistry
from .runtime.address import normalize_address, normalize_addresses
from .runtime.errors import (
    CorruptedVaultError,
    DecryptionError,
    DuplicateAccountError,
    InvalidPasswordError,
    InvalidSeedPhraseError,
    KeyringError,
    KeyringProviderError,
    MissingPasswordError,
    MissingVaultError,
    NoAccountError,
    NoOwningKeyringError,
)
from .vault.encryptor import Encryptor, PasswordEncryptor
from .vault.store import FileVaultStorage, ObservableStore, VaultStorage

logger = logging.getLogger(__name__)


def _assert_password(password: Any) -> None:
    if not isinstance(password, str) or not password:
        raise InvalidPasswordError()


class KeyringController:
    """
    Keyring aggregation, vault persistence and signing dispatch.

    Attributes:
        store: Persisted state, ``{"vault": ciphertext}``
        mem_store: Display state, ``{"isUnlocked", "keyringTypes", "keyrings"}``
        keyrings: Live keyring instances, in insertion order
        imported_wallets: Addresses imported with ``import_wallet`` (memory only)
    """

    def __init__(
        self,
        init_state: Optional[Dict[str, Any]] = None,
        keyring_types: Optional[Sequence[Type[Keyring]]] = None,
        encryptor: Optional[Encryptor] = None,
        storage: Optional[VaultStorage] = None,
        config: Optional[ControllerConfig] = None,
        registry: Optional[KeyringRegistry] = None,
    ):
        """
        Initialize the controller.

        Args:
            init_state: Initial persisted state, e.g. ``{"vault": ...}``
            keyring_types: Extra provider classes registered after the bundled ones
            encryptor: Vault codec (defaults to ``PasswordEncryptor``)
            storage: Durable vault storage; read at startup when init_state has no vault
            config: Controller configuration
            registry: Prebuilt registry (keyring_types is ignored when given)
        """
        self.config = config or ControllerConfig()
        self.registry = registry or KeyringRegistry.default(
            keyring_types, override=self.config.allow_type_override
        )
        self.encryptor = encryptor or PasswordEncryptor()

        if storage is None and self.config.vault_path:
            storage = FileVaultStorage(self.config.vault_path)
        self.storage = storage

        initial = dict(init_state or {})
        if self.storage is not None and not initial.get("vault"):
            stored_vault = self.storage.read()
            if stored_vault:
                initial["vault"] = stored_vault

        self.store = ObservableStore(initial)
        self.mem_store = ObservableStore(
            MemStoreState(keyring_types=self.registry.types()).to_dict()
        )
        self.events = EventEmitter()

        self.keyrings: List[Keyring] = []
        self.imported_wallets: List[str] = []
        self._password: Optional[str] = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Events and state
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Callable[..., None]) -> Callable[[], None]:
        """Subscribe to a controller event; returns an unsubscribe callable."""
        return self.events.on(event, listener)

    def once(self, event: str, listener: Callable[..., None]) -> Callable[[], None]:
        return self.events.once(event, listener)

    def off(self, event: str, listener: Callable[..., None]) -> bool:
        return self.events.off(event, listener)

    @property
    def is_unlocked(self) -> bool:
        return bool(self.mem_store.get_state().get("isUnlocked"))

    def full_update(self) -> Dict[str, Any]:
        """
        Emit ``update`` with the current display state and return it.

        Ends every mutating operation, so consumers can either listen for
        updates or use the returned state. Keyring types registered since
        construction are picked up here.
        """
        keyring_types = self.registry.types()
        if self.mem_store.get_state().get("keyringTypes") != keyring_types:
            self.mem_store.update_state(keyringTypes=keyring_types)

        state = self.mem_store.get_state()
        self.events.emit(UPDATE, state)
        return state

    # ------------------------------------------------------------------
    # Vault lifecycle
    # ------------------------------------------------------------------

    async def create_new_vault_and_keychain(self, password: str) -> Dict[str, Any]:
        """
        Create a new vault holding one random HD keyring with one account.

        Replaces any live keyrings and the stored vault.

        Args:
            password: Password to encrypt the vault with

        Returns:
            Display state

        Raises:
            InvalidPasswordError: If password is not a non-empty string
            NoAccountError: If the new keyring has no account
        """
        _assert_password(password)

        async with self._lock:
            keyring = self._build_keyring(HdKeyring.type, {
                "numberOfAccounts": self.config.initial_accounts,
                "hdPath": self.config.hd_path,
            })
            first_account = await self._first_account(keyring)

            await self._commit_new_keyrings([keyring], password)

            logger.info("Created new vault")
            self.events.emit(VAULT_CREATED, first_account)
            self.set_unlocked()

        return self.full_update()

    async def create_new_vault_and_restore(self, password: str, seed_phrase: str) -> Dict[str, Any]:
        """
        Create a new vault from a BIP39 seed phrase with one account.

        Password and seed phrase are validated before anything changes, so a
        failed restore leaves the live keyrings and the stored vault as they were.

        Args:
            password: Password to encrypt the vault with
            seed_phrase: BIP39 mnemonic

        Returns:
            Display state

        Raises:
            InvalidPasswordError: If password is not a non-empty string
            InvalidSeedPhraseError: If the mnemonic fails validation
            NoAccountError: If derivation yields no account
        """
        _assert_password(password)
        if not is_valid_mnemonic(seed_phrase):
            raise InvalidSeedPhraseError()

        async with self._lock:
            keyring = self._build_keyring(HdKeyring.type, {
                "mnemonic": seed_phrase,
                "numberOfAccounts": 1,
                "hdPath": self.config.hd_path,
            })
            await self._first_account(keyring)

            await self._commit_new_keyrings([keyring], password)

            logger.info("Restored vault from seed phrase")
            self.set_unlocked()

        return self.full_update()

    async def submit_password(self, password: str) -> Dict[str, Any]:
        """
        Unlock the stored vault and restore its keyrings.

        Raises:
            InvalidPasswordError: If password is not a non-empty string
            MissingVaultError: If no vault has been stored
            DecryptionError: If the vault cannot be decrypted
        """
        _assert_password(password)

        async with self._lock:
            keyrings = await self._unlock_keyrings(password)
            self._password = password
            self._replace_keyrings(keyrings)
            await self._update_mem_store_keyrings()

            logger.info(f"Unlocked vault with {len(keyrings)} keyring(s)")
            self.set_unlocked()

        return self.full_update()

    async def verify_password(self, password: str) -> bool:
        """
        Check a password against the stored vault without changing state.

        Raises:
            MissingVaultError: If no vault has been stored
            DecryptionError: If the password does not decrypt the vault
        """
        _assert_password(password)
        await self._decrypt_vault(password)
        return True

    async def set_locked(self) -> Dict[str, Any]:
        """
        Lock the controller.

        Wipes live keyrings, imported addresses and the cached password.
        The stored vault is untouched.
        """
        async with self._lock:
            self._clear_keyrings()
            logger.info("Locked keyring controller")
            self.events.emit(LOCK)

        return self.full_update()

    def set_unlocked(self) -> None:
        """Mark the controller unlocked and emit ``unlocked``."""
        self.mem_store.update_state(isUnlocked=True)
        self.events.emit(UNLOCKED)

    async def persist_all_keyrings(self, password: Optional[str] = None) -> bool:
        """
        Serialize, encrypt and store every live keyring.

        Args:
            password: Vault password; defaults to the session password

        Returns:
            True once the vault is written

        Raises:
            MissingPasswordError: If no password is given or cached
            InvalidPasswordError: If password is not a non-empty string
        """
        async with self._lock:
            return await self._persist(self.keyrings, password)

    async def clear_keyrings(self) -> None:
        """
        Drop live keyrings, imported addresses and the cached password.

        The controller is left locked; the stored vault is untouched.
        """
        async with self._lock:
            self._clear_keyrings()

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------

    async def add_new_keyring(self, type_name: str, opts: Any = None) -> Keyring:
        """
        Add a keyring of the given type and persist it.

        If persisting fails the keyring is removed again, so memory and
        vault stay consistent.

        Args:
            type_name: Registered keyring type
            opts: Provider constructor options

        Returns:
            The new keyring

        Raises:
            UnknownKeyringTypeError: If type_name is not registered
            DuplicateAccountError: If a simple key's account already exists
        """
        async with self._lock:
            keyring = self._build_keyring(type_name, opts)
            accounts = await keyring.get_accounts()
            await self._check_for_duplicate(type_name, accounts)

            self.keyrings.append(keyring)
            try:
                await self._persist(self.keyrings)
            except BaseException:
                self.keyrings.remove(keyring)
                keyring.destroy()
                raise

            await self._update_mem_store_keyrings()

        self.full_update()
        return keyring

    async def check_for_duplicate(self, type_name: str, new_accounts: Sequence[str]) -> Sequence[str]:
        """
        Reject a simple key whose first account is already known.

        Only ``Simple Key Pair`` is checked; HD keyrings may legitimately
        re-derive known addresses.

        Returns:
            new_accounts, when no duplicate is found

        Raises:
            DuplicateAccountError: If the first account already exists
        """
        return await self._check_for_duplicate(type_name, new_accounts)

    async def add_new_account(self, selected_keyring: Keyring) -> Dict[str, Any]:
        """
        Add one account to a live keyring and persist.

        Emits ``newAccount`` for each new address once the vault is written.
        If persisting fails the keyring is restored to its previous state.
        """
        async with self._lock:
            if not any(keyring is selected_keyring for keyring in self.keyrings):
                raise KeyringProviderError("Keyring is not managed by this controller")

            snapshot = await selected_keyring.serialize()
            new_accounts = await selected_keyring.add_accounts(1)
            try:
                await self._persist(self.keyrings)
            except BaseException:
                await selected_keyring.deserialize(snapshot)
                raise

            for account in new_accounts:
                self.events.emit(NEW_ACCOUNT, normalize_address(account))
            await self._update_mem_store_keyrings()

        return self.full_update()

    async def import_wallet(self, private_key: str) -> str:
        """
        Register the address of an externally supplied private key.

        Imported addresses live in memory only: they are not written to the
        vault and are dropped on lock.

        Returns:
            Normalized address

        Raises:
            InvalidPrivateKeyError: If the key is not a valid secp256k1 scalar
            DuplicateAccountError: If the address is already known
        """
        address = private_key_to_address(private_key)

        async with self._lock:
            known = set(await self._get_accounts()) | set(self.imported_wallets)
            if address in known:
                raise DuplicateAccountError(details={"address": address})
            self.imported_wallets.append(address)

        logger.debug(f"Imported wallet {address}")
        return address

    async def get_accounts(self) -> List[str]:
        """
        Addresses of all live keyrings, normalized, in keyring order.
        """
        return await self._get_accounts()

    async def get_keyring_for_account(self, address: str) -> Keyring:
        """
        Live keyring that holds address.

        Raises:
            NoOwningKeyringError: If no keyring holds it
        """
        hexed = normalize_address(address)
        logger.debug(f"get_keyring_for_account: {hexed}")

        for keyring in list(self.keyrings):
            accounts = normalize_addresses(await keyring.get_accounts())
            if hexed in accounts:
                return keyring

        raise NoOwningKeyringError(details={"address": hexed})

    def get_keyrings_by_type(self, type_name: str) -> List[Keyring]:
        return [keyring for keyring in self.keyrings if keyring.type == type_name]

    async def display_for_keyring(self, keyring: Keyring) -> DisplayRecord:
        accounts = await keyring.get_accounts()
        return DisplayRecord(type=keyring.type, accounts=accounts)

    # ------------------------------------------------------------------
    # Signing dispatch
    # ------------------------------------------------------------------

    async def export_account(self, address: str) -> str:
        """Private key hex (no prefix) of the account at address."""
        keyring = await self.get_keyring_for_account(address)
        return await keyring.export_account(normalize_address(address))

    async def sign_transaction(self, transaction: Dict[str, Any], from_address: str,
                               opts: Optional[Dict[str, Any]] = None) -> Any:
        """Sign a transaction with the keyring owning from_address."""
        address = normalize_address(from_address)
        keyring = await self.get_keyring_for_account(address)
        return await keyring.sign_transaction(address, transaction, opts or {})

    async def sign_message(self, msg_params: Dict[str, Any],
                           opts: Optional[Dict[str, Any]] = None) -> str:
        """
        Sign a personal message.

        Args:
            msg_params: ``{"from": address, "data": message}``
        """
        address = normalize_address(msg_params.get("from"))
        keyring = await self.get_keyring_for_account(address)
        return await keyring.sign_message(address, msg_params.get("data"), opts or {})

    async def sign_typed_message(self, msg_params: Dict[str, Any],
                                 opts: Optional[Dict[str, Any]] = None) -> str:
        """
        Sign EIP-712 typed data.

        Args:
            msg_params: ``{"from": address, "data": typed_data}``
            opts: ``{"version": "V3" | "V4"}``, default V4
        """
        address = normalize_address(msg_params.get("from"))
        keyring = await self.get_keyring_for_account(address)
        return await keyring.sign_typed_data(address, msg_params.get("data"), opts or {"version": "V4"})

    async def sign_raw_transaction(self, raw_tx: Dict[str, Any], network: NetworkClient) -> str:
        """
        Sign a transaction for the network's chain, routed by ``raw_tx["from"]``.

        Returns:
            Raw signed transaction hex
        """
        chain_id = await network.get_chain_id()
        transaction = dict(raw_tx)
        transaction.setdefault("chainId", chain_id)
        return await self.sign_transaction(transaction, raw_tx.get("from"), {"chainId": chain_id})

    async def send_transaction(self, signed_tx: str, network: NetworkClient) -> Dict[str, str]:
        """Broadcast a signed transaction."""
        tx_hash = await network.send_raw_transaction(signed_tx)
        return {"transactionDetails": tx_hash}

    async def get_fees(self, raw_tx: Dict[str, Any], network: NetworkClient) -> Dict[str, str]:
        """Maximum fee in ether for a fee-market transaction."""
        return await estimate_fees(raw_tx, network)

    # ------------------------------------------------------------------
    # Internals; callers hold self._lock where state changes
    # ------------------------------------------------------------------

    def _build_keyring(self, type_name: str, opts: Any) -> Keyring:
        keyring_class = self.registry.resolve(type_name)
        return keyring_class(opts) if opts is not None else keyring_class()

    async def _first_account(self, keyring: Keyring) -> str:
        accounts = await keyring.get_accounts()
        if not accounts:
            raise NoAccountError(details={"type": keyring.type})
        return normalize_address(accounts[0])

    async def _get_accounts(self) -> List[str]:
        addresses: List[str] = []
        for keyring in list(self.keyrings):
            addresses.extend(await keyring.get_accounts())
        return normalize_addresses(addresses)

    async def _check_for_duplicate(self, type_name: str, new_accounts: Sequence[str]) -> Sequence[str]:
        if type_name != SimpleKeyring.type or not new_accounts:
            return new_accounts

        candidate = normalize_address(new_accounts[0])
        known = set(await self._get_accounts()) | set(self.imported_wallets)
        if candidate in known:
            raise DuplicateAccountError(details={"address": candidate})
        return new_accounts

    async def _call_encryptor(self, method: str, *args: Any) -> Any:
        result = getattr(self.encryptor, method)(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _persist(self, keyrings: Sequence[Keyring], password: Optional[str] = None) -> bool:
        if password is None:
            password = self._password
        if password is None:
            raise MissingPasswordError()
        _assert_password(password)

        serialized = []
        for keyring in keyrings:
            data = await keyring.serialize()
            serialized.append(SerializedKeyring(type=keyring.type, data=data).to_dict())

        vault = await self._call_encryptor("encrypt", password, serialized)
        if self.storage is not None:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self.storage.write, vault)

        self._password = password
        self.store.update_state(vault=vault)
        logger.debug(f"Persisted {len(serialized)} keyring(s) to vault")
        return True

    async def _decrypt_vault(self, password: str) -> Any:
        vault = self.store.get_state().get("vault")
        if not vault:
            raise MissingVaultError()
        try:
            return await self._call_encryptor("decrypt", password, vault)
        except KeyringError:
            raise
        except Exception as e:
            raise DecryptionError(cause=e)

    async def _unlock_keyrings(self, password: str) -> List[Keyring]:
        decrypted = await self._decrypt_vault(password)
        if not isinstance(decrypted, list):
            raise CorruptedVaultError("Vault does not contain a keyring list")

        keyrings: List[Keyring] = []
        try:
            for entry in decrypted:
                try:
                    serialized = SerializedKeyring.model_validate(entry)
                except ValidationError as e:
                    raise CorruptedVaultError("Vault contains a malformed keyring entry", cause=e)
                keyring = self.registry.resolve(serialized.type)()
                await keyring.deserialize(serialized.data)
                keyrings.append(keyring)
        except BaseException:
            for keyring in keyrings:
                keyring.destroy()
            raise
        return keyrings

    async def _commit_new_keyrings(self, keyrings: Sequence[Keyring], password: str) -> None:
        """Persist a staged keyring list, then make it the live set."""
        try:
            await self._persist(keyrings, password)
        except BaseException:
            for keyring in keyrings:
                keyring.destroy()
            raise
        self._replace_keyrings(keyrings)
        await self._update_mem_store_keyrings()

    def _replace_keyrings(self, keyrings: Sequence[Keyring]) -> None:
        for keyring in self.keyrings:
            if not any(keyring is kept for kept in keyrings):
                keyring.destroy()
        self.keyrings = list(keyrings)
        self.imported_wallets = []

    def _clear_keyrings(self) -> None:
        for keyring in self.keyrings:
            keyring.destroy()
        self.keyrings = []
        self.imported_wallets = []
        self._password = None
        self.mem_store.update_state(isUnlocked=False, keyrings=[])

    async def _update_mem_store_keyrings(self) -> None:
        records = [await self.display_for_keyring(keyring) for keyring in self.keyrings]
        self.mem_store.update_state(keyrings=[record.to_dict() for record in records])

    def __repr__(self) -> str:
        return f"KeyringController(keyrings={len(self.keyrings)}, unlocked={self.is_unlocked})"


__all__ = ["KeyringController"]
