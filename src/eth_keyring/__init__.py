"""
Ethereum Keyring Controller

Manages a set of keyrings (simple imported keys and BIP39/BIP32 HD trees)
behind one password-encrypted vault, and routes signing requests to the
keyring that owns an address.
"""

# Error model and address helpers
from .runtime.errors import *
from .runtime.address import normalize_address, normalize_addresses

# Keyring providers and registry
from .keyrings import Keyring, SimpleKeyring, HdKeyring
from .registry import KeyringRegistry

# Vault encryption and storage
from .vault import (
    Encryptor, PasswordEncryptor,
    ObservableStore, VaultStorage, MemoryVaultStorage, FileVaultStorage
)

# Controller
from .config import ControllerConfig, EncryptorConfig
from .controller import KeyringController
from .events import EventEmitter
from .models import DisplayRecord, MemStoreState, SerializedKeyring
from .network import NetworkClient, get_balance

__version__ = "1.0.0"
__all__ = [
    # Errors
    "ErrorCode",
    "KeyringError",
    "InvalidPasswordError",
    "MissingPasswordError",
    "DecryptionError",
    "IncorrectPasswordError",
    "CorruptedVaultError",
    "MissingVaultError",
    "VaultStorageError",
    "UnknownKeyringTypeError",
    "DuplicateTypeError",
    "InvalidSeedPhraseError",
    "NoAccountError",
    "DuplicateAccountError",
    "NoOwningKeyringError",
    "InvalidPrivateKeyError",
    "KeyringProviderError",
    "UnsupportedTypedDataVersionError",
    "normalize_address",
    "normalize_addresses",

    # Keyrings
    "Keyring",
    "SimpleKeyring",
    "HdKeyring",
    "KeyringRegistry",

    # Vault
    "Encryptor",
    "PasswordEncryptor",
    "ObservableStore",
    "VaultStorage",
    "MemoryVaultStorage",
    "FileVaultStorage",

    # Controller
    "ControllerConfig",
    "EncryptorConfig",
    "KeyringController",
    "EventEmitter",
    "DisplayRecord",
    "MemStoreState",
    "SerializedKeyring",
    "NetworkClient",
    "get_balance",
]
