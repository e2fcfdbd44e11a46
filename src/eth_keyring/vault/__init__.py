"""
Vault encryption and storage.
"""

from .encryptor import Encryptor, PasswordEncryptor
from .store import ObservableStore, VaultStorage, MemoryVaultStorage, FileVaultStorage

__all__ = [
    "Encryptor",
    "PasswordEncryptor",
    "ObservableStore",
    "VaultStorage",
    "MemoryVaultStorage",
    "FileVaultStorage",
]
