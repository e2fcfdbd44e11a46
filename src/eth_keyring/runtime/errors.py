"""
Keyring Controller Error Model

This module provides the error handling framework for the keyring controller.
Every public operation fails with one specific error kind from this module.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Error codes for keyring controller failures."""

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2

    # Password/vault errors (100-199)
    INVALID_PASSWORD = 100
    MISSING_PASSWORD = 101
    DECRYPTION_FAILED = 102
    INCORRECT_PASSWORD = 103
    CORRUPTED_VAULT = 104
    MISSING_VAULT = 105
    STORAGE_FAILED = 106

    # Registry errors (200-299)
    UNKNOWN_KEYRING_TYPE = 200
    DUPLICATE_TYPE = 201

    # Account errors (300-399)
    INVALID_SEED_PHRASE = 300
    NO_ACCOUNT = 301
    DUPLICATE_ACCOUNT = 302
    NO_OWNING_KEYRING = 303
    INVALID_PRIVATE_KEY = 304

    # Provider/signing errors (400-499)
    PROVIDER_ERROR = 400
    UNSUPPORTED_TYPED_DATA_VERSION = 401


class KeyringError(Exception):
    """
    Base class for all keyring controller errors.

    Carries a stable error code plus optional structured details.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a keyring error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class InvalidPasswordError(KeyringError):
    """Password is not a non-empty string."""

    def __init__(self, message: str = "Password must be a non-empty string",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_PASSWORD, details, cause)


class MissingPasswordError(KeyringError):
    """No password supplied and none cached for the session."""

    def __init__(self, message: str = "No password available to persist the vault",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.MISSING_PASSWORD, details, cause)


class DecryptionError(KeyringError):
    """Vault could not be decrypted."""

    def __init__(self, message: str = "Failed to decrypt vault",
                 code: ErrorCode = ErrorCode.DECRYPTION_FAILED,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class IncorrectPasswordError(DecryptionError):
    """Vault authentication failed under the given password."""

    def __init__(self, message: str = "Incorrect password",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INCORRECT_PASSWORD, details, cause)


class CorruptedVaultError(DecryptionError):
    """Vault ciphertext is structurally malformed."""

    def __init__(self, message: str = "Vault is corrupted",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CORRUPTED_VAULT, details, cause)


class MissingVaultError(KeyringError):
    """No vault has been persisted yet."""

    def __init__(self, message: str = "Cannot unlock without a previous vault",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.MISSING_VAULT, details, cause)


class VaultStorageError(KeyringError):
    """Durable vault write or read failed."""

    def __init__(self, message: str = "Vault storage failed",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.STORAGE_FAILED, details, cause)


class UnknownKeyringTypeError(KeyringError):
    """No provider registered under the requested type name."""

    def __init__(self, message: str = "Unknown keyring type",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.UNKNOWN_KEYRING_TYPE, details, cause)


class DuplicateTypeError(KeyringError):
    """A provider is already registered under the type name."""

    def __init__(self, message: str = "Keyring type already registered",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.DUPLICATE_TYPE, details, cause)


class InvalidSeedPhraseError(KeyringError):
    """Mnemonic failed BIP39 validation."""

    def __init__(self, message: str = "Seed phrase is invalid",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_SEED_PHRASE, details, cause)


class NoAccountError(KeyringError):
    """Keyring produced no addresses."""

    def __init__(self, message: str = "No account found on keychain",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NO_ACCOUNT, details, cause)


class DuplicateAccountError(KeyringError):
    """The imported account already exists."""

    def __init__(self, message: str = "The account you are trying to import is a duplicate",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.DUPLICATE_ACCOUNT, details, cause)


class NoOwningKeyringError(KeyringError):
    """No live keyring owns the address."""

    def __init__(self, message: str = "No keyring found for the requested account",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NO_OWNING_KEYRING, details, cause)


class InvalidPrivateKeyError(KeyringError):
    """Value is not a valid secp256k1 private scalar."""

    def __init__(self, message: str = "Enter a valid private key",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_PRIVATE_KEY, details, cause)


class KeyringProviderError(KeyringError):
    """Provider-level failure (bad options, unknown address, bad payload)."""

    def __init__(self, message: str,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.PROVIDER_ERROR, details, cause)


class UnsupportedTypedDataVersionError(KeyringProviderError):
    """Requested EIP-712 version is not supported."""

    def __init__(self, message: str = "Unsupported typed data version",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, details, cause)
        self.code = ErrorCode.UNSUPPORTED_TYPED_DATA_VERSION


__all__ = [
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
]
