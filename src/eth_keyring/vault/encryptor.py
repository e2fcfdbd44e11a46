"""
Password-based vault encryption.

The vault is a JSON envelope ``{"data", "iv", "salt"}`` (base64 fields)
holding AES-256-GCM ciphertext of the JSON-encoded keyring list. The key is
derived from the password with PBKDF2-HMAC-SHA256 and a per-vault salt.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import asyncio
import base64
import binascii
import json
import os
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..config import EncryptorConfig
from ..runtime.errors import CorruptedVaultError, IncorrectPasswordError, InvalidPasswordError


class Encryptor(ABC):
    """
    Vault codec interface.

    ``decrypt`` must raise ``IncorrectPasswordError`` when the password does
    not authenticate and ``CorruptedVaultError`` when the ciphertext is
    malformed.
    """

    @abstractmethod
    async def encrypt(self, password: str, value: Any) -> str:
        """Encrypt a JSON-compatible value."""
        pass

    @abstractmethod
    async def decrypt(self, password: str, ciphertext: str) -> Any:
        """Decrypt a value produced by ``encrypt``."""
        pass


class PasswordEncryptor(Encryptor):
    """PBKDF2-HMAC-SHA256 + AES-GCM encryptor."""

    def __init__(self, config: Optional[EncryptorConfig] = None):
        self.config = config or EncryptorConfig()

    def _derive_key(self, password: str, salt: bytes) -> bytes:
        if not isinstance(password, str) or not password:
            raise InvalidPasswordError()
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self.config.key_length,
            salt=salt,
            iterations=self.config.kdf_iterations,
        )
        return kdf.derive(password.encode("utf-8"))

    def encrypt_sync(self, password: str, value: Any) -> str:
        salt = os.urandom(self.config.salt_size)
        iv = os.urandom(self.config.iv_size)
        key = self._derive_key(password, salt)
        plaintext = json.dumps(value, separators=(",", ":")).encode("utf-8")
        ciphertext = AESGCM(key).encrypt(iv, plaintext, None)
        return json.dumps({
            "data": base64.b64encode(ciphertext).decode("ascii"),
            "iv": base64.b64encode(iv).decode("ascii"),
            "salt": base64.b64encode(salt).decode("ascii"),
        })

    def decrypt_sync(self, password: str, ciphertext: str) -> Any:
        try:
            envelope = json.loads(ciphertext)
            data = base64.b64decode(envelope["data"], validate=True)
            iv = base64.b64decode(envelope["iv"], validate=True)
            salt = base64.b64decode(envelope["salt"], validate=True)
        except (TypeError, KeyError, ValueError, binascii.Error) as e:
            raise CorruptedVaultError("Vault envelope is malformed", cause=e)

        if len(iv) < 12 or not salt:
            raise CorruptedVaultError("Vault envelope has invalid iv or salt")

        key = self._derive_key(password, salt)
        try:
            plaintext = AESGCM(key).decrypt(iv, data, None)
        except InvalidTag as e:
            raise IncorrectPasswordError(cause=e)

        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise CorruptedVaultError("Vault payload is not valid JSON", cause=e)

    async def encrypt(self, password: str, value: Any) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.encrypt_sync, password, value)

    async def decrypt(self, password: str, ciphertext: str) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.decrypt_sync, password, ciphertext)


__all__ = [
    "Encryptor",
    "PasswordEncryptor",
]
