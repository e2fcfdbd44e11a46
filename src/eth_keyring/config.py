"""
Configuration for the keyring controller and the vault encryptor.

Both configs are plain dataclasses; ``from_env`` reads ``ETH_KEYRING_*``
variables and falls back to the defaults below.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from .crypto.hd import DEFAULT_HD_PATH

ENV_PREFIX = "ETH_KEYRING_"


def _env_value(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(ENV_PREFIX + name.upper())
    if raw is None or raw == "":
        return default
    if cast is bool:
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return cast(raw)


@dataclass
class EncryptorConfig:
    """Key derivation and cipher parameters for the vault."""
    kdf_iterations: int = 600_000
    salt_size: int = 32
    iv_size: int = 12
    key_length: int = 32

    def __post_init__(self):
        if self.kdf_iterations < 1:
            raise ValueError("kdf_iterations must be positive")
        if self.iv_size < 12:
            raise ValueError("iv_size must be at least 12 bytes for AES-GCM")
        if self.key_length not in (16, 24, 32):
            raise ValueError("key_length must be 16, 24 or 32")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> EncryptorConfig:
        env = os.environ if env is None else env
        return cls(**{
            f.name: _env_value(env, f.name, f.default, int) for f in fields(cls)
        })


@dataclass
class ControllerConfig:
    """Controller behaviour."""
    hd_path: str = DEFAULT_HD_PATH
    initial_accounts: int = 1
    allow_type_override: bool = False
    vault_path: Optional[str] = None

    def __post_init__(self):
        if self.initial_accounts < 1:
            raise ValueError("initial_accounts must be at least 1")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> ControllerConfig:
        env = os.environ if env is None else env
        return cls(
            hd_path=_env_value(env, "hd_path", DEFAULT_HD_PATH, str),
            initial_accounts=_env_value(env, "initial_accounts", 1, int),
            allow_type_override=_env_value(env, "allow_type_override", False, bool),
            vault_path=_env_value(env, "vault_path", None, str),
        )


__all__ = [
    "ENV_PREFIX",
    "EncryptorConfig",
    "ControllerConfig",
]
