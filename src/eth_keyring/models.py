"""
Data models for vault contents and display state.
"""

from __future__ import annotations
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from .runtime.address import normalize_address


class SerializedKeyring(BaseModel):
    """
    One keyring as written into the vault.

    ``data`` is the provider-specific payload returned by ``serialize``.
    """
    type: str = Field(min_length=1, description="Registry type name")
    data: Any = Field(default=None, description="Provider payload")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "data": self.data}


class DisplayRecord(BaseModel):
    """Redacted projection of a live keyring, safe to expose."""
    type: str
    accounts: List[str] = Field(default_factory=list)

    @field_validator("accounts", mode="before")
    @classmethod
    def normalize_accounts(cls, v: Any) -> List[str]:
        return [normalize_address(address) for address in (v or [])]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "accounts": list(self.accounts)}


class MemStoreState(BaseModel):
    """Display/notification store contents."""
    is_unlocked: bool = Field(default=False, alias="isUnlocked")
    keyring_types: List[str] = Field(default_factory=list, alias="keyringTypes")
    keyrings: List[DisplayRecord] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isUnlocked": self.is_unlocked,
            "keyringTypes": list(self.keyring_types),
            "keyrings": [record.to_dict() for record in self.keyrings],
        }


__all__ = [
    "SerializedKeyring",
    "DisplayRecord",
    "MemStoreState",
]
