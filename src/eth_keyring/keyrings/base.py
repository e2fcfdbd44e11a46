"""
Base keyring provider interface.

Defines the capability contract every keyring type must implement so the
controller can aggregate, persist and route signing requests to it.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..runtime.errors import KeyringProviderError


class Keyring(ABC):
    """
    Base keyring provider.

    Subclasses set the class attribute ``type``, the name the registry and
    the vault use for this provider. A keyring is constructed from
    type-specific options; ``deserialize`` restores it from the payload
    produced by ``serialize``.
    """

    type: str = ""

    @abstractmethod
    async def serialize(self) -> Any:
        """
        Serialize the keyring's secret state.

        Returns:
            JSON-compatible payload accepted by ``deserialize``
        """
        pass

    @abstractmethod
    async def deserialize(self, data: Any) -> None:
        """
        Replace the keyring's state from a serialized payload.

        Raises:
            KeyringProviderError: If the payload is malformed
        """
        pass

    @abstractmethod
    async def get_accounts(self) -> List[str]:
        """
        List the addresses held by this keyring, in derivation order.

        Returns:
            Ordered list of normalized addresses
        """
        pass

    @abstractmethod
    async def add_accounts(self, count: int = 1) -> List[str]:
        """
        Add new accounts.

        Args:
            count: Number of accounts to add

        Returns:
            Newly added addresses
        """
        pass

    @abstractmethod
    async def export_account(self, address: str) -> str:
        """
        Export the private key backing an address.

        Returns:
            Private key hex string without prefix
        """
        pass

    @abstractmethod
    async def sign_transaction(self, address: str, transaction: Dict[str, Any],
                               opts: Optional[Dict[str, Any]] = None) -> Any:
        """Sign a transaction on behalf of address."""
        pass

    @abstractmethod
    async def sign_message(self, address: str, data: Any,
                           opts: Optional[Dict[str, Any]] = None) -> str:
        """Sign a personal message on behalf of address."""
        pass

    @abstractmethod
    async def sign_typed_data(self, address: str, data: Any,
                              opts: Optional[Dict[str, Any]] = None) -> str:
        """Sign EIP-712 structured data on behalf of address."""
        pass

    def destroy(self) -> None:
        """Wipe secret material held in memory. Default is a no-op."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type='{self.type}')"


def unknown_address(address: str) -> KeyringProviderError:
    """Error raised when a keyring is asked about an address it does not hold."""
    return KeyringProviderError("Address not found in this keyring", details={"address": address})


__all__ = [
    "Keyring",
    "unknown_address",
]
