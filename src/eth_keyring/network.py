"""
Blockchain network collaborator interface.

The controller never talks to a node directly; fee estimation, balance
queries, chain id lookup and broadcast go through a ``NetworkClient``
supplied by the caller.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from eth_utils import from_wei

from .runtime.address import normalize_address
from .runtime.errors import KeyringError


class NetworkClient(ABC):
    """Narrow async interface onto an Ethereum JSON-RPC node."""

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Chain id of the connected network."""
        pass

    @abstractmethod
    async def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        """Gas estimate for a transaction."""
        pass

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Balance in wei."""
        pass

    @abstractmethod
    async def send_raw_transaction(self, raw_transaction: str) -> str:
        """
        Broadcast a signed transaction.

        Returns:
            Transaction hash
        """
        pass


def to_int(value: Union[int, str, None], field: str = "value") -> Optional[int]:
    """
    Parse an int given as int, ``0x`` hex string or decimal string.

    Raises:
        KeyringError: If the value cannot be parsed
    """
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text[:2].lower() == "0x":
                return int(text, 16)
            return int(text)
        except ValueError as e:
            raise KeyringError(f"Invalid numeric {field}: {value}", cause=e)
    raise KeyringError(f"Invalid numeric {field}: {value!r}")


def wei_to_ether(wei: int) -> str:
    """Render a wei amount as a decimal ether string."""
    return str(from_wei(wei, "ether"))


async def estimate_fees(raw_tx: Dict[str, Any], network: NetworkClient) -> Dict[str, str]:
    """
    Maximum fee of a fee-market transaction: gas limit times ``maxFeePerGas``.

    Uses ``raw_tx["gasLimit"]`` when present, otherwise asks the network.
    """
    gas_limit = raw_tx.get("gasLimit")
    if gas_limit is None:
        estimate_request = {key: raw_tx[key] for key in ("to", "from", "value", "data") if key in raw_tx}
        gas_limit = await network.estimate_gas(estimate_request)

    gas = to_int(gas_limit, "gasLimit")
    max_fee = to_int(raw_tx.get("maxFeePerGas"), "maxFeePerGas")
    if max_fee is None:
        raise KeyringError("maxFeePerGas is required to compute fees")

    return {"transactionFees": wei_to_ether(gas * max_fee)}


async def get_balance(address: str, network: NetworkClient) -> Dict[str, str]:
    """Balance of address in ether."""
    balance = await network.get_balance(normalize_address(address))
    return {"balance": wei_to_ether(to_int(balance, "balance"))}


__all__ = [
    "NetworkClient",
    "to_int",
    "wei_to_ether",
    "estimate_fees",
    "get_balance",
]
