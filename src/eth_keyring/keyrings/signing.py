"""
Signing helpers shared by the bundled keyrings.

Wire formats (typed transactions, EIP-191 personal messages, EIP-712
structured data) are produced by eth-account; keyrings only supply the key.
"""

from __future__ import annotations
import json
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.messages import encode_defunct

from ..runtime.address import normalize_address
from ..runtime.errors import KeyringProviderError, UnsupportedTypedDataVersionError

SUPPORTED_TYPED_DATA_VERSIONS = ("V3", "V4")
DEFAULT_TYPED_DATA_VERSION = "V4"


def _to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def sign_transaction(private_key: bytes, transaction: Dict[str, Any],
                     opts: Optional[Dict[str, Any]] = None) -> str:
    """
    Sign a transaction dict.

    ``opts["chainId"]`` fills a missing chain id. The ``from`` field, when
    present, must match the signing key; ``gasLimit`` is accepted for ``gas``.

    Returns:
        Raw signed transaction as 0x-prefixed hex
    """
    opts = opts or {}
    account = Account.from_key(private_key)
    tx = dict(transaction)

    sender = tx.pop("from", None)
    if sender is not None and normalize_address(sender) != normalize_address(account.address):
        raise KeyringProviderError("Transaction sender does not match signing key",
                                   details={"from": sender})
    if "chainId" not in tx and "chainId" in opts:
        tx["chainId"] = opts["chainId"]
    if "gasLimit" in tx:
        tx.setdefault("gas", tx.pop("gasLimit"))

    try:
        signed = account.sign_transaction(tx)
    except (TypeError, ValueError) as e:
        raise KeyringProviderError(f"Failed to sign transaction: {e}", cause=e)
    return _to_hex(signed.raw_transaction)


def sign_personal_message(private_key: bytes, data: Any) -> str:
    """
    EIP-191 personal message signature.

    ``data`` is 0x-prefixed hex (signed as raw bytes), bytes, or text.
    """
    if isinstance(data, (bytes, bytearray)):
        message = encode_defunct(primitive=bytes(data))
    elif isinstance(data, str) and data.startswith("0x"):
        message = encode_defunct(hexstr=data)
    elif isinstance(data, str):
        message = encode_defunct(text=data)
    else:
        raise KeyringProviderError("Message data must be text, hex or bytes",
                                   details={"type": type(data).__name__})

    signed = Account.from_key(private_key).sign_message(message)
    return _to_hex(signed.signature)


def sign_typed_data(private_key: bytes, data: Any, opts: Optional[Dict[str, Any]] = None) -> str:
    """
    EIP-712 signature over a full typed-data message.

    ``data`` is the full message (``types``, ``primaryType``, ``domain``,
    ``message``) as a dict or JSON string.
    """
    version = (opts or {}).get("version", DEFAULT_TYPED_DATA_VERSION)
    if version not in SUPPORTED_TYPED_DATA_VERSIONS:
        raise UnsupportedTypedDataVersionError(details={"version": version})

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise KeyringProviderError("Typed data is not valid JSON", cause=e)

    try:
        signed = Account.from_key(private_key).sign_typed_data(full_message=data)
    except (TypeError, ValueError, KeyError) as e:
        raise KeyringProviderError(f"Failed to sign typed data: {e}", cause=e)
    return _to_hex(signed.signature)


__all__ = [
    "SUPPORTED_TYPED_DATA_VERSIONS",
    "DEFAULT_TYPED_DATA_VERSION",
    "sign_transaction",
    "sign_personal_message",
    "sign_typed_data",
]
