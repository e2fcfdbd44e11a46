"""
Tests for the error model and address normalization helpers.
"""

import pytest

from eth_keyring.runtime.errors import (
    ErrorCode,
    KeyringError,
    DecryptionError,
    IncorrectPasswordError,
    CorruptedVaultError,
    KeyringProviderError,
    UnsupportedTypedDataVersionError,
    NoOwningKeyringError,
)
from eth_keyring.runtime.address import (
    strip_hex_prefix,
    add_hex_prefix,
    normalize_address,
    normalize_addresses,
    is_hex_string,
)


class TestErrors:
    """Test error codes and serialization."""

    def test_base_error_fields(self):
        cause = ValueError("boom")
        error = KeyringError("failed", ErrorCode.INTERNAL, {"k": "v"}, cause)

        assert error.message == "failed"
        assert error.code == ErrorCode.INTERNAL
        assert error.details == {"k": "v"}
        assert error.cause is cause

    def test_str_includes_code_details_and_cause(self):
        error = KeyringError("failed", ErrorCode.INTERNAL, {"k": "v"}, ValueError("boom"))
        text = str(error)

        assert "[INTERNAL] failed" in text
        assert "Details:" in text
        assert "Caused by: boom" in text

    def test_to_dict(self):
        error = NoOwningKeyringError(details={"address": "0xabc"})

        assert error.to_dict() == {
            "code": ErrorCode.NO_OWNING_KEYRING.value,
            "message": "No keyring found for the requested account",
            "details": {"address": "0xabc"},
        }

    def test_decryption_error_hierarchy(self):
        """Wrong password and corruption are distinguishable but share a base."""
        assert issubclass(IncorrectPasswordError, DecryptionError)
        assert issubclass(CorruptedVaultError, DecryptionError)
        assert IncorrectPasswordError().code == ErrorCode.INCORRECT_PASSWORD
        assert CorruptedVaultError().code == ErrorCode.CORRUPTED_VAULT
        assert DecryptionError().code == ErrorCode.DECRYPTION_FAILED

    def test_unsupported_typed_data_version_code(self):
        error = UnsupportedTypedDataVersionError(details={"version": "V1"})

        assert isinstance(error, KeyringProviderError)
        assert error.code == ErrorCode.UNSUPPORTED_TYPED_DATA_VERSION


class TestAddressHelpers:
    """Test address normalization."""

    def test_prefix_helpers(self):
        assert strip_hex_prefix("0xabc") == "abc"
        assert strip_hex_prefix("0Xabc") == "abc"
        assert strip_hex_prefix("abc") == "abc"
        assert add_hex_prefix("abc") == "0xabc"
        assert add_hex_prefix("0Xabc") == "0xabc"

    def test_normalize_address_forms(self):
        expected = "0x9e1447ea3f6aba7a5d344b360b95fd9bae049448"

        assert normalize_address("0x9E1447ea3F6abA7a5D344B360B95Fd9BAE049448") == expected
        assert normalize_address("9E1447ea3F6abA7a5D344B360B95Fd9BAE049448") == expected
        assert normalize_address("  0x9E1447EA3F6ABA7A5D344B360B95FD9BAE049448 ") == expected
        assert normalize_address(bytes.fromhex(expected[2:])) == expected
        assert normalize_address(None) is None

    def test_normalize_addresses_keeps_order(self):
        assert normalize_addresses(["0xAA", "bb", "0XCC"]) == ["0xaa", "0xbb", "0xcc"]

    def test_is_hex_string(self):
        assert is_hex_string("0xdeadBEEF")
        assert is_hex_string("deadbeef")
        assert not is_hex_string("random_private_key")
