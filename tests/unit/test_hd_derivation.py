"""
Tests for BIP39 mnemonic handling and HD account key derivation.
"""

import pytest
from eth_account import Account

from eth_keyring.crypto.hd import (
    DEFAULT_HD_PATH,
    derive_private_key,
    is_valid_mnemonic,
    validate_mnemonic,
    generate_mnemonic,
    mnemonic_to_seed,
    validate_hd_path,
)
from eth_keyring.crypto.secp256k1 import Secp256k1KeyPair
from eth_keyring.runtime.errors import InvalidSeedPhraseError


class TestMnemonic:
    """Test mnemonic validation and generation."""

    def test_reference_mnemonics_are_valid(self, mnemonic, other_mnemonic):
        assert is_valid_mnemonic(mnemonic)
        assert is_valid_mnemonic(other_mnemonic)

    @pytest.mark.parametrize("phrase", [
        "not a real seed phrase",
        "",
        "   ",
        None,
        42,
        "affair entry detect broom axis crawl found valve bamboo taste broken",
    ])
    def test_invalid_mnemonics(self, phrase):
        assert not is_valid_mnemonic(phrase)

    def test_validate_normalizes_whitespace_and_case(self, mnemonic):
        messy = "  " + mnemonic.upper().replace(" ", "   ") + "\n"

        assert validate_mnemonic(messy) == mnemonic

    def test_validate_raises(self):
        with pytest.raises(InvalidSeedPhraseError):
            validate_mnemonic("not a real seed phrase")

    def test_generate_mnemonic(self):
        phrase = generate_mnemonic()

        assert len(phrase.split()) == 12
        assert is_valid_mnemonic(phrase)
        assert phrase != generate_mnemonic()


class TestDerivation:
    """Test account key derivation."""

    def test_validate_hd_path(self):
        assert validate_hd_path(DEFAULT_HD_PATH) == DEFAULT_HD_PATH

    @pytest.mark.parametrize("path", ["44'/60'", "m/abc", "x/0", ""])
    def test_validate_hd_path_rejects_malformed(self, path):
        with pytest.raises(ValueError):
            validate_hd_path(path)

    def test_first_accounts_match_eth_account(self, mnemonic):
        """Derivation along m/44'/60'/0'/0/i agrees with eth-account's HD wallet."""
        Account.enable_unaudited_hdwallet_features()
        seed = mnemonic_to_seed(mnemonic)

        for index in range(2):
            expected = Account.from_mnemonic(mnemonic, account_path=f"{DEFAULT_HD_PATH}/{index}")
            derived = Secp256k1KeyPair(derive_private_key(seed, DEFAULT_HD_PATH, index))
            assert derived.address == expected.address.lower()

    def test_indexes_yield_distinct_keys(self, mnemonic):
        seed = mnemonic_to_seed(mnemonic)

        first = derive_private_key(seed, DEFAULT_HD_PATH, 0)
        assert first == derive_private_key(seed, DEFAULT_HD_PATH, 0)
        assert first != derive_private_key(seed, DEFAULT_HD_PATH, 1)
        assert len(first) == 32

    def test_custom_path(self, mnemonic):
        seed = mnemonic_to_seed(mnemonic)

        assert derive_private_key(seed, "m/44'/60'/1'/0", 0) != derive_private_key(seed, DEFAULT_HD_PATH, 0)
