"""
Tests for adding keyrings and accounts, duplicate checks and raw key imports.
"""

import asyncio
from unittest.mock import patch

import pytest

from eth_keyring.crypto.secp256k1 import Secp256k1KeyPair
from eth_keyring.keyrings import HdKeyring, SimpleKeyring
from eth_keyring.runtime.errors import (
    DuplicateAccountError,
    InvalidPrivateKeyError,
    KeyringProviderError,
    NoOwningKeyringError,
    UnknownKeyringTypeError,
    VaultStorageError,
)


class TestAddKeyring:
    """Test add_new_keyring."""

    @pytest.mark.asyncio
    async def test_add_simple_keyring(self, unlocked_controller, external_account):
        hd_accounts = await unlocked_controller.get_accounts()
        updates = []
        unlocked_controller.on("update", updates.append)

        keyring = await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"]])

        assert isinstance(keyring, SimpleKeyring)
        assert unlocked_controller.keyrings[-1] is keyring
        assert await unlocked_controller.get_accounts() == hd_accounts + [external_account["address"].lower()]
        assert updates[-1]["keyrings"][-1] == {
            "type": "Simple Key Pair",
            "accounts": [external_account["address"].lower()],
        }

    @pytest.mark.asyncio
    async def test_accounts_follow_keyring_order(self, unlocked_controller):
        await unlocked_controller.add_new_keyring("HD Key Tree", {"numberOfAccounts": 2})
        await unlocked_controller.add_new_keyring("Simple Key Pair", [Secp256k1KeyPair.generate().to_hex()])

        expected = []
        for keyring in unlocked_controller.keyrings:
            expected.extend(await keyring.get_accounts())

        accounts = await unlocked_controller.get_accounts()
        assert len(accounts) == 1 + 2 + 1
        assert accounts == expected
        assert accounts == await unlocked_controller.get_accounts()

    @pytest.mark.asyncio
    async def test_unknown_type(self, unlocked_controller):
        with pytest.raises(UnknownKeyringTypeError):
            await unlocked_controller.add_new_keyring("Ledger Hardware")
        assert len(unlocked_controller.keyrings) == 1

    @pytest.mark.asyncio
    async def test_duplicate_simple_key(self, unlocked_controller, external_account):
        await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"]])
        vault = unlocked_controller.store.get_state()["vault"]

        with pytest.raises(DuplicateAccountError):
            await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"][2:]])

        assert len(unlocked_controller.keyrings) == 2
        assert unlocked_controller.store.get_state()["vault"] == vault

    @pytest.mark.asyncio
    async def test_simple_key_duplicating_hd_account(self, unlocked_controller):
        hd_address = (await unlocked_controller.get_accounts())[0]
        private_key = await unlocked_controller.export_account(hd_address)

        with pytest.raises(DuplicateAccountError):
            await unlocked_controller.add_new_keyring("Simple Key Pair", [private_key])

    @pytest.mark.asyncio
    async def test_hd_rederivation_is_not_a_duplicate(self, unlocked_controller, mnemonic):
        first = (await unlocked_controller.get_accounts())[0]

        await unlocked_controller.add_new_keyring("HD Key Tree", {"mnemonic": mnemonic, "numberOfAccounts": 1})

        assert await unlocked_controller.get_accounts() == [first, first]

    @pytest.mark.asyncio
    async def test_check_for_duplicate(self, unlocked_controller):
        address = (await unlocked_controller.get_accounts())[0]

        with pytest.raises(DuplicateAccountError):
            await unlocked_controller.check_for_duplicate("Simple Key Pair", [address[2:].upper()])
        assert await unlocked_controller.check_for_duplicate("HD Key Tree", [address]) == [address]
        assert await unlocked_controller.check_for_duplicate("Simple Key Pair", []) == []

    @pytest.mark.asyncio
    async def test_persist_failure_rolls_back(self, unlocked_controller, storage, external_account):
        accounts = await unlocked_controller.get_accounts()
        vault = storage.read()

        with patch.object(storage, "write", side_effect=VaultStorageError()):
            with pytest.raises(VaultStorageError):
                await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"]])

        assert len(unlocked_controller.keyrings) == 1
        assert await unlocked_controller.get_accounts() == accounts
        assert unlocked_controller.store.get_state()["vault"] == vault
        assert storage.read() == vault

    @pytest.mark.asyncio
    async def test_concurrent_adds_are_serialized(self, unlocked_controller, fast_encryptor, password):
        keys = [Secp256k1KeyPair.generate().to_hex() for _ in range(3)]

        await asyncio.gather(*[
            unlocked_controller.add_new_keyring("Simple Key Pair", [key]) for key in keys
        ])

        decrypted = await fast_encryptor.decrypt(password, unlocked_controller.store.get_state()["vault"])
        assert len(decrypted) == 4
        assert sorted(entry["data"][0] for entry in decrypted[1:]) == sorted(keys)

    @pytest.mark.asyncio
    async def test_get_keyrings_by_type(self, unlocked_controller, external_account):
        await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"]])

        assert [type(k) for k in unlocked_controller.get_keyrings_by_type("HD Key Tree")] == [HdKeyring]
        assert [type(k) for k in unlocked_controller.get_keyrings_by_type("Simple Key Pair")] == [SimpleKeyring]
        assert unlocked_controller.get_keyrings_by_type("Ledger Hardware") == []


class TestAddAccount:
    """Test add_new_account."""

    @pytest.mark.asyncio
    async def test_add_account_to_hd_keyring(self, unlocked_controller, fast_encryptor, password):
        new_accounts = []
        unlocked_controller.on("newAccount", new_accounts.append)
        keyring = unlocked_controller.keyrings[0]

        state = await unlocked_controller.add_new_account(keyring)

        accounts = await unlocked_controller.get_accounts()
        assert len(accounts) == 2
        assert new_accounts == [accounts[1]]
        assert state["keyrings"][0]["accounts"] == accounts

        decrypted = await fast_encryptor.decrypt(password, unlocked_controller.store.get_state()["vault"])
        assert decrypted[0]["data"]["numberOfAccounts"] == 2

    @pytest.mark.asyncio
    async def test_add_account_to_simple_keyring(self, unlocked_controller, external_account):
        keyring = await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"]])

        await unlocked_controller.add_new_account(keyring)

        assert len(await keyring.get_accounts()) == 2
        assert len(await unlocked_controller.get_accounts()) == 3

    @pytest.mark.asyncio
    async def test_persist_failure_restores_keyring(self, unlocked_controller, storage):
        keyring = unlocked_controller.keyrings[0]
        accounts = await unlocked_controller.get_accounts()
        new_accounts = []
        unlocked_controller.on("newAccount", new_accounts.append)

        with patch.object(storage, "write", side_effect=VaultStorageError()):
            with pytest.raises(VaultStorageError):
                await unlocked_controller.add_new_account(keyring)

        assert await unlocked_controller.get_accounts() == accounts
        assert new_accounts == []

    @pytest.mark.asyncio
    async def test_foreign_keyring_rejected(self, unlocked_controller):
        with pytest.raises(KeyringProviderError):
            await unlocked_controller.add_new_account(HdKeyring({"numberOfAccounts": 1}))


class TestImportWallet:
    """Test raw private key imports."""

    @pytest.mark.asyncio
    async def test_import_known_key(self, unlocked_controller, external_account):
        before = len(unlocked_controller.imported_wallets)

        address = await unlocked_controller.import_wallet(external_account["private_key"])

        assert address.lower() == external_account["address"].lower()
        assert len(unlocked_controller.imported_wallets) == before + 1

    @pytest.mark.asyncio
    async def test_invalid_keys(self, unlocked_controller, wrong_private_keys):
        for private_key in wrong_private_keys:
            with pytest.raises(InvalidPrivateKeyError):
                await unlocked_controller.import_wallet(private_key)
        assert unlocked_controller.imported_wallets == []

    @pytest.mark.asyncio
    async def test_duplicate_import(self, unlocked_controller, external_account):
        await unlocked_controller.import_wallet(external_account["private_key"])

        with pytest.raises(DuplicateAccountError):
            await unlocked_controller.import_wallet(external_account["private_key"][2:])
        assert len(unlocked_controller.imported_wallets) == 1

    @pytest.mark.asyncio
    async def test_import_of_keyring_account(self, unlocked_controller):
        hd_address = (await unlocked_controller.get_accounts())[0]
        private_key = await unlocked_controller.export_account(hd_address)

        with pytest.raises(DuplicateAccountError):
            await unlocked_controller.import_wallet(private_key)

    @pytest.mark.asyncio
    async def test_simple_keyring_after_import_is_duplicate(self, unlocked_controller, external_account):
        await unlocked_controller.import_wallet(external_account["private_key"])

        with pytest.raises(DuplicateAccountError):
            await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"]])

    @pytest.mark.asyncio
    async def test_imports_are_ephemeral(self, unlocked_controller, storage, external_account):
        vault = storage.read()
        await unlocked_controller.import_wallet(external_account["private_key"])

        assert storage.read() == vault
        assert external_account["address"].lower() not in await unlocked_controller.get_accounts()

        await unlocked_controller.set_locked()
        assert unlocked_controller.imported_wallets == []


class TestAccountLookup:
    """Test address ownership resolution."""

    @pytest.mark.asyncio
    async def test_get_keyring_for_account(self, unlocked_controller, external_account):
        simple = await unlocked_controller.add_new_keyring("Simple Key Pair", [external_account["private_key"]])
        hd_address = (await unlocked_controller.get_accounts())[0]

        assert await unlocked_controller.get_keyring_for_account(hd_address.upper().replace("0X", "")) \
            is unlocked_controller.keyrings[0]
        assert await unlocked_controller.get_keyring_for_account(external_account["address"]) is simple

    @pytest.mark.asyncio
    async def test_no_owning_keyring(self, unlocked_controller):
        with pytest.raises(NoOwningKeyringError) as exc_info:
            await unlocked_controller.get_keyring_for_account("0x" + "11" * 20)
        assert exc_info.value.details == {"address": "0x" + "11" * 20}

    @pytest.mark.asyncio
    async def test_display_for_keyring(self, unlocked_controller):
        keyring = unlocked_controller.keyrings[0]

        record = await unlocked_controller.display_for_keyring(keyring)

        assert record.type == "HD Key Tree"
        assert record.accounts == await keyring.get_accounts()
