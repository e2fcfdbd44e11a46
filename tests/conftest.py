"""
Shared fixtures for keyring controller tests.

Provides the reference mnemonics, external key material, a fast vault
encryptor and ready-made controllers.
"""

import pytest
import pytest_asyncio

from eth_keyring.config import EncryptorConfig
from eth_keyring.controller import KeyringController
from eth_keyring.vault import MemoryVaultStorage, PasswordEncryptor


HD_WALLET_12_MNEMONIC = "affair entry detect broom axis crawl found valve bamboo taste broken hundred"
HD_WALLET_12_MNEMONIC_OTHER = "orange lecture tiger surround narrow much novel arrange sample balance weapon bacon"
PASSWORD = "random_password"

EXTERNAL_ACCOUNT_PRIVATE_KEY = "0xbcb7a8680126610ca94440b020280f9ef82194a4dc2760653073b5f5b150c9c3"
EXTERNAL_ACCOUNT_ADDRESS = "0x9E1447ea3F6abA7a5D344B360B95Fd9BAE049448"
EXTERNAL_ACCOUNT_WRONG_PRIVATE_KEYS = [
    "random_private_key",
    "0xbcb7a8680126610ca94440b020280f9ef829ad26637bfb5cc",
    "QUWL7cmUp9Cj9DF3gLFqqSipopXyzuF4QXmDNV3ZTZ28GB6Ug98Z",
]


@pytest.fixture
def mnemonic():
    """Reference 12-word mnemonic."""
    return HD_WALLET_12_MNEMONIC


@pytest.fixture
def other_mnemonic():
    """Second 12-word mnemonic with disjoint accounts."""
    return HD_WALLET_12_MNEMONIC_OTHER


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def external_account():
    """Private key and its expected address."""
    return {
        "private_key": EXTERNAL_ACCOUNT_PRIVATE_KEY,
        "address": EXTERNAL_ACCOUNT_ADDRESS,
    }


@pytest.fixture
def wrong_private_keys():
    return list(EXTERNAL_ACCOUNT_WRONG_PRIVATE_KEYS)


@pytest.fixture
def fast_encryptor():
    """Encryptor with a low KDF cost so tests stay quick."""
    return PasswordEncryptor(EncryptorConfig(kdf_iterations=1_000))


@pytest.fixture
def storage():
    return MemoryVaultStorage()


@pytest.fixture
def controller(fast_encryptor, storage):
    """Locked controller with no vault."""
    return KeyringController(encryptor=fast_encryptor, storage=storage)


@pytest_asyncio.fixture
async def unlocked_controller(controller):
    """Controller restored from the reference mnemonic."""
    await controller.create_new_vault_and_restore(PASSWORD, HD_WALLET_12_MNEMONIC)
    return controller
