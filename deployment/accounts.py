import os
from typing import List, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from deployment.constants import (
    DEPLOYER_PRIVATE_KEY_ENVVAR,
    LOCAL_CHAIN_IDS,
    NUMBER_OF_TEST_ACCOUNTS,
    TEST_ACCOUNTS_PATH,
    TEST_MNEMONIC,
)

Account.enable_unaudited_hdwallet_features()


def derive_test_accounts(count: int = NUMBER_OF_TEST_ACCOUNTS) -> List[LocalAccount]:
    """Derives the deterministic development accounts from the test mnemonic."""
    return [
        Account.from_mnemonic(TEST_MNEMONIC, account_path=TEST_ACCOUNTS_PATH.format(i))
        for i in range(count)
    ]


def get_account(chain_id: int, account_index: Optional[int] = None) -> LocalAccount:
    """
    Returns the account to transact with.

    A private key in the environment always wins. Otherwise, local chains fall back
    to a test account; any other chain requires the private key.
    """
    private_key = os.environ.get(DEPLOYER_PRIVATE_KEY_ENVVAR)
    if private_key:
        return Account.from_key(private_key)
    if chain_id not in LOCAL_CHAIN_IDS:
        raise ValueError(
            f"{DEPLOYER_PRIVATE_KEY_ENVVAR} must be set when transacting on chain {chain_id}"
        )
    account_index = account_index or 0
    return derive_test_accounts(count=account_index + 1)[account_index]
