import pytest

from deployment.accounts import derive_test_accounts
from yogi import YogiMultiToken, YogiNFTCollection, YogiToken

BASE_URI = "https://api.example.com/tokens/"


# Fixtures
@pytest.fixture(scope="session")
def accounts():
    return derive_test_accounts(count=5)


@pytest.fixture
def creator(accounts):
    return accounts[0]


@pytest.fixture
def account1(accounts):
    return accounts[1]


@pytest.fixture
def account2(accounts):
    return accounts[2]


@pytest.fixture
def multi_token(creator):
    return YogiMultiToken(BASE_URI, sender=creator)


@pytest.fixture
def yogi_token(creator):
    return YogiToken(sender=creator)


@pytest.fixture
def yogi_nft(creator):
    return YogiNFTCollection(sender=creator)
