import pytest
from web3 import Web3

from yogi import SupplyExceeded, Unauthorized, YogiNFTCollection
from yogi.errors import InsufficientPayment, InvalidReceiver, NonexistentToken, NotApproved
from yogi.ledger import ZERO_ADDRESS

MINT_PRICE = Web3.to_wei(0.01, "ether")


def test_deployment(yogi_nft, creator):
    assert yogi_nft.owner == creator.address
    assert yogi_nft.name == "Yogi NFT Collection"
    assert yogi_nft.symbol == "YOGINFT"
    assert yogi_nft.MAX_SUPPLY == 1000
    assert yogi_nft.mint_price == MINT_PRICE
    assert yogi_nft.total_supply() == 0


def test_safe_mint(yogi_nft, creator, account1):
    receipt = yogi_nft.safe_mint(account1, "ipfs://QmTest/1.json", sender=creator)
    (event,) = receipt.events_named("Transfer")
    assert event.args == {"from": ZERO_ADDRESS, "to": account1.address, "tokenId": 0}
    assert yogi_nft.balance_of(account1) == 1
    assert yogi_nft.owner_of(0) == account1.address
    assert yogi_nft.token_uri(0) == "ipfs://QmTest/1.json"
    assert yogi_nft.tokens_of(account1) == [0]

    with pytest.raises(Unauthorized, match="Ownable: caller is not the owner"):
        yogi_nft.safe_mint(account1, "ipfs://QmTest/2.json", sender=account1)
    with pytest.raises(InvalidReceiver):
        yogi_nft.safe_mint(ZERO_ADDRESS, "ipfs://QmTest/2.json", sender=creator)
    assert yogi_nft.total_supply() == 1


def test_public_mint(yogi_nft, creator, account1):
    yogi_nft.public_mint("ipfs://QmTest/2.json", sender=account1, value=yogi_nft.mint_price)
    assert yogi_nft.balance_of(account1) == 1
    assert yogi_nft.owner_of(0) == account1.address
    assert yogi_nft.token_uri(0) == "ipfs://QmTest/2.json"
    assert yogi_nft.funds == MINT_PRICE

    with pytest.raises(InsufficientPayment, match="YogiNFTCollection: Insufficient payment"):
        yogi_nft.public_mint("ipfs://QmTest/3.json", sender=account1, value=0)
    assert yogi_nft.total_supply() == 1
    assert yogi_nft.funds == MINT_PRICE

    # Owner reprices
    with pytest.raises(Unauthorized):
        yogi_nft.set_mint_price(0, sender=account1)
    yogi_nft.set_mint_price(0, sender=creator)
    yogi_nft.public_mint("ipfs://QmTest/3.json", sender=account1)
    assert yogi_nft.balance_of(account1) == 2


def test_max_supply(creator, account1):
    yogi_nft = YogiNFTCollection(sender=creator)
    for _ in range(yogi_nft.MAX_SUPPLY):
        yogi_nft.safe_mint(account1, "", sender=creator)
    assert yogi_nft.total_supply() == 1000

    with pytest.raises(SupplyExceeded, match="YogiNFTCollection: Max supply reached"):
        yogi_nft.safe_mint(account1, "", sender=creator)
    with pytest.raises(SupplyExceeded):
        yogi_nft.public_mint("", sender=account1, value=MINT_PRICE)
    assert yogi_nft.funds == 0


def test_token_uri(yogi_nft, creator, account1):
    yogi_nft.safe_mint(account1, "1.json", sender=creator)
    yogi_nft.safe_mint(account1, "", sender=creator)

    # No base: stored URI only
    assert yogi_nft.token_uri(0) == "1.json"
    assert yogi_nft.token_uri(1) == ""

    receipt = yogi_nft.set_base_uri("https://ipfs.io/ipfs/QmYogi/", sender=creator)
    (event,) = receipt.events_named("BatchMetadataUpdate")
    assert event.args == {"fromTokenId": 0, "toTokenId": 1}
    assert yogi_nft.base_uri == "https://ipfs.io/ipfs/QmYogi/"
    assert yogi_nft.token_uri(0) == "https://ipfs.io/ipfs/QmYogi/1.json"
    assert yogi_nft.token_uri(1) == "https://ipfs.io/ipfs/QmYogi/1"

    with pytest.raises(Unauthorized):
        yogi_nft.set_base_uri("https://evil.example/", sender=account1)
    with pytest.raises(NonexistentToken):
        yogi_nft.token_uri(2)


def test_withdraw(yogi_nft, creator, account1):
    with pytest.raises(Unauthorized, match="Ownable: caller is not the owner"):
        yogi_nft.withdraw(sender=account1)
    with pytest.raises(InsufficientPayment):
        yogi_nft.withdraw(sender=creator)

    yogi_nft.public_mint("a.json", sender=account1, value=MINT_PRICE)
    yogi_nft.public_mint("b.json", sender=account1, value=2 * MINT_PRICE)
    receipt = yogi_nft.withdraw(sender=creator)
    (event,) = receipt.events_named("Withdrawal")
    assert event.args == {"to": creator.address, "value": 3 * MINT_PRICE}
    assert yogi_nft.funds == 0


def test_transfers_and_approvals(yogi_nft, creator, account1, account2):
    yogi_nft.safe_mint(account1, "1.json", sender=creator)

    with pytest.raises(NotApproved):
        yogi_nft.transfer_from(account1, account2, 0, sender=account2)

    yogi_nft.approve(account2, 0, sender=account1)
    assert yogi_nft.get_approved(0) == account2.address
    yogi_nft.transfer_from(account1, account2, 0, sender=account2)
    assert yogi_nft.owner_of(0) == account2.address
    # Approval is cleared on transfer
    assert yogi_nft.get_approved(0) == ZERO_ADDRESS

    yogi_nft.set_approval_for_all(account1, True, sender=account2)
    assert yogi_nft.is_approved_for_all(account2, account1)
    yogi_nft.safe_transfer_from(account2, account1, 0, sender=account1)
    assert yogi_nft.owner_of(0) == account1.address
    assert yogi_nft.balance_of(account2) == 0

    with pytest.raises(NotApproved, match="transfer from incorrect owner"):
        yogi_nft.transfer_from(account2, creator, 0, sender=account1)
    with pytest.raises(NonexistentToken):
        yogi_nft.owner_of(5)


def test_state_roundtrip(yogi_nft, creator, account1, account2):
    yogi_nft.set_base_uri("ipfs://yogi/", sender=creator)
    yogi_nft.safe_mint(creator, "1.json", sender=creator)
    yogi_nft.public_mint("2.json", sender=account1, value=MINT_PRICE)
    yogi_nft.approve(account2, 1, sender=account1)

    state = yogi_nft.to_state()
    restored = YogiNFTCollection.from_state(state)
    assert restored.to_state() == state
    assert restored.token_uri(1) == "ipfs://yogi/2.json"
    assert restored.get_approved(1) == account2.address
    assert restored.funds == MINT_PRICE

    # Sequential ids continue after a reload
    restored.safe_mint(account2, "3.json", sender=creator)
    assert restored.owner_of(2) == account2.address
