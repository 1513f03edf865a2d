from typing import Final, NamedTuple

from web3 import Web3


class PredefinedTokenType(NamedTuple):
    token_id: int
    name: str
    max_supply: int
    initial_supply: int
    metadata_filename: str


#
# YogiMultiToken
#

YOGI_COIN: Final[int] = 0
YOGI_COMMON: Final[int] = 1
YOGI_RARE: Final[int] = 2
YOGI_EPIC: Final[int] = 3
YOGI_LEGENDARY: Final[int] = 4
YOGI_UNIQUE: Final[int] = 5

# most- to least-common
PREDEFINED_TOKEN_TYPES: Final = (
    PredefinedTokenType(YOGI_COIN, "Yogi Coin", 1_000_000_000, 1_000_000, "yogi_coin.json"),
    PredefinedTokenType(YOGI_COMMON, "Yogi Common", 10_000, 10, "yogi_common.json"),
    PredefinedTokenType(YOGI_RARE, "Yogi Rare", 1_000, 5, "yogi_rare.json"),
    PredefinedTokenType(YOGI_EPIC, "Yogi Epic", 100, 2, "yogi_epic.json"),
    PredefinedTokenType(YOGI_LEGENDARY, "Yogi Legendary", 10, 1, "yogi_legendary.json"),
    PredefinedTokenType(YOGI_UNIQUE, "Yogi Unique", 1, 0, "yogi_unique.json"),
)

RESERVED_TOKEN_IDS: Final = frozenset(t.token_id for t in PREDEFINED_TOKEN_TYPES)

#
# YogiToken
#

TOKEN_DECIMALS: Final[int] = 18
TOKEN_INITIAL_SUPPLY: Final[int] = Web3.to_wei(100_000_000, "ether")
TOKEN_MAX_SUPPLY: Final[int] = Web3.to_wei(1_000_000_000, "ether")

#
# YogiNFTCollection
#

NFT_MAX_SUPPLY: Final[int] = 1000
NFT_MINT_PRICE: Final[int] = Web3.to_wei(0.01, "ether")
