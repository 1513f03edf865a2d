from yogi.errors import (
    AlreadyExists,
    ContractLogicError,
    InsufficientBalance,
    LengthMismatch,
    ReservedIdentifier,
    SupplyExceeded,
    Unauthorized,
    UnknownTokenType,
)
from yogi.ledger import Event, Ledger, Receipt
from yogi.multi_token import TokenType, YogiMultiToken
from yogi.nft import YogiNFTCollection
from yogi.token import YogiToken

CONTRACTS = {
    contract.__name__: contract for contract in (YogiToken, YogiNFTCollection, YogiMultiToken)
}

__all__ = [
    "AlreadyExists",
    "CONTRACTS",
    "ContractLogicError",
    "Event",
    "InsufficientBalance",
    "LengthMismatch",
    "Ledger",
    "Receipt",
    "ReservedIdentifier",
    "SupplyExceeded",
    "TokenType",
    "Unauthorized",
    "UnknownTokenType",
    "YogiMultiToken",
    "YogiNFTCollection",
    "YogiToken",
]
