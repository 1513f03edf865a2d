class ContractLogicError(Exception):
    """Raised when a ledger call reverts. No state change is retained."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(ContractLogicError):
    """Caller lacks owner privilege for an owner-only operation."""


class ReservedIdentifier(ContractLogicError, ValueError):
    """Attempted registration of a predefined token type id."""


class AlreadyExists(ContractLogicError):
    """Attempted registration of an id that is already registered."""


class UnknownTokenType(ContractLogicError, LookupError):
    """Operation referenced an id with no registered token type."""


class SupplyExceeded(ContractLogicError):
    """Mint would push the minted total past the max supply."""


class InsufficientBalance(ContractLogicError):
    """Transfer or burn exceeds the holder's balance."""


class LengthMismatch(ContractLogicError, ValueError):
    """Batch operation's parallel arrays differ in length."""


class NotApproved(ContractLogicError):
    """Caller is neither the holder nor an approved operator."""


class InvalidReceiver(ContractLogicError, ValueError):
    """Tokens sent to (or minted for) the zero address."""


class InvalidAmount(ContractLogicError, ValueError):
    """Negative amount, or a non-positive max supply."""


class InsufficientAllowance(ContractLogicError):
    """Spender allowance is lower than the requested amount."""


class InsufficientPayment(ContractLogicError):
    """Attached value is lower than the mint price."""


class NonexistentToken(ContractLogicError, LookupError):
    """NFT token id has not been minted."""
