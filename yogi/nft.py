from typing import Any, Dict, List, Optional

from eth_typing import ChecksumAddress

from yogi.access import Ownership
from yogi.constants import NFT_MAX_SUPPLY, NFT_MINT_PRICE
from yogi.errors import (
    InsufficientPayment,
    InvalidReceiver,
    NonexistentToken,
    NotApproved,
    SupplyExceeded,
)
from yogi.ledger import (
    ZERO_ADDRESS,
    Event,
    Ledger,
    require_amount,
    require_receiver,
    to_address,
    to_token_id,
    transaction,
    view,
)

MAX_SUPPLY_REACHED = "YogiNFTCollection: Max supply reached"
INSUFFICIENT_PAYMENT = "YogiNFTCollection: Insufficient payment"
NOTHING_TO_WITHDRAW = "YogiNFTCollection: No funds to withdraw"
INVALID_TOKEN_ID = "ERC721: invalid token ID"
NOT_OWNER_OR_APPROVED = "ERC721: caller is not token owner or approved"
TRANSFER_FROM_INCORRECT_OWNER = "ERC721: transfer from incorrect owner"
TRANSFER_TO_ZERO = "ERC721: transfer to the zero address"
MINT_TO_ZERO = "ERC721: mint to the zero address"
APPROVAL_TO_OWNER = "ERC721: approval to current owner"
APPROVE_TO_CALLER = "ERC721: approve to caller"


class YogiNFTCollection(Ledger):
    """
    Capped NFT collection with per-token URI storage.

    The owner mints for free with `safe_mint`; anyone can `public_mint` by attaching
    at least `mint_price` wei, which accumulates until the owner withdraws it.
    """

    NAME = "Yogi NFT Collection"
    SYMBOL = "YOGINFT"
    MAX_SUPPLY = NFT_MAX_SUPPLY

    def __init__(self, *, sender: Any, address: Optional[str] = None):
        super().__init__(address=address)
        creator = to_address(sender)
        self._reset(owner=creator, mint_price=NFT_MINT_PRICE)
        self._events.append(
            Event("OwnershipTransferred", {"previousOwner": ZERO_ADDRESS, "newOwner": creator})
        )

    def _reset(self, owner: Any, mint_price: int) -> None:
        self._ownership = Ownership(owner)
        self._mint_price = mint_price
        self._base_uri = ""
        self._next_token_id = 0
        self._owners: Dict[int, ChecksumAddress] = dict()
        self._token_uris: Dict[int, str] = dict()
        self._token_approvals: Dict[int, ChecksumAddress] = dict()
        self._operators: Dict[ChecksumAddress, set] = dict()
        self._funds = 0

    @property
    def owner(self) -> ChecksumAddress:
        with self._lock:
            return self._ownership.owner

    @property
    def mint_price(self) -> int:
        with self._lock:
            return self._mint_price

    @property
    def base_uri(self) -> str:
        with self._lock:
            return self._base_uri

    @property
    def funds(self) -> int:
        """Wei collected from public mints and not yet withdrawn."""
        with self._lock:
            return self._funds

    def _owner_of(self, token_id: int) -> ChecksumAddress:
        try:
            return self._owners[to_token_id(token_id)]
        except KeyError:
            raise NonexistentToken(INVALID_TOKEN_ID)

    def _is_approved_or_owner(self, spender: ChecksumAddress, token_id: int) -> bool:
        holder = self._owner_of(token_id)
        return (
            spender == holder
            or self._token_approvals.get(token_id) == spender
            or spender in self._operators.get(holder, ())
        )

    def _mint(self, to: Any, token_uri: str) -> List[Event]:
        to = require_receiver(to, MINT_TO_ZERO)
        if self._next_token_id >= self.MAX_SUPPLY:
            raise SupplyExceeded(MAX_SUPPLY_REACHED)
        token_id = self._next_token_id
        self._next_token_id += 1
        self._owners[token_id] = to
        events = [Event("Transfer", {"from": ZERO_ADDRESS, "to": to, "tokenId": token_id})]
        if token_uri:
            self._token_uris[token_id] = str(token_uri)
            events.append(Event("MetadataUpdate", {"tokenId": token_id}))
        return events

    #
    # Minting
    #

    @transaction
    def safe_mint(self, to: Any, token_uri: str, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        return self._mint(to, token_uri)

    @transaction
    def public_mint(
        self, token_uri: str, *, sender: ChecksumAddress, value: int = 0
    ) -> List[Event]:
        value = require_amount(value)
        if value < self._mint_price:
            raise InsufficientPayment(INSUFFICIENT_PAYMENT)
        events = self._mint(sender, token_uri)
        self._funds += value
        return events

    @transaction
    def set_mint_price(self, new_price: int, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        self._mint_price = require_amount(new_price)
        return list()

    @transaction
    def withdraw(self, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        if not self._funds:
            raise InsufficientPayment(NOTHING_TO_WITHDRAW)
        amount, self._funds = self._funds, 0
        return [Event("Withdrawal", {"to": sender, "value": amount})]

    @view
    def total_supply(self) -> int:
        return self._next_token_id

    #
    # Metadata
    #

    @transaction
    def set_base_uri(self, base_uri: str, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        self._base_uri = str(base_uri)
        if not self._next_token_id:
            return list()
        args = {"fromTokenId": 0, "toTokenId": self._next_token_id - 1}
        return [Event("BatchMetadataUpdate", args)]

    @view
    def token_uri(self, token_id: int) -> str:
        token_id = to_token_id(token_id)
        self._owner_of(token_id)
        stored = self._token_uris.get(token_id, "")
        if not self._base_uri:
            return stored
        if stored:
            return f"{self._base_uri}{stored}"
        return f"{self._base_uri}{token_id}"

    #
    # ERC-721 ownership and transfers
    #

    @view
    def owner_of(self, token_id: int) -> ChecksumAddress:
        return self._owner_of(token_id)

    @view
    def balance_of(self, account: Any) -> int:
        account = to_address(account)
        if account == ZERO_ADDRESS:
            raise InvalidReceiver("ERC721: address zero is not a valid owner")
        return sum(1 for holder in self._owners.values() if holder == account)

    @view
    def tokens_of(self, account: Any) -> List[int]:
        account = to_address(account)
        return sorted(t for t, holder in self._owners.items() if holder == account)

    @transaction
    def approve(self, to: Any, token_id: int, *, sender: ChecksumAddress) -> List[Event]:
        to = to_address(to)
        token_id = to_token_id(token_id)
        holder = self._owner_of(token_id)
        if to == holder:
            raise NotApproved(APPROVAL_TO_OWNER)
        if sender != holder and sender not in self._operators.get(holder, ()):
            raise NotApproved("ERC721: approve caller is not token owner or approved for all")
        self._token_approvals[token_id] = to
        return [Event("Approval", {"owner": holder, "approved": to, "tokenId": token_id})]

    @view
    def get_approved(self, token_id: int) -> ChecksumAddress:
        token_id = to_token_id(token_id)
        self._owner_of(token_id)
        return self._token_approvals.get(token_id, ZERO_ADDRESS)

    @transaction
    def set_approval_for_all(
        self, operator: Any, approved: bool, *, sender: ChecksumAddress
    ) -> List[Event]:
        operator = to_address(operator)
        if operator == sender:
            raise NotApproved(APPROVE_TO_CALLER)
        operators = self._operators.setdefault(sender, set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)
        args = {"owner": sender, "operator": operator, "approved": bool(approved)}
        return [Event("ApprovalForAll", args)]

    @view
    def is_approved_for_all(self, owner: Any, operator: Any) -> bool:
        return to_address(operator) in self._operators.get(to_address(owner), ())

    @transaction
    def transfer_from(
        self, from_: Any, to: Any, token_id: int, *, sender: ChecksumAddress
    ) -> List[Event]:
        from_ = to_address(from_)
        token_id = to_token_id(token_id)
        if not self._is_approved_or_owner(sender, token_id):
            raise NotApproved(NOT_OWNER_OR_APPROVED)
        if self._owners[token_id] != from_:
            raise NotApproved(TRANSFER_FROM_INCORRECT_OWNER)
        to = require_receiver(to, TRANSFER_TO_ZERO)
        self._token_approvals.pop(token_id, None)
        self._owners[token_id] = to
        return [Event("Transfer", {"from": from_, "to": to, "tokenId": token_id})]

    safe_transfer_from = transfer_from

    #
    # Ownership
    #

    @transaction
    def transfer_ownership(self, new_owner: Any, *, sender: ChecksumAddress) -> List[Event]:
        return self._ownership.transfer(new_owner, sender)

    @transaction
    def renounce_ownership(self, *, sender: ChecksumAddress) -> List[Event]:
        return self._ownership.renounce(sender)

    #
    # Persistence
    #

    @view
    def to_state(self) -> Dict[str, Any]:
        return {
            "owner": self._ownership.owner,
            "mint_price": self._mint_price,
            "base_uri": self._base_uri,
            "next_token_id": self._next_token_id,
            "owners": {str(t): holder for t, holder in sorted(self._owners.items())},
            "token_uris": {str(t): uri for t, uri in sorted(self._token_uris.items())},
            "token_approvals": {
                str(t): approved for t, approved in sorted(self._token_approvals.items())
            },
            "operators": {
                account: sorted(operators)
                for account, operators in sorted(self._operators.items())
                if operators
            },
            "funds": self._funds,
        }

    @classmethod
    def from_state(
        cls, state: Dict[str, Any], address: Optional[str] = None
    ) -> "YogiNFTCollection":
        instance = cls.__new__(cls)
        Ledger.__init__(instance, address=address)
        instance._reset(owner=state["owner"], mint_price=int(state["mint_price"]))
        instance._base_uri = state.get("base_uri", "")
        instance._next_token_id = int(state["next_token_id"])
        instance._owners = {int(t): to_address(h) for t, h in state["owners"].items()}
        instance._token_uris = {int(t): uri for t, uri in state.get("token_uris", {}).items()}
        instance._token_approvals = {
            int(t): to_address(a) for t, a in state.get("token_approvals", {}).items()
        }
        instance._operators = {
            to_address(account): {to_address(o) for o in operators}
            for account, operators in state.get("operators", {}).items()
        }
        instance._funds = int(state.get("funds", 0))
        if instance._next_token_id > cls.MAX_SUPPLY:
            raise ValueError("Minted tokens exceed the max supply")
        return instance
