from collections import Counter
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from eth_typing import ChecksumAddress

from yogi.access import Ownership
from yogi.constants import PREDEFINED_TOKEN_TYPES, RESERVED_TOKEN_IDS
from yogi.errors import (
    AlreadyExists,
    InsufficientBalance,
    InvalidAmount,
    LengthMismatch,
    NotApproved,
    ReservedIdentifier,
    SupplyExceeded,
    UnknownTokenType,
)
from yogi.ledger import (
    ZERO_ADDRESS,
    Event,
    Ledger,
    require_amount,
    require_receiver,
    to_address,
    to_integer,
    to_token_id,
    transaction,
    view,
)

RESERVED_ID = "YogiMultiToken: ID reserved for predefined token types"
TYPE_EXISTS = "YogiMultiToken: Token type already exists"
TYPE_MISSING = "YogiMultiToken: Token type does not exist"
MAX_SUPPLY_EXCEEDED = "YogiMultiToken: Max supply exceeded"
ZERO_MAX_SUPPLY = "YogiMultiToken: Max supply must be positive"
NEGATIVE_ID = "YogiMultiToken: Token ID must be non-negative"
LENGTH_MISMATCH = "ERC1155: ids and amounts length mismatch"
ACCOUNTS_LENGTH_MISMATCH = "ERC1155: accounts and ids length mismatch"
INSUFFICIENT_BALANCE = "ERC1155: insufficient balance for transfer"
BURN_EXCEEDS_BALANCE = "ERC1155: burn amount exceeds balance"
NOT_APPROVED = "ERC1155: caller is not token owner or approved"
MINT_TO_ZERO = "ERC1155: mint to the zero address"
TRANSFER_TO_ZERO = "ERC1155: transfer to the zero address"
SELF_APPROVAL = "ERC1155: setting approval status for self"

Pairs = List[Tuple[int, int]]


class TokenType(NamedTuple):
    token_id: int
    name: str
    max_supply: int


class YogiMultiToken(Ledger):
    """
    Multi-token registry.

    Tracks, per token-type id, a name, an immutable max supply, the running minted
    total and per-holder balances. Ids 0..5 are predefined at construction and the
    creator receives their initial allocation; custom ids are registered by the owner.

    Batch operations are all-or-nothing: every pair is validated against the
    current state before any balance is touched.
    """

    NAME = "Yogi Multi Token Collection"
    SYMBOL = "YOGIMT"
    CONSTRUCTOR_INPUTS = (("base_uri", "string"),)

    def __init__(self, base_uri: str, *, sender: Any, address: Optional[str] = None):
        super().__init__(address=address)
        creator = to_address(sender)
        self._reset(owner=creator, base_uri=base_uri)
        self._events.append(
            Event("OwnershipTransferred", {"previousOwner": ZERO_ADDRESS, "newOwner": creator})
        )

        ids, amounts = list(), list()
        for predefined in PREDEFINED_TOKEN_TYPES:
            self._events.extend(
                self._create(predefined.token_id, predefined.name, predefined.max_supply)
            )
            if predefined.initial_supply:
                ids.append(predefined.token_id)
                amounts.append(predefined.initial_supply)

        pairs = self._check_mint(ids, amounts)
        self._events.extend(self._mint(creator, pairs, operator=creator, batch=True))

    def _reset(self, owner: Any, base_uri: str) -> None:
        self._ownership = Ownership(owner)
        self._base_uri = str(base_uri)
        self._token_types: Dict[int, TokenType] = dict()
        self._minted: Dict[int, int] = dict()
        self._total_supply: Dict[int, int] = dict()
        self._balances: Dict[int, Dict[ChecksumAddress, int]] = dict()
        self._token_uris: Dict[int, str] = dict()
        self._operators: Dict[ChecksumAddress, set] = dict()

    #
    # Validation (nothing below mutates state)
    #

    def _token_type(self, token_id: int) -> TokenType:
        try:
            return self._token_types[to_token_id(token_id)]
        except KeyError:
            raise UnknownTokenType(TYPE_MISSING)

    def _pairs(self, ids: Sequence[int], amounts: Sequence[int]) -> Pairs:
        if len(ids) != len(amounts):
            raise LengthMismatch(LENGTH_MISMATCH)
        pairs = list()
        for token_id, amount in zip(ids, amounts):
            token_type = self._token_type(token_id)
            pairs.append((token_type.token_id, require_amount(amount)))
        return pairs

    def _check_mint(self, ids: Sequence[int], amounts: Sequence[int]) -> Pairs:
        pairs = self._pairs(ids, amounts)
        pending = Counter()
        for token_id, amount in pairs:
            pending[token_id] += amount
            if self._minted[token_id] + pending[token_id] > self._token_types[token_id].max_supply:
                raise SupplyExceeded(MAX_SUPPLY_EXCEEDED)
        return pairs

    def _check_debit(
        self, holder: ChecksumAddress, ids: Sequence[int], amounts: Sequence[int], message: str
    ) -> Pairs:
        pairs = self._pairs(ids, amounts)
        pending = Counter()
        for token_id, amount in pairs:
            pending[token_id] += amount
            if self._balance(holder, token_id) < pending[token_id]:
                raise InsufficientBalance(message)
        return pairs

    def _check_operator(self, holder: ChecksumAddress, sender: ChecksumAddress) -> None:
        if holder != sender and sender not in self._operators.get(holder, ()):
            raise NotApproved(NOT_APPROVED)

    def _balance(self, holder: ChecksumAddress, token_id: int) -> int:
        return self._balances.get(token_id, {}).get(holder, 0)

    #
    # State changes (callers validate first)
    #

    def _create(self, token_id: int, name: str, max_supply: int) -> List[Event]:
        self._token_types[token_id] = TokenType(token_id, name, max_supply)
        self._minted[token_id] = 0
        self._total_supply[token_id] = 0
        return [
            Event("TokenTypeCreated", {"id": token_id, "name": name, "maxSupply": max_supply})
        ]

    def _credit(self, holder: ChecksumAddress, token_id: int, amount: int) -> None:
        if amount:
            balances = self._balances.setdefault(token_id, dict())
            balances[holder] = balances.get(holder, 0) + amount

    def _debit(self, holder: ChecksumAddress, token_id: int, amount: int) -> None:
        balances = self._balances.setdefault(token_id, dict())
        remaining = balances.get(holder, 0) - amount
        if remaining:
            balances[holder] = remaining
        else:
            balances.pop(holder, None)

    def _transfer_event(
        self,
        operator: ChecksumAddress,
        from_: ChecksumAddress,
        to: ChecksumAddress,
        pairs: Pairs,
        batch: bool,
    ) -> Event:
        if not batch:
            (token_id, amount), = pairs
            args = {"operator": operator, "from": from_, "to": to, "id": token_id, "value": amount}
            return Event("TransferSingle", args)
        args = {
            "operator": operator,
            "from": from_,
            "to": to,
            "ids": [token_id for token_id, _ in pairs],
            "values": [amount for _, amount in pairs],
        }
        return Event("TransferBatch", args)

    def _mint(
        self, to: ChecksumAddress, pairs: Pairs, operator: ChecksumAddress, batch: bool
    ) -> List[Event]:
        for token_id, amount in pairs:
            self._minted[token_id] += amount
            self._total_supply[token_id] += amount
            self._credit(to, token_id, amount)
        return [self._transfer_event(operator, ZERO_ADDRESS, to, pairs, batch)]

    def _move(
        self,
        from_: ChecksumAddress,
        to: ChecksumAddress,
        pairs: Pairs,
        operator: ChecksumAddress,
        batch: bool,
    ) -> List[Event]:
        for token_id, amount in pairs:
            self._debit(from_, token_id, amount)
            self._credit(to, token_id, amount)
        return [self._transfer_event(operator, from_, to, pairs, batch)]

    def _burn(
        self, holder: ChecksumAddress, pairs: Pairs, operator: ChecksumAddress, batch: bool
    ) -> List[Event]:
        for token_id, amount in pairs:
            self._debit(holder, token_id, amount)
            self._total_supply[token_id] -= amount
        return [self._transfer_event(operator, holder, ZERO_ADDRESS, pairs, batch)]

    #
    # Token types
    #

    @transaction
    def register_token_type(
        self, token_id: int, name: str, max_supply: int, *, sender: ChecksumAddress
    ) -> List[Event]:
        self._ownership.check(sender)
        token_id = to_token_id(token_id)
        if token_id in RESERVED_TOKEN_IDS:
            raise ReservedIdentifier(RESERVED_ID)
        if token_id in self._token_types:
            raise AlreadyExists(TYPE_EXISTS)
        if token_id < 0:
            raise InvalidAmount(NEGATIVE_ID)
        max_supply = to_integer(max_supply, what="Max supply")
        if max_supply <= 0:
            raise InvalidAmount(ZERO_MAX_SUPPLY)
        return self._create(token_id, str(name), max_supply)

    create_token_type = register_token_type

    @view
    def token_type(self, token_id: int) -> TokenType:
        return self._token_type(token_id)

    @view
    def token_ids(self) -> List[int]:
        return sorted(self._token_types)

    @view
    def exists(self, token_id: int) -> bool:
        return to_token_id(token_id) in self._token_types

    @view
    def max_supply(self, token_id: int) -> int:
        """Max supply of a token type; 0 for unregistered ids."""
        token_type = self._token_types.get(to_token_id(token_id))
        return token_type.max_supply if token_type else 0

    @view
    def token_names(self, token_id: int) -> str:
        """Name of a token type; empty for unregistered ids."""
        token_type = self._token_types.get(to_token_id(token_id))
        return token_type.name if token_type else ""

    @view
    def minted_total(self, token_id: int) -> int:
        return self._minted.get(to_token_id(token_id), 0)

    @view
    def total_supply(self, token_id: int) -> int:
        """Units in circulation (minted minus burned)."""
        return self._total_supply.get(to_token_id(token_id), 0)

    #
    # Minting and burning
    #

    @transaction
    def mint(self, to: Any, token_id: int, amount: int, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        to = require_receiver(to, MINT_TO_ZERO)
        pairs = self._check_mint([token_id], [amount])
        return self._mint(to, pairs, operator=sender, batch=False)

    @transaction
    def mint_batch(
        self, to: Any, ids: Sequence[int], amounts: Sequence[int], *, sender: ChecksumAddress
    ) -> List[Event]:
        self._ownership.check(sender)
        to = require_receiver(to, MINT_TO_ZERO)
        pairs = self._check_mint(ids, amounts)
        return self._mint(to, pairs, operator=sender, batch=True)

    @transaction
    def burn(
        self, account: Any, token_id: int, amount: int, *, sender: ChecksumAddress
    ) -> List[Event]:
        account = to_address(account)
        self._check_operator(account, sender)
        pairs = self._check_debit(account, [token_id], [amount], BURN_EXCEEDS_BALANCE)
        return self._burn(account, pairs, operator=sender, batch=False)

    @transaction
    def burn_batch(
        self, account: Any, ids: Sequence[int], amounts: Sequence[int], *, sender: ChecksumAddress
    ) -> List[Event]:
        account = to_address(account)
        self._check_operator(account, sender)
        pairs = self._check_debit(account, ids, amounts, BURN_EXCEEDS_BALANCE)
        return self._burn(account, pairs, operator=sender, batch=True)

    #
    # Transfers
    #

    @transaction
    def safe_transfer_from(
        self, from_: Any, to: Any, token_id: int, amount: int, *, sender: ChecksumAddress
    ) -> List[Event]:
        return self._transfer(from_, to, [token_id], [amount], sender, batch=False)

    @transaction
    def safe_batch_transfer_from(
        self,
        from_: Any,
        to: Any,
        ids: Sequence[int],
        amounts: Sequence[int],
        *,
        sender: ChecksumAddress,
    ) -> List[Event]:
        return self._transfer(from_, to, ids, amounts, sender, batch=True)

    @transaction
    def batch_transfer_demo(
        self,
        from_: Any,
        to: Any,
        ids: Sequence[int],
        amounts: Sequence[int],
        *,
        sender: ChecksumAddress,
    ) -> List[Event]:
        return self._transfer(from_, to, ids, amounts, sender, batch=True)

    def _transfer(
        self,
        from_: Any,
        to: Any,
        ids: Sequence[int],
        amounts: Sequence[int],
        sender: ChecksumAddress,
        batch: bool,
    ) -> List[Event]:
        from_ = to_address(from_)
        to = require_receiver(to, TRANSFER_TO_ZERO)
        self._check_operator(from_, sender)
        pairs = self._check_debit(from_, ids, amounts, INSUFFICIENT_BALANCE)
        return self._move(from_, to, pairs, operator=sender, batch=batch)

    @transaction
    def set_approval_for_all(
        self, operator: Any, approved: bool, *, sender: ChecksumAddress
    ) -> List[Event]:
        operator = to_address(operator)
        if operator == sender:
            raise NotApproved(SELF_APPROVAL)
        operators = self._operators.setdefault(sender, set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)
        args = {"account": sender, "operator": operator, "approved": bool(approved)}
        return [Event("ApprovalForAll", args)]

    @view
    def is_approved_for_all(self, account: Any, operator: Any) -> bool:
        return to_address(operator) in self._operators.get(to_address(account), ())

    @view
    def balance_of(self, account: Any, token_id: int) -> int:
        return self._balance(to_address(account), to_token_id(token_id))

    @view
    def balance_of_batch(self, accounts: Sequence[Any], ids: Sequence[int]) -> List[int]:
        if len(accounts) != len(ids):
            raise LengthMismatch(ACCOUNTS_LENGTH_MISMATCH)
        return [self._balance(to_address(a), to_token_id(i)) for a, i in zip(accounts, ids)]

    @view
    def holders(self, token_id: int) -> Dict[ChecksumAddress, int]:
        return dict(self._balances.get(to_token_id(token_id), {}))

    #
    # Metadata
    #

    @transaction
    def set_token_uri(self, token_id: int, uri: str, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        token_id = to_token_id(token_id)
        self._token_uris[token_id] = str(uri)
        return [Event("URI", {"value": str(uri), "id": token_id})]

    @transaction
    def set_base_uri(self, new_uri: str, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        self._base_uri = str(new_uri)
        return list()

    @view
    def uri(self, token_id: int) -> str:
        token_id = to_token_id(token_id)
        override = self._token_uris.get(token_id)
        if override is not None:
            return override
        return f"{self._base_uri}{token_id}"

    @property
    def base_uri(self) -> str:
        with self._lock:
            return self._base_uri

    #
    # Ownership
    #

    @property
    def owner(self) -> ChecksumAddress:
        with self._lock:
            return self._ownership.owner

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
            "base_uri": self._base_uri,
            "token_types": {
                str(token_id): {
                    "name": token_type.name,
                    "max_supply": token_type.max_supply,
                    "minted_total": self._minted[token_id],
                    "total_supply": self._total_supply[token_id],
                }
                for token_id, token_type in sorted(self._token_types.items())
            },
            "balances": {
                str(token_id): dict(sorted(balances.items()))
                for token_id, balances in sorted(self._balances.items())
                if balances
            },
            "token_uris": {
                str(token_id): uri for token_id, uri in sorted(self._token_uris.items())
            },
            "operators": {
                account: sorted(operators)
                for account, operators in sorted(self._operators.items())
                if operators
            },
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any], address: Optional[str] = None) -> "YogiMultiToken":
        instance = cls.__new__(cls)
        Ledger.__init__(instance, address=address)
        instance._reset(owner=state["owner"], base_uri=state["base_uri"])
        for token_id, info in state["token_types"].items():
            token_id = int(token_id)
            instance._create(token_id, info["name"], int(info["max_supply"]))
            instance._minted[token_id] = int(info["minted_total"])
            instance._total_supply[token_id] = int(info.get("total_supply", info["minted_total"]))
        for token_id, balances in state.get("balances", {}).items():
            for holder, amount in balances.items():
                instance._credit(to_address(holder), int(token_id), int(amount))
        for token_id, uri in state.get("token_uris", {}).items():
            instance._token_uris[int(token_id)] = uri
        for account, operators in state.get("operators", {}).items():
            instance._operators[to_address(account)] = {to_address(o) for o in operators}
        instance._check_state()
        return instance

    def _check_state(self) -> None:
        for token_id, balances in self._balances.items():
            if any(amount < 0 for amount in balances.values()):
                raise ValueError(f"Negative balance recorded for token type {token_id}")
        for token_id, token_type in self._token_types.items():
            circulating = sum(self._balances.get(token_id, {}).values())
            if circulating != self._total_supply[token_id]:
                raise ValueError(f"Balances of token type {token_id} do not add up to its supply")
            supply, minted = self._total_supply[token_id], self._minted[token_id]
            if not 0 <= supply <= minted <= token_type.max_supply:
                raise ValueError(f"Supply counters of token type {token_id} are out of bounds")

