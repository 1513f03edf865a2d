from typing import Any, Dict, List, Optional

from eth_typing import ChecksumAddress

from yogi.access import Ownership
from yogi.constants import TOKEN_DECIMALS, TOKEN_INITIAL_SUPPLY, TOKEN_MAX_SUPPLY
from yogi.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    SupplyExceeded,
)
from yogi.ledger import (
    ZERO_ADDRESS,
    Event,
    Ledger,
    require_amount,
    require_receiver,
    to_address,
    transaction,
    view,
)

MAX_SUPPLY_EXCEEDED = "YogiToken: Max supply exceeded"
TRANSFER_EXCEEDS_BALANCE = "ERC20: transfer amount exceeds balance"
BURN_EXCEEDS_BALANCE = "ERC20: burn amount exceeds balance"
INSUFFICIENT_ALLOWANCE = "ERC20: insufficient allowance"
ALLOWANCE_BELOW_ZERO = "ERC20: decreased allowance below zero"
TRANSFER_TO_ZERO = "ERC20: transfer to the zero address"
MINT_TO_ZERO = "ERC20: mint to the zero address"
APPROVE_TO_ZERO = "ERC20: approve to the zero address"


class YogiToken(Ledger):
    """Capped, burnable, owner-mintable fungible token."""

    NAME = "Yogi Token"
    SYMBOL = "YOGI"
    DECIMALS = TOKEN_DECIMALS
    MAX_SUPPLY = TOKEN_MAX_SUPPLY
    CONSTRUCTOR_INPUTS = (("initial_supply", "uint256"),)

    def __init__(
        self,
        initial_supply: int = TOKEN_INITIAL_SUPPLY,
        *,
        sender: Any,
        address: Optional[str] = None,
    ):
        super().__init__(address=address)
        creator = to_address(sender)
        self._ownership = Ownership(creator)
        self._balances: Dict[ChecksumAddress, int] = dict()
        self._allowances: Dict[ChecksumAddress, Dict[ChecksumAddress, int]] = dict()
        self._total_supply = 0
        self._events.append(
            Event("OwnershipTransferred", {"previousOwner": ZERO_ADDRESS, "newOwner": creator})
        )
        self._events.extend(self._mint(creator, require_amount(initial_supply)))

    @property
    def decimals(self) -> int:
        return self.DECIMALS

    @property
    def owner(self) -> ChecksumAddress:
        with self._lock:
            return self._ownership.owner

    @view
    def total_supply(self) -> int:
        return self._total_supply

    @view
    def balance_of(self, account: Any) -> int:
        return self._balances.get(to_address(account), 0)

    @view
    def allowance(self, owner: Any, spender: Any) -> int:
        return self._allowances.get(to_address(owner), {}).get(to_address(spender), 0)

    def _mint(self, to: ChecksumAddress, amount: int) -> List[Event]:
        if self._total_supply + amount > self.MAX_SUPPLY:
            raise SupplyExceeded(MAX_SUPPLY_EXCEEDED)
        self._total_supply += amount
        self._balances[to] = self._balances.get(to, 0) + amount
        return [Event("Transfer", {"from": ZERO_ADDRESS, "to": to, "value": amount})]

    def _burn(self, holder: ChecksumAddress, amount: int) -> List[Event]:
        if self._balances.get(holder, 0) < amount:
            raise InsufficientBalance(BURN_EXCEEDS_BALANCE)
        self._balances[holder] -= amount
        self._total_supply -= amount
        return [Event("Transfer", {"from": holder, "to": ZERO_ADDRESS, "value": amount})]

    def _move(self, from_: ChecksumAddress, to: ChecksumAddress, amount: int) -> List[Event]:
        if self._balances.get(from_, 0) < amount:
            raise InsufficientBalance(TRANSFER_EXCEEDS_BALANCE)
        self._balances[from_] -= amount
        self._balances[to] = self._balances.get(to, 0) + amount
        return [Event("Transfer", {"from": from_, "to": to, "value": amount})]

    def _approve(
        self, owner: ChecksumAddress, spender: ChecksumAddress, amount: int
    ) -> List[Event]:
        self._allowances.setdefault(owner, dict())[spender] = amount
        return [Event("Approval", {"owner": owner, "spender": spender, "value": amount})]

    def _spend_allowance(
        self, owner: ChecksumAddress, spender: ChecksumAddress, amount: int
    ) -> None:
        current = self._allowances.get(owner, {}).get(spender, 0)
        if current < amount:
            raise InsufficientAllowance(INSUFFICIENT_ALLOWANCE)
        self._allowances[owner][spender] = current - amount

    @transaction
    def transfer(self, to: Any, amount: int, *, sender: ChecksumAddress) -> List[Event]:
        to = require_receiver(to, TRANSFER_TO_ZERO)
        return self._move(sender, to, require_amount(amount))

    @transaction
    def approve(self, spender: Any, amount: int, *, sender: ChecksumAddress) -> List[Event]:
        spender = require_receiver(spender, APPROVE_TO_ZERO)
        return self._approve(sender, spender, require_amount(amount))

    @transaction
    def increase_allowance(
        self, spender: Any, added_value: int, *, sender: ChecksumAddress
    ) -> List[Event]:
        spender = require_receiver(spender, APPROVE_TO_ZERO)
        current = self._allowances.get(sender, {}).get(spender, 0)
        return self._approve(sender, spender, current + require_amount(added_value))

    @transaction
    def decrease_allowance(
        self, spender: Any, subtracted_value: int, *, sender: ChecksumAddress
    ) -> List[Event]:
        spender = require_receiver(spender, APPROVE_TO_ZERO)
        current = self._allowances.get(sender, {}).get(spender, 0)
        subtracted_value = require_amount(subtracted_value)
        if current < subtracted_value:
            raise InsufficientAllowance(ALLOWANCE_BELOW_ZERO)
        return self._approve(sender, spender, current - subtracted_value)

    @transaction
    def transfer_from(
        self, from_: Any, to: Any, amount: int, *, sender: ChecksumAddress
    ) -> List[Event]:
        from_ = to_address(from_)
        to = require_receiver(to, TRANSFER_TO_ZERO)
        amount = require_amount(amount)
        if self._balances.get(from_, 0) < amount:
            raise InsufficientBalance(TRANSFER_EXCEEDS_BALANCE)
        self._spend_allowance(from_, sender, amount)
        return self._move(from_, to, amount)

    @transaction
    def mint(self, to: Any, amount: int, *, sender: ChecksumAddress) -> List[Event]:
        self._ownership.check(sender)
        to = require_receiver(to, MINT_TO_ZERO)
        return self._mint(to, require_amount(amount))

    @transaction
    def burn(self, amount: int, *, sender: ChecksumAddress) -> List[Event]:
        return self._burn(sender, require_amount(amount))

    @transaction
    def burn_from(self, account: Any, amount: int, *, sender: ChecksumAddress) -> List[Event]:
        account = to_address(account)
        amount = require_amount(amount)
        if self._balances.get(account, 0) < amount:
            raise InsufficientBalance(BURN_EXCEEDS_BALANCE)
        self._spend_allowance(account, sender, amount)
        return self._burn(account, amount)

    @transaction
    def transfer_ownership(self, new_owner: Any, *, sender: ChecksumAddress) -> List[Event]:
        return self._ownership.transfer(new_owner, sender)

    @transaction
    def renounce_ownership(self, *, sender: ChecksumAddress) -> List[Event]:
        return self._ownership.renounce(sender)

    @view
    def to_state(self) -> Dict[str, Any]:
        return {
            "owner": self._ownership.owner,
            "total_supply": self._total_supply,
            "balances": {a: v for a, v in sorted(self._balances.items()) if v},
            "allowances": {
                owner: dict(sorted(spenders.items()))
                for owner, spenders in sorted(self._allowances.items())
                if spenders
            },
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any], address: Optional[str] = None) -> "YogiToken":
        instance = cls.__new__(cls)
        Ledger.__init__(instance, address=address)
        instance._ownership = Ownership(state["owner"])
        instance._balances = {
            to_address(account): int(amount) for account, amount in state["balances"].items()
        }
        instance._allowances = {
            to_address(owner): {to_address(s): int(v) for s, v in spenders.items()}
            for owner, spenders in state.get("allowances", {}).items()
        }
        instance._total_supply = int(state["total_supply"])
        amounts = list(instance._balances.values()) + [
            value for spenders in instance._allowances.values() for value in spenders.values()
        ]
        if any(amount < 0 for amount in amounts):
            raise ValueError("Negative balance or allowance recorded")
        if sum(instance._balances.values()) != instance._total_supply:
            raise ValueError("Balances do not add up to the total supply")
        if instance._total_supply > cls.MAX_SUPPLY:
            raise ValueError("Total supply exceeds the max supply")
        return instance
