import functools
import operator
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from yogi.errors import InvalidAmount, InvalidReceiver

ZERO_ADDRESS = to_checksum_address("0x" + "0" * 40)


class Event(NamedTuple):
    """A single event emitted by a ledger call."""

    name: str
    args: Dict[str, Any]


class Receipt(NamedTuple):
    """Result of a mutating ledger call."""

    sender: ChecksumAddress
    method: str
    events: List[Event]

    def events_named(self, name: str) -> List[Event]:
        return [event for event in self.events if event.name == name]


def to_address(account: Any) -> ChecksumAddress:
    """
    Returns the checksum address of an account.
    Accepts address strings/bytes or any object exposing an `address` attribute
    (e.g. an eth-account LocalAccount).
    """
    value = getattr(account, "address", account)
    if not is_address(value):
        raise ValueError(f"{account!r} is not a valid ethereum address")
    return to_checksum_address(value)


def require_receiver(account: Any, message: str) -> ChecksumAddress:
    address = to_address(account)
    if address == ZERO_ADDRESS:
        raise InvalidReceiver(message)
    return address


def to_integer(value: Any, what: str = "Amount") -> int:
    """Returns `value` as an int. Fractional values are rejected, not truncated."""
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidAmount(f"{what} must be an integer; got {value!r}")


def to_token_id(token_id: Any) -> int:
    return to_integer(token_id, what="Token id")


def require_amount(amount: int) -> int:
    amount = to_integer(amount)
    if amount < 0:
        raise InvalidAmount(f"Amount must be non-negative; got {amount}")
    return amount


def transaction(method):
    """
    Runs a mutating ledger method inside the ledger's transactional boundary.

    Writes are serialized by the ledger lock; the method receives the
    normalized sender and its emitted events are collected into a `Receipt`.
    """

    @functools.wraps(method)
    def wrapper(self, *args, sender, **kwargs):
        sender = to_address(sender)
        with self._lock:
            events = method(self, *args, sender=sender, **kwargs) or list()
            self._events.extend(events)
        return Receipt(sender=sender, method=method.__name__, events=list(events))

    return wrapper


def view(method):
    """Serves a read under the ledger lock so it never observes a half-applied write."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class Ledger(ABC):
    """Base for the in-process token ledgers."""

    NAME: str = ""
    SYMBOL: str = ""
    # (name, ABI type) of each constructor argument, in order
    CONSTRUCTOR_INPUTS: Tuple[Tuple[str, str], ...] = ()

    def __init__(self, address: Optional[str] = None):
        self._lock = threading.RLock()
        self._events: List[Event] = list()
        self.address: Optional[ChecksumAddress] = None
        if address is not None:
            self.address = to_address(address)

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def symbol(self) -> str:
        return self.SYMBOL

    @property
    def events(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    @abstractmethod
    def to_state(self) -> Dict[str, Any]:
        """Returns the persistable state of the ledger."""
        raise NotImplementedError

    @classmethod
    @abstractmethod
    def from_state(cls, state: Dict[str, Any], address: Optional[str] = None) -> "Ledger":
        """Rebuilds a ledger from its persisted state."""
        raise NotImplementedError
