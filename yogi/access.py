from typing import Any, List, Optional

from eth_typing import ChecksumAddress

from yogi.errors import InvalidReceiver, Unauthorized
from yogi.ledger import ZERO_ADDRESS, Event, to_address

NOT_OWNER = "Ownable: caller is not the owner"
INVALID_OWNER = "Ownable: new owner is the zero address"


class Ownership:
    """Single privileged owner of a ledger, checked per call against the caller identity."""

    def __init__(self, owner: Any):
        owner = to_address(owner)
        self._owner: Optional[ChecksumAddress] = None if owner == ZERO_ADDRESS else owner

    @property
    def owner(self) -> ChecksumAddress:
        return self._owner or ZERO_ADDRESS

    def is_owner(self, caller: Any) -> bool:
        return self._owner is not None and to_address(caller) == self._owner

    def check(self, caller: Any) -> None:
        if not self.is_owner(caller):
            raise Unauthorized(NOT_OWNER)

    def transfer(self, new_owner: Any, caller: Any) -> List[Event]:
        self.check(caller)
        new_owner = to_address(new_owner)
        if new_owner == ZERO_ADDRESS:
            raise InvalidReceiver(INVALID_OWNER)
        return self._set(new_owner)

    def renounce(self, caller: Any) -> List[Event]:
        self.check(caller)
        return self._set(None)

    def _set(self, new_owner: Optional[ChecksumAddress]) -> List[Event]:
        previous_owner = self.owner
        self._owner = new_owner
        event = Event(
            "OwnershipTransferred",
            {"previousOwner": previous_owner, "newOwner": self.owner},
        )
        return [event]
