"""Mini README: Baseline list of members expected to contribute each month.

The roster is declared by the treasurer and is independent of contribution
history; only the expected-members report reads it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..access import DEFAULT_POLICY, AccessPolicy
from ..errors import NotFoundError, ValidationError
from ..logging_utils import get_logger
from ..validation import validate_name, validate_positive_amount

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExpectedMember:
    name: str
    monthly_amount: float

    def as_dict(self) -> Dict[str, object]:
        return {"name": self.name, "monthly_amount": self.monthly_amount}


class ExpectedMemberRoster:
    """Ordered, duplicate-free list of expected members."""

    def __init__(
        self,
        members: Optional[Iterable[ExpectedMember]] = None,
        *,
        policy: AccessPolicy = DEFAULT_POLICY,
    ) -> None:
        self._members: List[ExpectedMember] = []
        self.policy = policy
        for member in members or ():
            if self._index_of(member.name) is None:
                self._members.append(member)

    def __len__(self) -> int:
        return len(self._members)

    def members(self) -> List[ExpectedMember]:
        return list(self._members)

    def _index_of(self, name: str) -> Optional[int]:
        for index, member in enumerate(self._members):
            if member.name == name:
                return index
        return None

    def add(self, name: str, monthly_amount: object) -> ExpectedMember:
        clean_name = validate_name(name)
        amount = validate_positive_amount(monthly_amount, "Expected monthly amount")
        if self._index_of(clean_name) is not None:
            raise ValidationError(f"{clean_name} is already in the expected list")
        self.policy.require_write("edit the expected members list")

        member = ExpectedMember(name=clean_name, monthly_amount=amount)
        self._members.append(member)
        LOGGER.info("Expecting %s at %s per month", clean_name, amount)
        return member

    def edit(self, old_name: str, new_name: str, monthly_amount: object) -> ExpectedMember:
        index = self._index_of(old_name)
        if index is None:
            raise NotFoundError(f"{old_name} is not in the expected list")
        clean_name = validate_name(new_name)
        amount = validate_positive_amount(monthly_amount, "Expected monthly amount")
        if clean_name != old_name and self._index_of(clean_name) is not None:
            raise ValidationError("A member with this name already exists")
        self.policy.require_write("edit the expected members list")

        member = ExpectedMember(name=clean_name, monthly_amount=amount)
        self._members[index] = member
        LOGGER.info("Updated expected member %s -> %s", old_name, clean_name)
        return member

    def remove(self, name: str) -> ExpectedMember:
        index = self._index_of(name)
        if index is None:
            raise NotFoundError(f"{name} is not in the expected list")
        self.policy.require_write("edit the expected members list")
        LOGGER.info("Removed expected member %s", name)
        return self._members.pop(index)
