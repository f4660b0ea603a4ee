"""Mini README: Registry of members excluded from future contribution months.

The registry is consulted when a contribution is admitted and when a month is
carried forward. Blacklisting never rewrites history: existing records for a
newly blacklisted name stay where they are.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

from ..access import DEFAULT_POLICY, AccessPolicy
from ..errors import NotFoundError, ValidationError
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class BlacklistRegistry:
    """Ordered set of blacklisted member names."""

    def __init__(
        self,
        names: Optional[Iterable[str]] = None,
        *,
        policy: AccessPolicy = DEFAULT_POLICY,
    ) -> None:
        self._names: List[str] = []
        self.policy = policy
        for name in names or ():
            if isinstance(name, str) and name.strip() and name.strip() not in self._names:
                self._names.append(name.strip())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip() in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def contains(self, name: str) -> bool:
        return name in self

    def names(self) -> List[str]:
        return list(self._names)

    def add(self, name: str) -> bool:
        """Blacklist ``name``; returns ``False`` when it was already listed."""

        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Please enter a member name to blacklist")
        self.policy.require_admin("blacklist members")
        trimmed = name.strip()
        if trimmed in self._names:
            LOGGER.debug("Member %s already blacklisted", trimmed)
            return False
        self._names.append(trimmed)
        LOGGER.info("Blacklisted member %s", trimmed)
        return True

    def remove(self, name: str) -> None:
        self.policy.require_admin("remove members from the blacklist")
        trimmed = name.strip() if isinstance(name, str) else name
        if trimmed not in self._names:
            raise NotFoundError(f"{name} is not on the blacklist")
        self._names.remove(trimmed)
        LOGGER.info("Removed %s from blacklist", trimmed)
