"""Mini README: Role checks applied at the ledger boundary.

Structure:
    * Role - viewer, editor and admin actors.
    * AccessPolicy - final gate consulted by every ledger mutation.

Who the actor is gets decided by the caller (login, session, HTTP header).
The ledgers only confirm that the decided role may perform the write.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import LedgerPermissionError
from .logging_utils import get_logger

LOGGER = get_logger(__name__)


class Role(str, Enum):
    """Actor roles, from read-only to full control."""

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"

    @classmethod
    def from_str(cls, value: str) -> "Role":
        """Coerce arbitrary casing into a valid role."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise LedgerPermissionError(f"Unsupported role: {value}") from error


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """Permission gate for the acting role."""

    role: Role = Role.EDITOR

    @property
    def can_write(self) -> bool:
        return self.role is not Role.VIEWER

    def require_write(self, action: str) -> None:
        if not self.can_write:
            LOGGER.warning("Denied %s for role %s", action, self.role.value)
            raise LedgerPermissionError(
                f"You do not have permission to {action} (role: {self.role.value})"
            )

    def require_admin(self, action: str) -> None:
        if self.role is not Role.ADMIN:
            LOGGER.warning("Denied admin action %s for role %s", action, self.role.value)
            raise LedgerPermissionError(
                f"Only administrators may {action} (role: {self.role.value})"
            )


DEFAULT_POLICY = AccessPolicy()
