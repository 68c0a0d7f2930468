"""User identity as seen by the session manager."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class UserStatus(str, Enum):
    """Account status values stored on the users table."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


@dataclass(frozen=True)
class UserIdentity:
    """Authoritative user data returned by the user lookup."""

    id: str
    email: str
    role: str
    status: UserStatus = UserStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "UserIdentity":
        """Build an identity from a database row or mapping.

        Unknown status values map to ``INACTIVE`` so they never authenticate.
        """
        raw_status = str(record["status"]).upper()
        try:
            status = UserStatus(raw_status)
        except ValueError:
            status = UserStatus.INACTIVE
        return cls(
            id=str(record["id"]),
            email=record["email"],
            role=str(record["role"]),
            status=status,
        )
