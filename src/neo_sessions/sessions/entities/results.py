"""Result types returned by the session manager."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .session import SessionRecord


class PersistenceOutcome(str, Enum):
    """Outcome of the best-effort durable write."""
    PERSISTED = "persisted"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SessionCreateResult:
    """Result of session creation.

    The session is usable whenever this object exists; ``durable`` only
    reports whether the durable copy was written.
    """

    session_id: str
    expires_at: datetime
    durable: PersistenceOutcome = PersistenceOutcome.PERSISTED
    durable_error: Optional[str] = None

    @property
    def is_durable(self) -> bool:
        return self.durable == PersistenceOutcome.PERSISTED


@dataclass(frozen=True)
class SessionSummary:
    """Live session listing entry."""

    session_id: str
    user_id: str
    created_at: datetime
    expires_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionSummary":
        return cls(
            session_id=record.session_id,
            user_id=record.user_id,
            created_at=record.created_at,
            expires_at=record.expires_at,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }
