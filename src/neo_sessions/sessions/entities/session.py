"""Session domain entity and its fast-store wire format."""

import json
import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ...core.exceptions import CacheSerializationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"Expected a boolean flag, got {value!r}")
    return value


@dataclass
class SessionRecord:
    """Server-side session binding an opaque id to a user and a credential.

    ``email`` and ``role`` are a snapshot taken at creation time and may go
    stale; authorization decisions must use the user lookup instead.
    """

    session_id: str
    user_id: str
    email: str
    role: str
    token: str
    created_at: datetime
    expires_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)
        if self.expires_at.tzinfo is None:
            self.expires_at = self.expires_at.replace(tzinfo=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Active and not yet expired."""
        return self.is_active and not self.is_expired(now)

    def seconds_until_expiry(self, now: Optional[datetime] = None) -> int:
        """Remaining lifetime rounded up to whole seconds, 0 once expired."""
        remaining = (self.expires_at - (now or utcnow())).total_seconds()
        if remaining <= 0:
            return 0
        return math.ceil(remaining)

    def with_expiry(self, expires_at: datetime) -> "SessionRecord":
        return replace(self, expires_at=expires_at)

    def to_json(self) -> str:
        """Serialize to the JSON payload stored in the fast store."""
        payload = {
            "userId": self.user_id,
            "email": self.email,
            "role": self.role,
            "jwtToken": self.token,
            "createdAt": self.created_at.isoformat(),
            "expiresAt": self.expires_at.isoformat(),
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
            "isActive": self.is_active,
        }
        return json.dumps(payload)

    @classmethod
    def from_json(cls, session_id: str, data: Any) -> "SessionRecord":
        """Parse a fast-store payload.

        Raises:
            CacheSerializationError: If the payload is not a well-formed session
        """
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            payload = json.loads(data)
            if not isinstance(payload, dict):
                raise TypeError("Session payload must be a JSON object")
            return cls(
                session_id=session_id,
                user_id=str(payload["userId"]),
                email=payload["email"],
                role=payload["role"],
                token=payload["jwtToken"],
                created_at=_parse_timestamp(payload["createdAt"]),
                expires_at=_parse_timestamp(payload["expiresAt"]),
                ip_address=payload.get("ipAddress"),
                user_agent=payload.get("userAgent"),
                is_active=_parse_flag(payload.get("isActive", True)),
            )
        except (ValueError, TypeError, KeyError, UnicodeDecodeError) as e:
            raise CacheSerializationError(
                "Session payload is corrupted",
                details={"error": str(e)},
            ) from e

    @classmethod
    def from_durable(cls, row: Dict[str, Any]) -> "SessionRecord":
        """Rebuild a session from a durable row joined with its user."""
        return cls(
            session_id=row["id"],
            user_id=str(row["user_id"]),
            email=row["email"],
            role=str(row["role"]),
            token=row["token"],
            created_at=row["created_at"],
            expires_at=row["expires_at"],
            ip_address=row.get("ip_address"),
            user_agent=row.get("user_agent"),
            is_active=row["is_active"],
        )
