"""Protocols for the collaborators of the session manager."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .credentials import TokenClaims
from .session import SessionRecord
from .user import UserIdentity


@runtime_checkable
class FastStoreProtocol(Protocol):
    """Volatile key/value store with per-key TTL and hash maps."""

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ...

    async def get(self, key: str) -> Optional[str]:
        ...

    async def delete(self, key: str) -> int:
        ...

    async def exists(self, key: str) -> bool:
        ...

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        ...

    async def ttl(self, key: str) -> int:
        """Remaining TTL; -1 when the key has none, -2 when it is missing."""
        ...

    async def hset(self, key: str, field: str, value: str) -> int:
        ...

    async def hget(self, key: str, field: str) -> Optional[str]:
        ...

    async def hgetall(self, key: str) -> Dict[str, str]:
        ...

    async def hdel(self, key: str, field: str) -> int:
        ...

    async def get_keys_by_pattern(self, pattern: str) -> List[str]:
        ...

    async def delete_by_pattern(self, pattern: str) -> int:
        ...


@runtime_checkable
class DurableSessionStoreProtocol(Protocol):
    """Relational system of record for sessions."""

    async def create_session(self, record: SessionRecord) -> None:
        ...

    async def find_active_session_with_user(
        self, session_id: str, now: datetime
    ) -> Optional[Dict[str, Any]]:
        """Active, unexpired session joined with its user's email and role."""
        ...

    async def find_session_owner(self, session_id: str) -> Optional[str]:
        ...

    async def deactivate_session(self, session_id: str) -> int:
        ...

    async def deactivate_user_sessions(self, user_id: str) -> int:
        ...

    async def update_expiry(self, session_id: str, expires_at: datetime) -> int:
        ...

    async def find_expired_or_inactive(self, now: datetime) -> List[Dict[str, Any]]:
        """Rows (``id``, ``user_id``) that are expired or inactive."""
        ...

    async def delete_sessions(self, session_ids: Sequence[str]) -> int:
        ...


@runtime_checkable
class UserLookupProtocol(Protocol):
    """Authoritative source of user status."""

    async def find_by_id(self, user_id: str) -> Optional[UserIdentity]:
        ...


@runtime_checkable
class TokenIssuerProtocol(Protocol):
    """Mints and verifies signed credentials."""

    def issue(self, user: UserIdentity) -> str:
        ...

    def verify(self, token: str) -> TokenClaims:
        """Raises InvalidTokenError when the token does not verify."""
        ...
