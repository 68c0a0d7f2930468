"""Pytest configuration and fixtures for neo-sessions tests."""

import asyncio
import fnmatch
import math
import time
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest

from neo_sessions.core.exceptions import DatabaseError, QueryError
from neo_sessions.sessions.adapters import JWTTokenIssuer
from neo_sessions.sessions.entities import SessionRecord, UserIdentity, UserStatus
from neo_sessions.sessions.services import SessionManager

TEST_JWT_SECRET = "test-secret-key-for-session-tests"


class InMemoryFastStore:
    """Fast store fake with Redis-like TTL semantics."""

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.expiry: Dict[str, float] = {}
        self.calls: Counter = Counter()

    def _alive(self, key: str) -> bool:
        deadline = self.expiry.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            self.data.pop(key, None)
            self.expiry.pop(key, None)
        return key in self.data

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self.calls["set"] += 1
        self.data[key] = value
        if ttl_seconds:
            self.expiry[key] = time.monotonic() + ttl_seconds
        else:
            self.expiry.pop(key, None)

    async def get(self, key: str) -> Optional[str]:
        self.calls["get"] += 1
        if not self._alive(key):
            return None
        value = self.data[key]
        return value if isinstance(value, str) else None

    async def delete(self, key: str) -> int:
        self.calls["delete"] += 1
        existed = self._alive(key)
        self.data.pop(key, None)
        self.expiry.pop(key, None)
        return int(existed)

    async def exists(self, key: str) -> bool:
        return self._alive(key)

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        self.calls["expire"] += 1
        if not self._alive(key):
            return False
        self.expiry[key] = time.monotonic() + ttl_seconds
        return True

    async def ttl(self, key: str) -> int:
        if not self._alive(key):
            return -2
        deadline = self.expiry.get(key)
        if deadline is None:
            return -1
        return math.ceil(deadline - time.monotonic())

    async def hset(self, key: str, field: str, value: str) -> int:
        self.calls["hset"] += 1
        if not self._alive(key):
            self.data[key] = {}
        is_new = field not in self.data[key]
        self.data[key][field] = value
        return int(is_new)

    async def hget(self, key: str, field: str) -> Optional[str]:
        if not self._alive(key):
            return None
        return self.data[key].get(field)

    async def hgetall(self, key: str) -> Dict[str, str]:
        self.calls["hgetall"] += 1
        if not self._alive(key):
            return {}
        return dict(self.data[key])

    async def hdel(self, key: str, field: str) -> int:
        self.calls["hdel"] += 1
        if not self._alive(key):
            return 0
        removed = self.data[key].pop(field, None) is not None
        if not self.data[key]:
            await self.delete(key)
        return int(removed)

    async def get_keys_by_pattern(self, pattern: str) -> List[str]:
        return [key for key in list(self.data) if self._alive(key) and fnmatch.fnmatch(key, pattern)]

    async def delete_by_pattern(self, pattern: str) -> int:
        keys = await self.get_keys_by_pattern(pattern)
        for key in keys:
            await self.delete(key)
        return len(keys)


class InMemoryDurableStore:
    """Durable session store fake backed by dictionaries."""

    def __init__(self, users: Dict[str, UserIdentity]):
        self.users = users
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.calls: Counter = Counter()
        self.failure: Optional[Exception] = None
        self.delay: float = 0.0

    async def _enter(self, operation: str) -> None:
        self.calls[operation] += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failure is not None:
            raise self.failure

    async def create_session(self, record: SessionRecord) -> None:
        await self._enter("create_session")
        if record.session_id in self.rows:
            raise QueryError("duplicate session id")
        self.rows[record.session_id] = {
            "id": record.session_id,
            "user_id": record.user_id,
            "token": record.token,
            "expires_at": record.expires_at,
            "created_at": record.created_at,
            "is_active": record.is_active,
            "ip_address": record.ip_address,
            "user_agent": record.user_agent,
        }

    async def find_active_session_with_user(
        self, session_id: str, now: datetime
    ) -> Optional[Dict[str, Any]]:
        await self._enter("find_active_session_with_user")
        row = self.rows.get(session_id)
        if row is None or not row["is_active"] or row["expires_at"] <= now:
            return None
        user = self.users.get(row["user_id"])
        if user is None:
            return None
        return {**row, "email": user.email, "role": user.role}

    async def find_session_owner(self, session_id: str) -> Optional[str]:
        await self._enter("find_session_owner")
        row = self.rows.get(session_id)
        return row["user_id"] if row else None

    async def deactivate_session(self, session_id: str) -> int:
        await self._enter("deactivate_session")
        row = self.rows.get(session_id)
        if row is None or not row["is_active"]:
            return 0
        row["is_active"] = False
        return 1

    async def deactivate_user_sessions(self, user_id: str) -> int:
        await self._enter("deactivate_user_sessions")
        count = 0
        for row in self.rows.values():
            if row["user_id"] == user_id and row["is_active"]:
                row["is_active"] = False
                count += 1
        return count

    async def update_expiry(self, session_id: str, expires_at: datetime) -> int:
        await self._enter("update_expiry")
        row = self.rows.get(session_id)
        if row is None or not row["is_active"]:
            return 0
        row["expires_at"] = max(row["expires_at"], expires_at)
        return 1

    async def find_expired_or_inactive(self, now: datetime) -> List[Dict[str, Any]]:
        await self._enter("find_expired_or_inactive")
        return [
            {"id": row["id"], "user_id": row["user_id"]}
            for row in self.rows.values()
            if row["expires_at"] < now or not row["is_active"]
        ]

    async def delete_sessions(self, session_ids: Sequence[str]) -> int:
        await self._enter("delete_sessions")
        count = 0
        for session_id in session_ids:
            if self.rows.pop(session_id, None) is not None:
                count += 1
        return count


class InMemoryUserLookup:
    """User lookup fake sharing the users dictionary with the durable store."""

    def __init__(self, users: Dict[str, UserIdentity]):
        self.users = users
        self.failure: Optional[Exception] = None

    async def find_by_id(self, user_id: str) -> Optional[UserIdentity]:
        if self.failure is not None:
            raise self.failure
        return self.users.get(user_id)


class MutableClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def alice() -> UserIdentity:
    return UserIdentity(id="user-alice", email="alice@example.com", role="USER", status=UserStatus.ACTIVE)


@pytest.fixture
def bob() -> UserIdentity:
    return UserIdentity(id="user-bob", email="bob@example.com", role="ADMIN", status=UserStatus.ACTIVE)


@pytest.fixture
def users(alice, bob) -> Dict[str, UserIdentity]:
    return {alice.id: alice, bob.id: bob}


@pytest.fixture
def fast_store() -> InMemoryFastStore:
    return InMemoryFastStore()


@pytest.fixture
def durable_store(users) -> InMemoryDurableStore:
    return InMemoryDurableStore(users)


@pytest.fixture
def user_lookup(users) -> InMemoryUserLookup:
    return InMemoryUserLookup(users)


@pytest.fixture
def jwt_secret() -> str:
    return TEST_JWT_SECRET


@pytest.fixture
def token_issuer(jwt_secret) -> JWTTokenIssuer:
    return JWTTokenIssuer(secret=jwt_secret)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def make_manager(fast_store, durable_store, token_issuer, user_lookup):
    """Build a session manager over the in-memory stores."""

    def _make(**kwargs) -> SessionManager:
        kwargs.setdefault("session_ttl", 3600)
        durable = kwargs.pop("durable_store", durable_store)
        return SessionManager(fast_store, durable, token_issuer, user_lookup, **kwargs)

    return _make


@pytest.fixture
def session_manager(make_manager) -> SessionManager:
    return make_manager()


@pytest.fixture
def failing_database_error() -> DatabaseError:
    return DatabaseError("connection refused", details={"error": "connection refused"})
