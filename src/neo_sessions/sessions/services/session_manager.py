"""Dual-store session lifecycle management.

Redis is the low-latency path for every session read. PostgreSQL is the
system of record: it is written best-effort on every mutation and used to
rebuild Redis entries after cache loss. No transaction spans both stores;
the recovery and cleanup paths repair any divergence between them.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, List, NamedTuple, Optional

from ...core.exceptions import (
    CacheError,
    CacheSerializationError,
    DatabaseError,
    InvalidTokenError,
    mask_session_id,
)
from ...core.value_objects import SessionId
from ..entities.protocols import (
    DurableSessionStoreProtocol,
    FastStoreProtocol,
    TokenIssuerProtocol,
    UserLookupProtocol,
)
from ..entities.results import PersistenceOutcome, SessionCreateResult, SessionSummary
from ..entities.session import SessionRecord, utcnow
from ..entities.user import UserIdentity

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = 86400


class DurableResult(NamedTuple):
    """Outcome of a best-effort durable store call."""
    outcome: PersistenceOutcome
    value: Any = None
    error: Optional[str] = None


class SessionManager:
    """Session lifecycle across the fast store and the durable store.

    Fast-store failures propagate to the caller. Durable-store failures on
    write paths are logged and reported, never raised. Invalid, expired,
    corrupted and unknown sessions all surface as ``None``.
    """

    def __init__(
        self,
        fast_store: FastStoreProtocol,
        durable_store: Optional[DurableSessionStoreProtocol],
        token_issuer: TokenIssuerProtocol,
        user_lookup: UserLookupProtocol,
        *,
        session_ttl: int = DEFAULT_SESSION_TTL,
        session_key_prefix: str = "session:",
        user_sessions_key_prefix: str = "user_sessions:",
        durable_timeout_seconds: float = 5.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize session manager.

        Args:
            fast_store: TTL-capable key/value store (Redis)
            durable_store: Relational session store, or None to run cache-only
            token_issuer: Verifies credentials bound to sessions
            user_lookup: Authoritative user status source
            session_ttl: Session lifetime in seconds
            session_key_prefix: Prefix of session record keys
            user_sessions_key_prefix: Prefix of per-user index keys
            durable_timeout_seconds: Upper bound for each durable store call
            clock: Returns the current UTC time
        """
        if fast_store is None:
            raise ValueError("Fast store is required")
        if session_ttl <= 0:
            raise ValueError("Session TTL must be a positive integer")

        self.fast_store = fast_store
        self.durable_store = durable_store
        self.token_issuer = token_issuer
        self.user_lookup = user_lookup
        self.session_ttl = session_ttl
        self.session_key_prefix = session_key_prefix
        self.user_sessions_key_prefix = user_sessions_key_prefix
        self.durable_timeout_seconds = durable_timeout_seconds
        self._clock = clock

    def _session_key(self, session_id: str) -> str:
        return f"{self.session_key_prefix}{session_id}"

    def _user_sessions_key(self, user_id: str) -> str:
        return f"{self.user_sessions_key_prefix}{user_id}"

    async def _run_durable(
        self,
        operation: str,
        call: Callable[[DurableSessionStoreProtocol], Awaitable[Any]],
    ) -> DurableResult:
        """Run a durable store call without letting its failure escape."""
        if self.durable_store is None:
            return DurableResult(PersistenceOutcome.SKIPPED)

        try:
            value = await asyncio.wait_for(
                call(self.durable_store), timeout=self.durable_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Durable session {operation} timed out after {self.durable_timeout_seconds}s"
            )
            return DurableResult(PersistenceOutcome.TIMED_OUT, error="timeout")
        except DatabaseError as e:
            logger.error(f"Durable session {operation} failed: {e.message} {e.details}")
            return DurableResult(PersistenceOutcome.FAILED, error=e.message)

        return DurableResult(PersistenceOutcome.PERSISTED, value)

    async def create_session_with_outcome(
        self,
        user: UserIdentity,
        credential: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> SessionCreateResult:
        """Create a session and report whether the durable copy was written.

        Args:
            user: Already-authenticated user
            credential: Signed token bound to the session
            ip_address: Client origin address
            user_agent: Client descriptor

        Returns:
            Creation result carrying the new session id

        Raises:
            CacheError: If the fast store write fails
        """
        session_id = SessionId.generate().value
        created_at = self._clock()
        record = SessionRecord(
            session_id=session_id,
            user_id=user.id,
            email=user.email,
            role=user.role,
            token=credential,
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=self.session_ttl),
            ip_address=ip_address,
            user_agent=user_agent,
        )

        session_key = self._session_key(session_id)
        user_sessions_key = self._user_sessions_key(user.id)
        await self.fast_store.set(session_key, record.to_json(), self.session_ttl)
        await self.fast_store.hset(user_sessions_key, session_id, session_key)
        await self.fast_store.expire(user_sessions_key, self.session_ttl)

        durable = await self._run_durable("insert", lambda store: store.create_session(record))
        if durable.outcome != PersistenceOutcome.PERSISTED:
            logger.warning(
                f"Session {mask_session_id(session_id)} is cache-only "
                f"(durable outcome: {durable.outcome.value})"
            )

        logger.info(f"Session created for user {user.id}: {mask_session_id(session_id)}")
        return SessionCreateResult(
            session_id=session_id,
            expires_at=record.expires_at,
            durable=durable.outcome,
            durable_error=durable.error,
        )

    async def create_session(
        self,
        user: UserIdentity,
        credential: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> str:
        """Create a session and return its id."""
        result = await self.create_session_with_outcome(user, credential, ip_address, user_agent)
        return result.session_id

    async def validate_session(self, session_id: str) -> Optional[SessionRecord]:
        """Resolve a session id to a live session record.

        Corrupted or expired fast-store entries are invalidated. On a cache
        miss the session is rebuilt from the durable store when it is still
        active there.
        """
        if not session_id:
            return None

        raw = await self.fast_store.get(self._session_key(session_id))
        if raw is None:
            return await self._recover_session(session_id)

        try:
            record = SessionRecord.from_json(session_id, raw)
        except CacheSerializationError as e:
            logger.error(
                f"Failed to parse session data for {mask_session_id(session_id)}: {e.details.get('error')}"
            )
            await self.invalidate_session(session_id)
            return None

        if not record.is_valid(self._clock()):
            await self.invalidate_session(session_id)
            return None

        return record

    async def _recover_session(self, session_id: str) -> Optional[SessionRecord]:
        now = self._clock()
        lookup = await self._run_durable(
            "recovery lookup",
            lambda store: store.find_active_session_with_user(session_id, now),
        )
        if lookup.value is None:
            return None

        record = SessionRecord.from_durable(lookup.value)
        ttl_seconds = record.seconds_until_expiry(now)
        if not record.is_active or ttl_seconds <= 0:
            return None

        await self.fast_store.set(self._session_key(session_id), record.to_json(), ttl_seconds)
        await self._index_session(record.user_id, session_id, ttl_seconds)

        logger.info(f"Session restored from durable store: {mask_session_id(session_id)}")
        return record

    async def _index_session(self, user_id: str, session_id: str, ttl_seconds: int) -> None:
        user_sessions_key = self._user_sessions_key(user_id)
        await self.fast_store.hset(user_sessions_key, session_id, self._session_key(session_id))
        # Never shorten the index below another session's lifetime
        if await self.fast_store.ttl(user_sessions_key) < ttl_seconds:
            await self.fast_store.expire(user_sessions_key, ttl_seconds)

    async def validate_session_token(self, session_id: str) -> Optional[UserIdentity]:
        """Resolve a session id to the current identity of its user.

        The bound credential must verify, belong to the session's user, and
        the user must still be active with the role signed into the credential. Any
        mismatch invalidates the session.
        """
        record = await self.validate_session(session_id)
        if record is None:
            return None

        masked = mask_session_id(session_id)
        try:
            claims = self.token_issuer.verify(record.token)
        except InvalidTokenError as e:
            logger.warning(f"Invalid credential in session {masked}: {e.message}")
            await self.invalidate_session(session_id)
            return None

        if claims.subject_id != record.user_id:
            logger.warning(f"Credential subject does not match session {masked}")
            await self.invalidate_session(session_id)
            return None

        try:
            user = await asyncio.wait_for(
                self.user_lookup.find_by_id(claims.subject_id),
                timeout=self.durable_timeout_seconds,
            )
        except (DatabaseError, asyncio.TimeoutError) as e:
            # Infrastructure failure: reject this request, keep the session
            logger.error(f"User lookup failed while validating session {masked}: {e}")
            return None

        if user is None or not user.is_active:
            logger.info(f"User {claims.subject_id} is missing or inactive, invalidating session {masked}")
            await self.invalidate_session(session_id)
            return None

        # Recovered records carry the current role, so compare against the signed claim
        if user.role != claims.role:
            logger.info(f"Role of user {user.id} changed since login, invalidating session {masked}")
            await self.invalidate_session(session_id)
            return None

        return user

    async def invalidate_session(self, session_id: str) -> None:
        """Remove a session from both stores. Unknown ids are a no-op."""
        if not session_id:
            return

        session_key = self._session_key(session_id)
        user_id: Optional[str] = None

        raw = await self.fast_store.get(session_key)
        if raw is not None:
            try:
                user_id = SessionRecord.from_json(session_id, raw).user_id
            except CacheSerializationError:
                logger.warning(f"Failed to parse session data during invalidation: {mask_session_id(session_id)}")

        if user_id is None:
            owner = await self._run_durable(
                "owner lookup", lambda store: store.find_session_owner(session_id)
            )
            user_id = owner.value

        if user_id is not None:
            await self.fast_store.hdel(self._user_sessions_key(user_id), session_id)
        await self.fast_store.delete(session_key)

        await self._run_durable("deactivate", lambda store: store.deactivate_session(session_id))

        logger.info(f"Session invalidated: {mask_session_id(session_id)}")

    async def invalidate_all_user_sessions(self, user_id: str) -> int:
        """Invalidate every session of a user ("logout everywhere").

        Returns:
            Number of sessions found in the user's fast-store index
        """
        user_sessions_key = self._user_sessions_key(user_id)
        indexed = await self.fast_store.hgetall(user_sessions_key)

        if indexed:
            await asyncio.gather(*(self.invalidate_session(sid) for sid in indexed))

        await self.fast_store.delete(user_sessions_key)
        await self._run_durable(
            "bulk deactivate", lambda store: store.deactivate_user_sessions(user_id)
        )

        logger.info(f"All sessions invalidated for user: {user_id}")
        return len(indexed)

    async def refresh_session(self, session_id: str) -> bool:
        """Extend a live session's expiry to now + TTL.

        Returns:
            False, without mutating anything, if the session is not valid
        """
        record = await self.validate_session(session_id)
        if record is None:
            return False

        now = self._clock()
        new_expires_at = max(now + timedelta(seconds=self.session_ttl), record.expires_at)
        refreshed = record.with_expiry(new_expires_at)
        ttl_seconds = refreshed.seconds_until_expiry(now)

        await self.fast_store.set(self._session_key(session_id), refreshed.to_json(), ttl_seconds)
        await self.fast_store.expire(self._user_sessions_key(record.user_id), ttl_seconds)

        await self._run_durable(
            "expiry update", lambda store: store.update_expiry(session_id, new_expires_at)
        )

        logger.debug(f"Session refreshed: {mask_session_id(session_id)}")
        return True

    async def get_user_sessions(self, user_id: str) -> List[SessionSummary]:
        """List a user's live sessions, oldest first.

        Index entries that no longer resolve to a live session are removed.
        """
        user_sessions_key = self._user_sessions_key(user_id)
        indexed = await self.fast_store.hgetall(user_sessions_key)
        if not indexed:
            return []

        session_ids = list(indexed)
        records = await asyncio.gather(*(self.validate_session(sid) for sid in session_ids))

        summaries: List[SessionSummary] = []
        for session_id, record in zip(session_ids, records):
            if record is None or record.user_id != user_id:
                await self.fast_store.hdel(user_sessions_key, session_id)
                continue
            summaries.append(SessionSummary.from_record(record))

        summaries.sort(key=lambda summary: summary.created_at)
        return summaries

    async def cleanup_expired_sessions(self) -> int:
        """Remove expired and inactive sessions from both stores.

        This is the only path that hard-deletes durable rows. Errors are
        logged so a periodic caller keeps running.

        Returns:
            Number of durable rows deleted
        """
        if self.durable_store is None:
            return 0

        now = self._clock()
        try:
            stale = await asyncio.wait_for(
                self.durable_store.find_expired_or_inactive(now),
                timeout=self.durable_timeout_seconds,
            )
            for row in stale:
                await self.fast_store.delete(self._session_key(row["id"]))
                await self.fast_store.hdel(self._user_sessions_key(row["user_id"]), row["id"])

            deleted = await asyncio.wait_for(
                self.durable_store.delete_sessions([row["id"] for row in stale]),
                timeout=self.durable_timeout_seconds,
            )
        except (DatabaseError, CacheError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to cleanup expired sessions: {e}")
            return 0

        logger.info(f"Cleaned up {deleted} expired sessions")
        return deleted
