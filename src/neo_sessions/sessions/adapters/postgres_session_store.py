"""
Durable session store implementation using AsyncPG.

The user_sessions table is the system of record; the fast store is rebuilt
from it when cache data is lost.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import asyncpg

from ...core.exceptions import DatabaseError, QueryError, QueryTimeoutError
from ..entities.session import SessionRecord
from .session_queries import SessionQueries, SessionUtils

logger = logging.getLogger(__name__)

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PostgresSessionStore:
    """
    AsyncPG implementation of the durable session store.

    Handles ONLY session persistence. Does not decide validity; the session
    manager applies lifecycle rules.
    """

    def __init__(self, db_pool: asyncpg.Pool, schema: str = "public"):
        """
        Initialize session store with configurable schema.

        Args:
            db_pool: AsyncPG connection pool
            schema: Schema holding users and user_sessions
        """
        if db_pool is None:
            raise ValueError("Database pool is required")
        self._db_pool = db_pool
        self.schema = schema
        self._queries = SessionQueries(schema)
        self._utils = SessionUtils()

    @asynccontextmanager
    async def _connection(self, operation: str) -> AsyncIterator[asyncpg.Connection]:
        try:
            async with self._db_pool.acquire() as conn:
                yield conn
        except asyncpg.UniqueViolationError as e:
            raise QueryError(
                f"Session {operation} violated a unique constraint",
                details={"operation": operation, "error": str(e)},
            ) from e
        except (asyncio.TimeoutError, asyncpg.QueryCanceledError) as e:
            raise QueryTimeoutError(
                f"Session {operation} timed out",
                details={"operation": operation, "error": str(e)},
            ) from e
        except _DRIVER_ERRORS as e:
            raise DatabaseError(
                f"Session {operation} failed",
                details={"operation": operation, "error": str(e)},
            ) from e

    async def create_session(self, record: SessionRecord) -> None:
        """Insert a new session row. Existing ids are never overwritten."""
        async with self._connection("insert") as conn:
            await conn.execute(self._queries.INSERT_SESSION, *self._utils.record_to_params(record))

        logger.debug(
            f"Session persisted for user {record.user_id}",
            extra={"user_id": record.user_id, "expires_at": record.expires_at.isoformat()}
        )

    async def find_active_session_with_user(
        self,
        session_id: str,
        now: datetime
    ) -> Optional[Dict[str, Any]]:
        """Get an active, unexpired session joined with its user."""
        async with self._connection("lookup") as conn:
            row = await conn.fetchrow(self._queries.GET_ACTIVE_SESSION_WITH_USER, session_id, now)

        return self._utils.row_to_dict(row) if row else None

    async def find_session_owner(self, session_id: str) -> Optional[str]:
        """Get the owning user id of a session in any state."""
        async with self._connection("owner lookup") as conn:
            user_id = await conn.fetchval(self._queries.GET_SESSION_OWNER, session_id)

        return str(user_id) if user_id is not None else None

    async def deactivate_session(self, session_id: str) -> int:
        """Mark a session inactive. The row is kept for auditing."""
        async with self._connection("deactivate") as conn:
            result = await conn.execute(self._queries.DEACTIVATE_SESSION, session_id)
        return self._utils.extract_row_count(result)

    async def deactivate_user_sessions(self, user_id: str) -> int:
        """Mark every active session of a user inactive in one statement."""
        async with self._connection("bulk deactivate") as conn:
            result = await conn.execute(self._queries.DEACTIVATE_USER_SESSIONS, user_id)

        count = self._utils.extract_row_count(result)
        if count > 0:
            logger.info(
                f"Deactivated {count} durable sessions for user {user_id}",
                extra={"user_id": user_id, "session_count": count}
            )
        return count

    async def update_expiry(self, session_id: str, expires_at: datetime) -> int:
        """Move an active session's expiry forward."""
        async with self._connection("expiry update") as conn:
            result = await conn.execute(self._queries.UPDATE_EXPIRY, session_id, expires_at)
        return self._utils.extract_row_count(result)

    async def find_expired_or_inactive(self, now: datetime) -> List[Dict[str, Any]]:
        """Get ids and owners of sessions past their validity window."""
        async with self._connection("expired lookup") as conn:
            rows = await conn.fetch(self._queries.GET_EXPIRED_OR_INACTIVE, now)

        return [
            {"id": row["id"], "user_id": str(row["user_id"])}
            for row in rows
        ]

    async def delete_sessions(self, session_ids: Sequence[str]) -> int:
        """Hard-delete session rows by id."""
        if not session_ids:
            return 0

        async with self._connection("delete") as conn:
            result = await conn.execute(self._queries.DELETE_SESSIONS, list(session_ids))

        count = self._utils.extract_row_count(result)
        logger.debug(f"Deleted {count} durable sessions")
        return count
