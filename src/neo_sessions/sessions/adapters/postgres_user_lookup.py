"""User lookup against the users table."""

import logging
from typing import Optional

import asyncpg

from ...core.exceptions import DatabaseError
from ..entities.user import UserIdentity
from .session_queries import SessionQueries

logger = logging.getLogger(__name__)


class PostgresUserLookup:
    """Reads current user status for session token validation."""

    def __init__(self, db_pool: asyncpg.Pool, schema: str = "public"):
        if db_pool is None:
            raise ValueError("Database pool is required")
        self._db_pool = db_pool
        self._queries = SessionQueries(schema)

    async def find_by_id(self, user_id: str) -> Optional[UserIdentity]:
        """Get user by id.

        Returns:
            User identity or None if not found

        Raises:
            DatabaseError: If the lookup cannot be performed
        """
        try:
            async with self._db_pool.acquire() as conn:
                row = await conn.fetchrow(self._queries.GET_USER, user_id)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Failed to get user {user_id}: {e}")
            raise DatabaseError(
                "Failed to retrieve user from database",
                details={"user_id": user_id, "error": str(e)},
            ) from e

        return UserIdentity.from_record(row) if row else None
