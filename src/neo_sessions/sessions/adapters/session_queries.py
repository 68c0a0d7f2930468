"""
Session store SQL queries and utilities.

Provides SQL queries and helper functions for the durable session table.
"""
from typing import Any, Dict, Tuple

from ..entities.session import SessionRecord


class SessionQueries:
    """SQL queries for session operations with a configurable schema."""

    def __init__(self, schema: str = "public"):
        """
        Initialize session queries with configurable schema.

        Args:
            schema: Schema holding the users and user_sessions tables
        """
        self.schema = schema

    @property
    def INSERT_SESSION(self) -> str:
        return f"""
            INSERT INTO {self.schema}.user_sessions
            (id, user_id, token, expires_at, created_at, is_active, ip_address, user_agent)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
        """

    @property
    def GET_ACTIVE_SESSION_WITH_USER(self) -> str:
        return f"""
            SELECT s.id, s.user_id, s.token, s.expires_at, s.created_at, s.is_active,
                   s.ip_address, s.user_agent, u.email, u.role
            FROM {self.schema}.user_sessions s
            JOIN {self.schema}.users u ON u.id = s.user_id
            WHERE s.id = $1 AND s.is_active = TRUE AND s.expires_at > $2
        """

    @property
    def GET_SESSION_OWNER(self) -> str:
        return f"""
            SELECT user_id FROM {self.schema}.user_sessions
            WHERE id = $1
        """

    @property
    def DEACTIVATE_SESSION(self) -> str:
        return f"""
            UPDATE {self.schema}.user_sessions
            SET is_active = FALSE
            WHERE id = $1 AND is_active = TRUE
        """

    @property
    def DEACTIVATE_USER_SESSIONS(self) -> str:
        return f"""
            UPDATE {self.schema}.user_sessions
            SET is_active = FALSE
            WHERE user_id = $1 AND is_active = TRUE
        """

    @property
    def UPDATE_EXPIRY(self) -> str:
        # Expiry only ever moves forward
        return f"""
            UPDATE {self.schema}.user_sessions
            SET expires_at = GREATEST(expires_at, $2)
            WHERE id = $1 AND is_active = TRUE
        """

    @property
    def GET_EXPIRED_OR_INACTIVE(self) -> str:
        return f"""
            SELECT id, user_id FROM {self.schema}.user_sessions
            WHERE expires_at < $1 OR is_active = FALSE
        """

    @property
    def DELETE_SESSIONS(self) -> str:
        return f"""
            DELETE FROM {self.schema}.user_sessions
            WHERE id = ANY($1::text[])
        """

    @property
    def GET_USER(self) -> str:
        return f"""
            SELECT id, email, role, status FROM {self.schema}.users
            WHERE id = $1
        """


class SessionUtils:
    """Conversion helpers between records and query parameters."""

    @staticmethod
    def record_to_params(record: SessionRecord) -> Tuple[Any, ...]:
        return (
            record.session_id,
            record.user_id,
            record.token,
            record.expires_at,
            record.created_at,
            record.is_active,
            record.ip_address,
            record.user_agent,
        )

    @staticmethod
    def row_to_dict(row: Any) -> Dict[str, Any]:
        return dict(row)

    @staticmethod
    def extract_row_count(result: str) -> int:
        """Extract the affected row count from an asyncpg status string."""
        try:
            return int(result.split()[-1])
        except (AttributeError, IndexError, ValueError):
            return 0
