"""Exception hierarchy for neo-sessions."""

from .auth import (
    AuthenticationError,
    InvalidTokenError,
    SessionInvalid,
    TokenExpiredError,
    mask_session_id,
)
from .base import NeoSessionsError, create_error_response
from .infrastructure import (
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
    CacheTimeoutError,
    DatabaseError,
    QueryError,
    QueryTimeoutError,
)

__all__ = [
    "NeoSessionsError",
    "create_error_response",
    "AuthenticationError",
    "InvalidTokenError",
    "TokenExpiredError",
    "SessionInvalid",
    "mask_session_id",
    "CacheError",
    "CacheConnectionError",
    "CacheSerializationError",
    "CacheTimeoutError",
    "DatabaseError",
    "QueryError",
    "QueryTimeoutError",
]
