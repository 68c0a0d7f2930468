"""Store and credential adapters for the session manager."""

from .jwt_token_issuer import JWTTokenIssuer
from .postgres_session_store import PostgresSessionStore
from .postgres_user_lookup import PostgresUserLookup
from .redis_fast_store import RedisFastStore
from .session_queries import SessionQueries, SessionUtils

__all__ = [
    "JWTTokenIssuer",
    "PostgresSessionStore",
    "PostgresUserLookup",
    "RedisFastStore",
    "SessionQueries",
    "SessionUtils",
]
