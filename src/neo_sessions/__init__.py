"""Neo-Sessions - dual-store session lifecycle for the NeoMultiTenant platform.

Redis-backed sessions with PostgreSQL as the system of record, cache
recovery, expiry reconciliation and multi-session invalidation.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__
from .config import SessionSettings, get_settings
from .core.exceptions import (
    AuthenticationError,
    CacheError,
    DatabaseError,
    InvalidTokenError,
    NeoSessionsError,
    SessionInvalid,
    TokenExpiredError,
)
from .core.value_objects import SessionId
from .sessions import (
    JWTTokenIssuer,
    PersistenceOutcome,
    PostgresSessionStore,
    PostgresUserLookup,
    RedisFastStore,
    SessionAuthDependencies,
    SessionCleanupScheduler,
    SessionCreateResult,
    SessionManager,
    SessionManagerFactory,
    SessionRecord,
    SessionSummary,
    UserIdentity,
    UserStatus,
    session_lifespan,
)

__all__ = [
    "__version__",
    "SessionSettings",
    "get_settings",
    "AuthenticationError",
    "CacheError",
    "DatabaseError",
    "InvalidTokenError",
    "NeoSessionsError",
    "SessionInvalid",
    "TokenExpiredError",
    "SessionId",
    "JWTTokenIssuer",
    "PersistenceOutcome",
    "PostgresSessionStore",
    "PostgresUserLookup",
    "RedisFastStore",
    "SessionAuthDependencies",
    "SessionCleanupScheduler",
    "SessionCreateResult",
    "SessionManager",
    "SessionManagerFactory",
    "SessionRecord",
    "SessionSummary",
    "UserIdentity",
    "UserStatus",
    "session_lifespan",
]
