"""Dual-store session lifecycle feature."""

from .adapters import (
    JWTTokenIssuer,
    PostgresSessionStore,
    PostgresUserLookup,
    RedisFastStore,
)
from .dependencies import SessionAuthDependencies, extract_session_id, get_session_manager
from .entities import (
    PersistenceOutcome,
    SessionCreateResult,
    SessionRecord,
    SessionSummary,
    TokenClaims,
    UserIdentity,
    UserStatus,
)
from .factories import SessionComponents, SessionManagerFactory, session_lifespan
from .services import SessionCleanupScheduler, SessionManager

__all__ = [
    "JWTTokenIssuer",
    "PostgresSessionStore",
    "PostgresUserLookup",
    "RedisFastStore",
    "SessionAuthDependencies",
    "extract_session_id",
    "get_session_manager",
    "PersistenceOutcome",
    "SessionCreateResult",
    "SessionRecord",
    "SessionSummary",
    "TokenClaims",
    "UserIdentity",
    "UserStatus",
    "SessionComponents",
    "SessionManagerFactory",
    "session_lifespan",
    "SessionCleanupScheduler",
    "SessionManager",
]
