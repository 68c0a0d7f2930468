"""Session entities, results and collaborator protocols."""

from .credentials import TokenClaims
from .protocols import (
    DurableSessionStoreProtocol,
    FastStoreProtocol,
    TokenIssuerProtocol,
    UserLookupProtocol,
)
from .results import PersistenceOutcome, SessionCreateResult, SessionSummary
from .session import SessionRecord, utcnow
from .user import UserIdentity, UserStatus

__all__ = [
    "TokenClaims",
    "DurableSessionStoreProtocol",
    "FastStoreProtocol",
    "TokenIssuerProtocol",
    "UserLookupProtocol",
    "PersistenceOutcome",
    "SessionCreateResult",
    "SessionSummary",
    "SessionRecord",
    "utcnow",
    "UserIdentity",
    "UserStatus",
]
