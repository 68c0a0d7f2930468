"""Authentication and session exceptions for neo-sessions."""

from typing import Any, Dict, Optional

from .base import NeoSessionsError


class AuthenticationError(NeoSessionsError):
    """Base exception for authentication errors."""
    pass


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid."""
    pass


class TokenExpiredError(InvalidTokenError):
    """Raised when a JWT token has expired."""
    pass


class SessionInvalid(AuthenticationError):
    """Raised when a session cannot be used.

    The session manager itself collapses invalidity into ``None``; this
    exception is used by the route guard and by callers that prefer raising.
    """

    def __init__(
        self,
        message: str = "Session is invalid",
        *,
        session_id: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.session_id = mask_session_id(session_id) if session_id else None
        self.reason = reason
        super().__init__(
            message,
            details={
                "session_id": self.session_id,
                "reason": reason,
                **(context or {}),
            },
        )

    @classmethod
    def missing(cls) -> "SessionInvalid":
        """Create exception for a request without a session id."""
        return cls("Session id is required", reason="missing")

    @classmethod
    def rejected(cls, session_id: str) -> "SessionInvalid":
        """Create exception for a session id that did not validate."""
        return cls("Session is invalid or expired", session_id=session_id, reason="rejected")


def mask_session_id(session_id: str) -> str:
    """Mask session ID for security in logs."""
    if not session_id or len(session_id) <= 12:
        return "***"
    return f"{session_id[:6]}...{session_id[-6:]}"
