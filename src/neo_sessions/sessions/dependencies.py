"""FastAPI session dependencies for route guards."""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status

from ..core.exceptions import SessionInvalid, create_error_response, mask_session_id
from .entities.user import UserIdentity
from .services.session_manager import SessionManager

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"
SESSION_COOKIE = "session_id"


class SessionDependencyError(HTTPException):
    """401 raised when a request carries no usable session."""

    def __init__(self, error: SessionInvalid):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=create_error_response(error)["error"],
        )


def extract_session_id(request: Request) -> Optional[str]:
    """Read the session id from the header, falling back to the cookie."""
    session_id = request.headers.get(SESSION_HEADER) or request.cookies.get(SESSION_COOKIE)
    if session_id:
        session_id = session_id.strip()
    return session_id or None


def get_session_manager(request: Request) -> SessionManager:
    """Session manager placed on ``app.state`` at startup."""
    manager = getattr(request.app.state, "session_manager", None)
    if manager is None:
        raise RuntimeError("Session manager is not configured on app.state")
    return manager


class SessionAuthDependencies:
    """FastAPI dependencies resolving a session id to a user identity."""

    def __init__(self, session_manager: Optional[SessionManager] = None):
        """Initialize session dependencies.

        Args:
            session_manager: Manager to use; read from ``app.state`` when None
        """
        self._session_manager = session_manager

    def _manager(self, request: Request) -> SessionManager:
        return self._session_manager or get_session_manager(request)

    async def optional_user(self, request: Request) -> Optional[UserIdentity]:
        """Current user, or None when the request has no valid session."""
        session_id = extract_session_id(request)
        if session_id is None:
            return None
        return await self._manager(request).validate_session_token(session_id)

    async def require_user(self, request: Request) -> UserIdentity:
        """Current user; rejects the request with 401 otherwise."""
        session_id = extract_session_id(request)
        if session_id is None:
            raise SessionDependencyError(SessionInvalid.missing())

        user = await self._manager(request).validate_session_token(session_id)
        if user is None:
            logger.debug(f"Rejected session {mask_session_id(session_id)}")
            raise SessionDependencyError(SessionInvalid.rejected(session_id))

        request.state.session_id = session_id
        request.state.user = user
        return user
