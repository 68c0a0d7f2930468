"""Session services."""

from .session_cleanup_scheduler import SessionCleanupScheduler
from .session_manager import DEFAULT_SESSION_TTL, SessionManager

__all__ = ["DEFAULT_SESSION_TTL", "SessionCleanupScheduler", "SessionManager"]
