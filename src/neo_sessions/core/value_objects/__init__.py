"""Value objects for neo-sessions."""

from .session_id import SessionId

__all__ = ["SessionId"]
