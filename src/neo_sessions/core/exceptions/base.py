"""Root of the neo-sessions exception hierarchy.

Every error carries a machine-readable code (the class name unless given)
and a ``details`` mapping that is safe to log and to return to clients.
"""

from typing import Any, Dict, Optional


class NeoSessionsError(Exception):
    """Base exception for all neo-sessions errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
            "type": type(self).__name__,
        }


def create_error_response(exception: NeoSessionsError) -> Dict[str, Any]:
    """Wrap an error in the ``{"error": {...}}`` response envelope."""
    return {"error": exception.to_dict()}
