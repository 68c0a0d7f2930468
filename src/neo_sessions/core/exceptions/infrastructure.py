"""Infrastructure-specific exceptions for neo-sessions.

Errors raised by the fast store (Redis) and durable store (PostgreSQL)
clients.
"""

from .base import NeoSessionsError


# Cache Errors
class CacheError(NeoSessionsError):
    """Base class for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """Raised when cache connection fails."""
    pass


class CacheSerializationError(CacheError):
    """Raised when cache value serialization/deserialization fails."""
    pass


class CacheTimeoutError(CacheError):
    """Raised when cache operation times out."""
    pass


# Database Errors
class DatabaseError(NeoSessionsError):
    """Base class for database errors."""
    pass


class QueryError(DatabaseError):
    """Raised when a query fails."""
    pass


class QueryTimeoutError(QueryError):
    """Raised when a query exceeds its timeout."""
    pass
