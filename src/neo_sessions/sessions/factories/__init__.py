"""Factories for session manager wiring."""

from .session_manager_factory import SessionComponents, SessionManagerFactory, session_lifespan

__all__ = ["SessionComponents", "SessionManagerFactory", "session_lifespan"]
