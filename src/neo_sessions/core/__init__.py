"""Core exceptions and value objects shared across neo-sessions."""
