"""Version information for neo-sessions."""

__version__ = "0.1.0"
