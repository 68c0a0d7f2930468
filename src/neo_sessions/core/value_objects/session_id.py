"""Session ID value object with generation and masking."""

import re
import secrets
from dataclasses import dataclass
from typing import ClassVar, Pattern


@dataclass(frozen=True)
class SessionId:
    """Opaque session identifier.

    Generated ids are 32 bytes from the OS CSPRNG, hex-encoded.
    """

    value: str

    BYTE_LENGTH: ClassVar[int] = 32
    HEX_PATTERN: ClassVar[Pattern[str]] = re.compile(r"^[0-9a-f]{64}$")

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("Session ID must be a string")
        if not self.value:
            raise ValueError("Session ID cannot be empty")

    @classmethod
    def generate(cls) -> "SessionId":
        """Generate a cryptographically secure session ID."""
        return cls(secrets.token_hex(cls.BYTE_LENGTH))

    @property
    def is_generated_format(self) -> bool:
        """Whether the value looks like an id produced by ``generate``."""
        return bool(self.HEX_PATTERN.match(self.value))

    def mask_for_logging(self) -> str:
        """Return masked session ID safe for logging."""
        if len(self.value) <= 12:
            return "***"
        return f"{self.value[:6]}...{self.value[-6:]}"

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"SessionId(value='{self.mask_for_logging()}')"
