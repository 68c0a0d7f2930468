"""Verified credential claims."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TokenClaims:
    """Identity asserted by a verified credential."""

    subject_id: str
    email: str
    role: str
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
