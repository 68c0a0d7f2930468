"""JWT credential issuing and verification."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError
from jwt.exceptions import InvalidTokenError as JWTInvalidTokenError

from ...core.exceptions import InvalidTokenError, TokenExpiredError
from ..entities.credentials import TokenClaims
from ..entities.user import UserIdentity

logger = logging.getLogger(__name__)


class JWTTokenIssuer:
    """Signs and verifies HMAC JWTs carrying ``sub``, ``email`` and ``role``."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_in_seconds: int = 86400,
        leeway_seconds: int = 0,
    ):
        if not secret:
            raise ValueError("JWT secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in_seconds = expires_in_seconds
        self.leeway_seconds = leeway_seconds

    def issue(self, user: UserIdentity, now: Optional[datetime] = None) -> str:
        """Mint a signed credential for a user."""
        issued_at = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": user.id,
            "email": user.email,
            "role": user.role,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.expires_in_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify a credential and return its claims.

        Raises:
            TokenExpiredError: If the token is past its ``exp``
            InvalidTokenError: If the signature or claims are invalid
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                leeway=self.leeway_seconds,
                options={"require": ["sub", "exp"]},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JWTInvalidTokenError as e:
            logger.debug(f"Token verification failed: {e}")
            raise InvalidTokenError("Token verification failed", details={"error": str(e)}) from e

        if "email" not in claims or "role" not in claims:
            raise InvalidTokenError("Token is missing identity claims")

        return TokenClaims(
            subject_id=str(claims["sub"]),
            email=claims["email"],
            role=str(claims["role"]),
            issued_at=self._timestamp(claims.get("iat")),
            expires_at=self._timestamp(claims.get("exp")),
        )

    @staticmethod
    def _timestamp(value: Any) -> Optional[datetime]:
        if value is None:
            return None
        return datetime.fromtimestamp(value, tz=timezone.utc)
