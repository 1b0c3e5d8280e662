"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A token carries the user id (`sub`), when it was issued (`iat`) and when
it stops being valid (`exp`, 7 days later). Nothing is stored server-side,
so expiry is the only way a token is deactivated.

Verification collapses every failure (bad signature, garbage input,
expired) into a single TokenError — callers can't and shouldn't tell
them apart.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from tasktrack.config import Settings


class TokenError(Exception):
    """Raised when a token fails verification, whatever the reason."""


class MissingSigningKeyError(RuntimeError):
    """The server has no signing secret configured. Fatal, not per-request."""


@dataclass(frozen=True)
class Claims:
    """Decoded payload of a verified token."""

    sub: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_days: int = 7,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = timedelta(days=expires_days)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_days=settings.token_expire_days,
        )

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def _signing_key(self) -> str:
        if not self._secret:
            raise MissingSigningKeyError(
                "No JWT signing secret configured (TASKTRACK_JWT_SECRET)"
            )
        return self._secret

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Create a token for user_id, valid for the configured lifetime."""
        key = self._signing_key()
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self._lifetime,
        }
        return jwt.encode(payload, key, algorithm=self._algorithm)

    def verify(self, token: str) -> Claims:
        """Verify and decode a token.

        Returns the Claims on success.
        Raises TokenError on any failure.
        """
        key = self._signing_key()
        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.InvalidTokenError as e:
            # ExpiredSignatureError is a subclass, same outcome
            raise TokenError("Invalid or expired token") from e

        try:
            return Claims(
                sub=str(payload["sub"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenError("Invalid or expired token") from e
