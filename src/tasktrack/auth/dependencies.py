"""FastAPI auth dependencies — the authentication gate.

Learn: These are used as Depends() in route handlers (or on a whole
router via include_router(dependencies=...)) to turn the Authorization
header into a CurrentIdentity. Two checkpoints, two distinct failures:

1. Presence — no `Bearer <token>` header → 401 "Access token required"
2. Validity — token doesn't verify, or its user no longer exists
   → 403 "Invalid or expired token"

"Please log in" vs "your session is broken" — both unauthenticated,
but the client can react differently to each.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.jwt import TokenError, TokenService
from tasktrack.db.engine import get_db
from tasktrack.errors import InvalidCredential, MissingCredential
from tasktrack.services.user_service import UserService


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated user making the request (never the password hash).

    Learn: All downstream code uses user_id to scope task queries.
    """

    user_id: uuid.UUID
    username: str
    email: str


def get_token_service(request: Request) -> TokenService:
    """The process-wide token service built by create_app()."""
    return request.app.state.token_service


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a `Bearer <token>` header, or None."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Resolve the request's bearer token to a CurrentIdentity.

    Raises MissingCredential (401) or InvalidCredential (403).
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise MissingCredential()

    try:
        claims = tokens.verify(token)
    except TokenError:
        raise InvalidCredential()

    # Token is genuine but the account may be gone
    user = await UserService(db).find_by_id(claims.sub)
    if not user:
        raise InvalidCredential()

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return CurrentIdentity(user_id=user.id, username=user.username, email=user.email)
