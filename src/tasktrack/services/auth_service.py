"""Auth service — registration and login flows.

Learn: Both flows end the same way: a freshly issued token plus the
public projection of the user. Expected failures come back as Failure
values, never exceptions:
- register → Conflict when the username or email is taken
- login → AuthenticationFailed with the SAME message whether the email
  is unknown or the password is wrong (no account enumeration)
"""

from dataclasses import dataclass
from typing import Union

import structlog

from tasktrack.auth.jwt import TokenService
from tasktrack.db.models import User
from tasktrack.errors import ErrorKind, Failure
from tasktrack.services.user_service import UserService

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class AuthSession:
    """Result of a successful register/login."""

    token: str
    user: User


class AuthService:
    """Orchestrates the credential store and the token service."""

    def __init__(self, users: UserService, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    async def register(
        self, username: str, email: str, password: str
    ) -> Union[AuthSession, Failure]:
        result = await self.users.create_user(username, email, password)
        if isinstance(result, Failure):
            logger.info("auth.register_rejected", reason=result.message)
            return result

        logger.info("auth.registered", user_id=str(result.id))
        return AuthSession(token=self.tokens.issue(str(result.id)), user=result)

    async def login(self, email: str, password: str) -> Union[AuthSession, Failure]:
        user = await self.users.find_by_email(email)
        if not user or not await self.users.verify_secret(user, password):
            logger.info("auth.login_failed")
            return Failure(ErrorKind.AUTHENTICATION_FAILED, INVALID_CREDENTIALS)

        logger.info("auth.login", user_id=str(user.id))
        return AuthSession(token=self.tokens.issue(str(user.id)), user=user)
