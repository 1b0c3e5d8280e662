"""User service — the credential store.

Learn: Users are created once (registration) and read on login and on
every authenticated request. There is no update or delete. The password
is hashed before it ever reaches the ORM object, and the hash never
leaves this layer: routes project users through UserPublic.

bcrypt is CPU-bound (~50ms at 10 rounds), so hashing and checking run in
a worker thread instead of blocking the event loop.
"""

import uuid
from typing import Optional, Union

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from tasktrack.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from tasktrack.db.models import User
from tasktrack.errors import ErrorKind, Failure

logger = structlog.get_logger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Persisted user records + secret hashing/comparison."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = DEFAULT_ROUNDS):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    # ─── Create ──────────────────────────────────────────

    async def create_user(
        self, username: str, email: str, password: str
    ) -> Union[User, Failure]:
        """Create a user, or return a Conflict failure on duplicate identity.

        Learn: One lookup matching EITHER field detects duplicates. The
        unique constraints catch the race where two registrations pass
        the lookup at the same time.
        """
        email = normalize_email(email)

        existing = await self.find_by_username_or_email(username, email)
        if existing:
            return self._duplicate_failure(existing, email)

        password_hash = await run_in_threadpool(
            hash_password, password, self.bcrypt_rounds
        )
        user = User(username=username, email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("user.duplicate_race", username=username)
            existing = await self.find_by_username_or_email(username, email)
            if existing:
                return self._duplicate_failure(existing, email)
            return Failure(ErrorKind.CONFLICT, "Username or email already registered")

        await self.db.refresh(user)
        return user

    @staticmethod
    def _duplicate_failure(existing: User, email: str) -> Failure:
        if existing.email == email:
            return Failure(ErrorKind.CONFLICT, "Email already registered")
        return Failure(ErrorKind.CONFLICT, "Username already taken")

    # ─── Read ────────────────────────────────────────────

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    async def find_by_id(self, user_id: Union[str, uuid.UUID]) -> Optional[User]:
        """Look up a user by id. Malformed ids resolve to None."""
        if not isinstance(user_id, uuid.UUID):
            try:
                user_id = uuid.UUID(str(user_id))
            except ValueError:
                return None
        return await self.db.get(User, user_id)

    async def find_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(
                or_(User.username == username, User.email == normalize_email(email))
            )
        )
        return result.scalars().first()

    # ─── Secrets ─────────────────────────────────────────

    async def verify_secret(self, user: User, candidate: str) -> bool:
        return await run_in_threadpool(verify_password, candidate, user.password_hash)
