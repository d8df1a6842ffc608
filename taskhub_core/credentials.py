"""
Credential store: registration, login and user lookup.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub_core.constants import MIN_PASSWORD_LENGTH
from taskhub_core.exceptions import (
    InvalidCredentialsError,
    MissingFieldsError,
    UsernameTakenError,
    WeakPasswordError,
)
from taskhub_core.models import User
from taskhub_core.security import PasswordHasher

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Persists username -> password hash.

    The pre-insert lookup only gives a friendly early answer; the UNIQUE
    constraint on ``users.username`` is what actually rejects duplicates
    when two registrations race.
    """

    def __init__(self, session: AsyncSession, hasher: PasswordHasher):
        self.session = session
        self.hasher = hasher

    async def _find(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def register(self, username: Optional[str], password: Optional[str]) -> User:
        username = (username or "").strip()
        password = password or ""
        if not username or not password:
            raise MissingFieldsError()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPasswordError()
        if await self._find(username) is not None:
            raise UsernameTakenError()

        user = User(username=username, password_hash=await self.hasher.hash(password))
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise UsernameTakenError() from exc

        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    async def login(self, username: Optional[str], password: Optional[str]) -> User:
        username = (username or "").strip()
        password = password or ""
        if not username or not password:
            raise MissingFieldsError()

        user = await self._find(username)
        verified = await self.hasher.verify(password, user.password_hash if user else None)
        if user is None or not verified:
            raise InvalidCredentialsError()
        return user
