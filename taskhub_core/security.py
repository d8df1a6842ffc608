"""
Password hashing and session tokens.

Tokens are stateless HS256 JWTs: ``sub`` holds the user id, ``username``
the display name, ``exp`` the expiry. Nothing is stored server-side.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from taskhub_core.constants import DEFAULT_TOKEN_TTL_DAYS, TOKEN_ALGORITHM
from taskhub_core.exceptions import InvalidTokenError, UnauthenticatedError


@dataclass(frozen=True)
class Identity:
    """Resolved caller identity attached to every authorized operation."""
    user_id: int
    username: str


class PasswordHasher:
    """One-way password hashing; the CPU work runs off the event loop."""

    def __init__(self, schemes: Optional[list[str]] = None):
        self._context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto")
        # compared against when the username is unknown, so login timing
        # does not reveal which usernames exist
        self._dummy_hash = self._context.hash("taskhub-dummy-password")

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._context.hash, password)

    async def verify(self, password: str, hashed: Optional[str]) -> bool:
        return await asyncio.to_thread(self._context.verify, password, hashed or self._dummy_hash)


class TokenIssuer:
    """Signs identities into expiring tokens and verifies them back."""

    def __init__(self, secret_key: str, ttl_days: int = DEFAULT_TOKEN_TTL_DAYS,
                 algorithm: str = TOKEN_ALGORITHM):
        if not secret_key:
            raise ValueError("TokenIssuer requires a non-empty secret key")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl = timedelta(days=ttl_days)

    def issue(self, identity: Identity) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(identity.user_id),
            "username": identity.username,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        if not token:
            raise UnauthenticatedError()
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidTokenError() from exc

        subject = payload.get("sub")
        username = payload.get("username")
        if not subject or not isinstance(username, str):
            raise InvalidTokenError()
        try:
            user_id = int(subject)
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc
        return Identity(user_id=user_id, username=username)
