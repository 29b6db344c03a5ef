"""Credential hashing and bearer token handling.

Only pass/fail outcomes leave this module: a password matches or not, a
token yields an ``IdentityContext`` or raises ``AuthenticationError``.
"""

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import bcrypt
from jose import JWTError, jwt

from taskhive.config.settings import Settings
from taskhive.core.context import IdentityContext, create_context
from taskhive.core.exceptions import AuthenticationError
from taskhive.core.types import Role

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """bcrypt password hashing. Hashing runs in a worker thread."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_sync(self, password: str) -> str:
        pwd_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")

    def verify_sync(self, password: str, password_hash: str) -> bool:
        pwd_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pwd_bytes, password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify_sync, password, password_hash)


class TokenService:
    """Signs and verifies bearer tokens carrying ``{userId, tenantId, role}``."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            expires_minutes=settings.JWT_EXPIRES_MINUTES,
        )

    def issue(self, user_id: UUID, tenant_id: UUID | None, role: Role | str) -> str:
        now = datetime.now(UTC)
        claims: dict[str, Any] = {
            "sub": str(user_id),
            "userId": str(user_id),
            "tenantId": str(tenant_id) if tenant_id else None,
            "role": Role(role).value,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=self.expires_minutes)).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> IdentityContext:
        """Decode a token into the identity it was issued for.

        Raises:
            AuthenticationError: If the token is malformed, expired or tampered with
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthenticationError("Invalid or expired token") from e

        try:
            tenant_id = claims.get("tenantId")
            return create_context(
                user_id=UUID(claims["userId"]),
                tenant_id=UUID(tenant_id) if tenant_id else None,
                role=claims["role"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError("Invalid token claims") from e
