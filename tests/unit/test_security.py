"""Unit tests for password hashing and bearer tokens."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from jose import jwt

from taskhive.core.exceptions import AuthenticationError
from taskhive.core.security import PasswordHasher, TokenService
from taskhive.core.types import Role

SECRET = "unit-test-secret-that-is-long-enough"


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenService(secret=SECRET, expires_minutes=5)


class TestPasswordHasher:
    """Tests for bcrypt hashing."""

    def test_hash_is_not_plaintext(self, hasher):
        hashed = hasher.hash_sync("password123")

        assert hashed != "password123"
        assert hashed.startswith("$2")

    def test_verify_round_trip(self, hasher):
        hashed = hasher.hash_sync("password123")

        assert hasher.verify_sync("password123", hashed)
        assert not hasher.verify_sync("password124", hashed)

    def test_verify_rejects_non_bcrypt_value(self, hasher):
        assert not hasher.verify_sync("password123", "not-a-hash")

    def test_long_passwords_do_not_fail(self, hasher):
        password = "p" * 100

        assert hasher.verify_sync(password, hasher.hash_sync(password))

    async def test_async_variants(self, hasher):
        hashed = await hasher.hash("s3cret")

        assert await hasher.verify("s3cret", hashed)


class TestTokenService:
    """Tests for issuing and verifying tokens."""

    def test_issue_and_verify(self, tokens):
        user_id, tenant_id = uuid4(), uuid4()

        ctx = tokens.verify(tokens.issue(user_id, tenant_id, Role.TENANT_ADMIN))

        assert ctx.user_id == user_id
        assert ctx.tenant_id == tenant_id
        assert ctx.role == Role.TENANT_ADMIN

    def test_super_admin_without_tenant(self, tokens):
        ctx = tokens.verify(tokens.issue(uuid4(), None, "super_admin"))

        assert ctx.is_super_admin
        assert ctx.tenant_id is None

    def test_claims_use_camel_case(self, tokens):
        user_id, tenant_id = uuid4(), uuid4()

        claims = jwt.decode(tokens.issue(user_id, tenant_id, Role.USER), SECRET, algorithms=["HS256"])

        assert claims["userId"] == str(user_id)
        assert claims["tenantId"] == str(tenant_id)
        assert claims["role"] == "user"

    def test_wrong_secret_rejected(self, tokens):
        token = TokenService(secret="another-secret-entirely-different").issue(uuid4(), uuid4(), Role.USER)

        with pytest.raises(AuthenticationError, match="Invalid or expired token"):
            tokens.verify(token)

    def test_expired_token_rejected(self, tokens):
        past = datetime.now(UTC) - timedelta(hours=1)
        token = jwt.encode(
            {
                "userId": str(uuid4()),
                "tenantId": str(uuid4()),
                "role": "user",
                "exp": int(past.timestamp()),
            },
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            tokens.verify(token)

    def test_garbage_rejected(self, tokens):
        with pytest.raises(AuthenticationError):
            tokens.verify("not.a.token")

    def test_missing_claims_rejected(self, tokens):
        token = jwt.encode({"role": "user"}, SECRET, algorithm="HS256")

        with pytest.raises(AuthenticationError, match="Invalid token claims"):
            tokens.verify(token)

    def test_tenant_role_without_tenant_rejected(self, tokens):
        token = jwt.encode({"userId": str(uuid4()), "tenantId": None, "role": "user"}, SECRET, algorithm="HS256")

        with pytest.raises(AuthenticationError):
            tokens.verify(token)
