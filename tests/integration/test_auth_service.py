"""Integration tests for tenant registration and login."""

import pytest
from sqlalchemy import func, select

from taskhive.core.audit import AuditLogger
from taskhive.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from taskhive.core.types import Role
from taskhive.db.models import Tenant
from taskhive.services import AuthService


def registration(subdomain: str = "initech", **overrides):
    payload = {
        "name": "Initech",
        "subdomain": subdomain,
        "admin": {
            "email": "bill@initech.test",
            "password": "password123",
            "firstName": "Bill",
            "lastName": "Lumbergh",
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def auth(svc_session, test_settings, hasher):
    return AuthService(svc_session, settings=test_settings, hasher=hasher)


class TestRegisterTenant:
    """Tests for tenant registration."""

    async def test_creates_tenant_and_admin(self, auth, token_service):
        result = await auth.register_tenant(registration())

        assert result.tenant.subdomain == "initech"
        assert result.tenant.plan.value == "pro"
        assert result.tenant.max_users == 5
        assert result.tenant.max_projects == 3
        assert result.user.role == Role.TENANT_ADMIN
        assert result.user.tenant_id == result.tenant.id
        assert result.user.first_name == "Bill"

        identity = token_service.verify(result.token)
        assert identity.user_id == result.user.id
        assert identity.tenant_id == result.tenant.id

    async def test_plan_may_be_chosen(self, auth):
        result = await auth.register_tenant(registration(plan="enterprise"))

        assert result.tenant.plan.value == "enterprise"

    async def test_writes_two_audit_entries_by_new_admin(self, auth, session_factory):
        result = await auth.register_tenant(registration())

        async with session_factory() as session:
            entries = await AuditLogger(session).query_entries(tenant_id=result.tenant.id)

        assert {(e.table_name, e.action) for e in entries} == {("tenants", "CREATE"), ("users", "CREATE")}
        assert all(e.actor_user_id == result.user.id for e in entries)
        user_entry = next(e for e in entries if e.table_name == "users")
        assert "password" not in str(user_entry.details)

    async def test_duplicate_subdomain_conflicts(self, auth, tenant_a):
        with pytest.raises(ConflictError, match="Subdomain already in use"):
            await auth.register_tenant(registration(subdomain=tenant_a.subdomain))

    async def test_subdomain_is_case_insensitive(self, auth, tenant_a):
        with pytest.raises(ConflictError):
            await auth.register_tenant(registration(subdomain=tenant_a.subdomain.upper()))

    async def test_failed_registration_persists_nothing(self, auth, tenant_a, session_factory):
        with pytest.raises(ConflictError):
            await auth.register_tenant(registration(subdomain=tenant_a.subdomain))

        async with session_factory() as session:
            entries = await AuditLogger(session).query_entries()
            tenant_count = await session.scalar(select(func.count(Tenant.id)))

        assert entries == []
        assert tenant_count == 1

    async def test_missing_fields(self, auth):
        with pytest.raises(ValidationFailedError) as exc_info:
            await auth.register_tenant({"name": "Initech"})

        assert "subdomain" in exc_info.value.message
        assert "admin" in exc_info.value.message


class TestLogin:
    """Tests for login."""

    async def test_login_with_subdomain(self, auth, tenant_a, admin_a):
        result = await auth.login(
            {"email": admin_a.email, "password": "password123", "subdomain": tenant_a.subdomain}
        )

        assert result.user.id == admin_a.id
        assert result.token

    async def test_wrong_password(self, auth, tenant_a, admin_a):
        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await auth.login({"email": admin_a.email, "password": "nope", "subdomain": "acme"})

    async def test_unknown_email_same_message(self, auth, tenant_a):
        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await auth.login({"email": "ghost@acme.test", "password": "x", "subdomain": "acme"})

    async def test_unknown_subdomain(self, auth):
        with pytest.raises(NotFoundError, match="Tenant not found"):
            await auth.login({"email": "a@b.test", "password": "x", "subdomain": "nowhere"})

    async def test_email_is_scoped_to_tenant(self, auth, tenant_b, admin_a):
        with pytest.raises(AuthenticationError):
            await auth.login({"email": admin_a.email, "password": "password123", "subdomain": tenant_b.subdomain})

    async def test_platform_login_without_subdomain(self, auth, super_admin, token_service):
        result = await auth.login({"email": super_admin.email, "password": "password123"})

        identity = token_service.verify(result.token)
        assert identity.is_super_admin
        assert identity.tenant_id is None

    async def test_tenant_user_needs_subdomain(self, auth, admin_a):
        with pytest.raises(AuthenticationError):
            await auth.login({"email": admin_a.email, "password": "password123"})


class TestProfile:
    async def test_me(self, auth, admin_a, tenant_a, identity):
        profile = await auth.me(identity(admin_a))

        assert profile.user.email == admin_a.email
        assert profile.tenant.id == tenant_a.id

    async def test_me_platform_user(self, auth, super_admin, identity):
        profile = await auth.me(identity(super_admin))

        assert profile.tenant is None
