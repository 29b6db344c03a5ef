"""Tenant registration, login and the current profile."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils.compat import uuid7

from taskhive.config.settings import Settings, get_settings
from taskhive.core.context import IdentityContext
from taskhive.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from taskhive.core.logging import get_logger
from taskhive.core.security import PasswordHasher, TokenService
from taskhive.core.types import EntityKind, Role, TenantStatus
from taskhive.db.models import Tenant, User
from taskhive.db.repositories import TenantRepository, UserRepository
from taskhive.db.schemas import (
    LoginRequest,
    LoginResult,
    Profile,
    RegistrationResult,
    TenantRegistration,
    TenantResponse,
    UserResponse,
    parse_payload,
)

from .base import EntityService

logger = get_logger("taskhive.services.auth")

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService(EntityService):
    """Registers tenants and authenticates users.

    Args:
        db: Async SQLAlchemy session
        settings: Tenant defaults and token configuration (default: global settings)
        hasher: Password hasher (default: bcrypt with the configured cost)
        tokens: Token signer (default: built from settings)
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        hasher: PasswordHasher | None = None,
        tokens: TokenService | None = None,
    ):
        super().__init__(db)
        self.settings = settings or get_settings()
        self.hasher = hasher or PasswordHasher(rounds=self.settings.BCRYPT_ROUNDS)
        self.tokens = tokens or TokenService.from_settings(self.settings)
        self.tenants = TenantRepository(db)
        self.users = UserRepository(db)

    async def register_tenant(self, payload: Mapping[str, Any] | None) -> RegistrationResult:
        """Create a tenant and its first tenant_admin in one unit.

        Writes two audit entries, one for the tenant and one for the admin,
        both attributed to the new admin.

        Raises:
            ValidationFailedError: If the payload is invalid
            ConflictError: If the subdomain is taken; nothing is persisted
        """
        data = parse_payload(TenantRegistration, payload)
        plan = (data.plan.value if data.plan else None) or self.settings.DEFAULT_PLAN
        password_hash = await self.hasher.hash(data.admin.password)
        admin_id = uuid7()

        async with self.transactor.unit(None, conflict_message="Subdomain already in use") as unit:
            if await self.tenants.get_by_subdomain(data.subdomain) is not None:
                raise ConflictError("Subdomain already in use")

            tenant = await unit.insert(
                Tenant(
                    name=data.name,
                    subdomain=data.subdomain,
                    plan=plan,
                    status=TenantStatus.ACTIVE.value,
                    max_users=self.settings.DEFAULT_MAX_USERS,
                    max_projects=self.settings.DEFAULT_MAX_PROJECTS,
                ),
                metadata={"subdomain": data.subdomain, "plan": plan},
                actor_id=admin_id,
            )

            if await self.users.get_by_email(tenant.id, data.admin.email) is not None:
                raise ConflictError("Email already exists in tenant")

            admin = await unit.insert(
                User(
                    id=admin_id,
                    tenant_id=tenant.id,
                    email=data.admin.email,
                    password_hash=password_hash,
                    role=Role.TENANT_ADMIN.value,
                    first_name=data.admin.first_name,
                    last_name=data.admin.last_name,
                ),
                metadata={"email": data.admin.email, "role": Role.TENANT_ADMIN.value},
                actor_id=admin_id,
            )

            result = RegistrationResult(
                token=self.tokens.issue(admin.id, tenant.id, Role.TENANT_ADMIN),
                user=UserResponse.model_validate(admin),
                tenant=TenantResponse.model_validate(tenant),
            )

        logger.info("tenant_registered", new_tenant_id=str(tenant.id), subdomain=tenant.subdomain)
        return result

    async def login(self, payload: Mapping[str, Any] | None) -> LoginResult:
        """Exchange credentials for a token.

        With a subdomain the email is looked up in that tenant; without one
        only platform users (no tenant) can log in.

        Raises:
            ValidationFailedError: If email or password is missing
            NotFoundError: If the subdomain is unknown
            AuthenticationError: If the email or password does not match
        """
        data = parse_payload(LoginRequest, payload)

        async with self.transactor.unit(None):
            tenant_id = None
            if data.subdomain:
                tenant = await self.tenants.get_by_subdomain(data.subdomain)
                if tenant is None:
                    raise NotFoundError(EntityKind.TENANT.value, data.subdomain, message="Tenant not found")
                tenant_id = tenant.id

            user = await self.users.get_by_email(tenant_id, data.email)
            if user is None or not await self.hasher.verify(data.password, user.password_hash):
                logger.warning("login_failed", subdomain=data.subdomain)
                raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("login_succeeded", login_user_id=str(user.id))
        return LoginResult(
            token=self.tokens.issue(user.id, user.tenant_id, user.role),
            user=UserResponse.model_validate(user),
        )

    async def me(self, requester: IdentityContext) -> Profile:
        """Profile of the authenticated user and their tenant."""
        async with self.transactor.unit(requester):
            user = await self.users.get_or_raise(requester.user_id)
            tenant = await self.tenants.get(user.tenant_id) if user.tenant_id else None
            return Profile(
                user=UserResponse.model_validate(user),
                tenant=TenantResponse.model_validate(tenant) if tenant else None,
            )
