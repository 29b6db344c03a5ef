"""Pytest fixtures for TaskHive tests."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from taskhive.config.settings import Settings
from taskhive.core.context import IdentityContext, create_context
from taskhive.core.security import PasswordHasher, TokenService
from taskhive.core.types import Role
from taskhive.db.config import use_immediate_transactions
from taskhive.db.models import Base, Project, Task, Tenant, User

TEST_PASSWORD = "password123"


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Settings & security
# =============================================================================


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for tests: a throwaway SQLite file and cheap bcrypt."""
    return Settings(
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'taskhive.db'}",
        JWT_SECRET=SecretStr("test-jwt-secret-long-enough-for-hs256"),
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture
def hasher(test_settings: Settings) -> PasswordHasher:
    return PasswordHasher(rounds=test_settings.BCRYPT_ROUNDS)


@pytest.fixture
def token_service(test_settings: Settings) -> TokenService:
    return TokenService.from_settings(test_settings)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh database per test."""
    engine = create_async_engine(test_settings.DATABASE_URL, echo=False)
    use_immediate_transactions(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def svc_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session handed to services, separate from the one seeding data.

    Units of work commit or roll back this session; seeded objects stay loaded.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def fetch(session_factory):
    """Load a row by primary key in a fresh session (None if it is gone)."""

    async def _fetch(model: type, pk: Any) -> Any:
        async with session_factory() as session:
            return await session.get(model, pk)

    return _fetch


# =============================================================================
# Data builders
# =============================================================================


class Seeder:
    """Inserts rows directly, bypassing services, and commits each one."""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher):
        self.session = session
        self.hasher = hasher
        self._password_hash: str | None = None

    async def _save(self, obj: Any) -> Any:
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def tenant(self, subdomain: str = "acme", **kwargs: Any) -> Tenant:
        kwargs.setdefault("name", subdomain.title())
        return await self._save(Tenant(subdomain=subdomain, **kwargs))

    async def user(
        self,
        tenant: Tenant | None,
        email: str,
        role: Role = Role.USER,
        **kwargs: Any,
    ) -> User:
        if self._password_hash is None:
            self._password_hash = self.hasher.hash_sync(TEST_PASSWORD)
        return await self._save(
            User(
                tenant_id=tenant.id if tenant else None,
                email=email,
                password_hash=self._password_hash,
                role=role.value,
                **kwargs,
            )
        )

    async def project(self, tenant: Tenant, creator: User | None, name: str = "Website", **kwargs: Any) -> Project:
        return await self._save(
            Project(
                tenant_id=tenant.id,
                name=name,
                created_by=creator.id if creator else None,
                **kwargs,
            )
        )

    async def task(self, project: Project, creator: User | None, title: str = "Task", **kwargs: Any) -> Task:
        kwargs.setdefault("tenant_id", project.tenant_id)
        return await self._save(
            Task(
                project_id=project.id,
                title=title,
                created_by=creator.id if creator else None,
                **kwargs,
            )
        )


@pytest.fixture
def seed(db_session: AsyncSession, hasher: PasswordHasher) -> Seeder:
    return Seeder(db_session, hasher)


@pytest_asyncio.fixture
async def tenant_a(seed: Seeder) -> Tenant:
    return await seed.tenant("acme", name="Acme")


@pytest_asyncio.fixture
async def tenant_b(seed: Seeder) -> Tenant:
    return await seed.tenant("globex", name="Globex")


@pytest_asyncio.fixture
async def admin_a(seed: Seeder, tenant_a: Tenant) -> User:
    return await seed.user(tenant_a, "admin@acme.test", Role.TENANT_ADMIN, first_name="Ada")


@pytest_asyncio.fixture
async def member_a(seed: Seeder, tenant_a: Tenant) -> User:
    return await seed.user(tenant_a, "member@acme.test", Role.USER, first_name="Max")


@pytest_asyncio.fixture
async def admin_b(seed: Seeder, tenant_b: Tenant) -> User:
    return await seed.user(tenant_b, "admin@globex.test", Role.TENANT_ADMIN)


@pytest_asyncio.fixture
async def super_admin(seed: Seeder) -> User:
    return await seed.user(None, "root@platform.test", Role.SUPER_ADMIN)


# =============================================================================
# API test fixtures
# =============================================================================


@pytest.fixture
def test_app(test_settings: Settings, session_factory) -> FastAPI:
    """Create a FastAPI test application bound to the test database."""
    from taskhive.api.app import create_app
    from taskhive.db.dependencies import get_db

    app = create_app(settings=test_settings)

    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    return app


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing.

    Provides an httpx.AsyncClient configured to call the test application
    directly without network overhead.
    """
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def auth_headers(token_service: TokenService):
    """Build an Authorization header for a user."""

    def _headers(user: User) -> dict[str, str]:
        token = token_service.issue(user.id, user.tenant_id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def identity():
    """Build the identity a token issued for a user would carry."""

    def _identity(user: User) -> IdentityContext:
        return create_context(user_id=user.id, tenant_id=user.tenant_id, role=Role(user.role))

    return _identity
