"""FastAPI dependencies for API endpoints."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.config.settings import Settings, get_settings
from taskhive.core.context import IdentityContext
from taskhive.core.exceptions import AuthenticationError
from taskhive.core.security import PasswordHasher
from taskhive.db.dependencies import get_db
from taskhive.services import (
    AuthService,
    ProjectService,
    TaskService,
    TenantService,
    UserService,
)

__all__ = [
    "get_db",
    "get_app_settings",
    "get_identity",
    "get_request_id",
    "get_auth_service",
    "get_tenant_service",
    "get_user_service",
    "get_project_service",
    "get_task_service",
]

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_identity(request: Request) -> IdentityContext:
    """Get the authenticated identity for the request.

    This dependency requires AuthenticationMiddleware to be active.

    Raises:
        AuthenticationError: If no identity was established
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise AuthenticationError("Authentication required")
    return identity


def get_request_id(request: Request) -> str:
    """Get the request ID from request state (UUIDv7 as string)."""
    return str(getattr(request.state, "request_id", "unknown"))


def get_auth_service(
    db: DbSession, settings: Annotated[Settings, Depends(get_app_settings)]
) -> AuthService:
    return AuthService(db, settings=settings)


def get_tenant_service(db: DbSession) -> TenantService:
    return TenantService(db)


def get_user_service(
    db: DbSession, settings: Annotated[Settings, Depends(get_app_settings)]
) -> UserService:
    return UserService(db, hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS))


def get_project_service(db: DbSession) -> ProjectService:
    return ProjectService(db)


def get_task_service(db: DbSession) -> TaskService:
    return TaskService(db)
