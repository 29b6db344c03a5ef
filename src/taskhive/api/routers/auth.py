"""Registration and login endpoints.

- POST /api/auth/register-tenant - Create a tenant and its admin
- POST /api/auth/login - Exchange credentials for a bearer token
- GET /api/auth/me - Current user and tenant
- POST /api/auth/logout - Client-side token discard
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status

from taskhive.api.dependencies import get_auth_service, get_identity
from taskhive.api.schemas.errors import APIError
from taskhive.core.context import IdentityContext
from taskhive.db.schemas import LoginResult, Profile, RegistrationResult
from taskhive.services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

Payload = Annotated[dict[str, Any] | None, Body()]


@router.post(
    "/register-tenant",
    response_model=RegistrationResult,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": APIError, "description": "Invalid registration"},
        409: {"model": APIError, "description": "Subdomain already in use"},
    },
)
async def register_tenant(
    service: Annotated[AuthService, Depends(get_auth_service)],
    payload: Payload = None,
) -> RegistrationResult:
    return await service.register_tenant(payload)


@router.post(
    "/login",
    response_model=LoginResult,
    responses={
        401: {"model": APIError, "description": "Invalid email or password"},
        404: {"model": APIError, "description": "Tenant not found"},
    },
)
async def login(
    service: Annotated[AuthService, Depends(get_auth_service)],
    payload: Payload = None,
) -> LoginResult:
    return await service.login(payload)


@router.get("/me", response_model=Profile, responses={401: {"model": APIError}})
async def me(
    identity: Annotated[IdentityContext, Depends(get_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> Profile:
    return await service.me(identity)


@router.post("/logout", responses={401: {"model": APIError}})
async def logout(
    identity: Annotated[IdentityContext, Depends(get_identity)],
) -> dict[str, str]:
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Logged out successfully"}
