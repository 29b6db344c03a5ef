"""Tenant and tenant-user endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status

from taskhive.api.dependencies import get_identity, get_tenant_service, get_user_service
from taskhive.api.schemas.errors import APIError
from taskhive.core.context import IdentityContext
from taskhive.db.schemas import TenantResponse, UserResponse
from taskhive.services import TenantService, UserService

router = APIRouter(prefix="/tenants", tags=["tenants"])

Identity = Annotated[IdentityContext, Depends(get_identity)]
Payload = Annotated[dict[str, Any] | None, Body()]

COMMON_ERRORS: dict[int | str, dict[str, Any]] = {
    401: {"model": APIError},
    403: {"model": APIError},
    404: {"model": APIError},
}


@router.get("", response_model=list[TenantResponse], responses=COMMON_ERRORS)
async def list_tenants(
    identity: Identity,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantResponse]:
    return await service.list_tenants(identity)


@router.get("/{tenant_id}", response_model=TenantResponse, responses=COMMON_ERRORS)
async def get_tenant(
    tenant_id: UUID,
    identity: Identity,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    return await service.get_tenant(identity, tenant_id)


@router.put(
    "/{tenant_id}",
    response_model=TenantResponse,
    responses={**COMMON_ERRORS, 400: {"model": APIError}},
)
async def update_tenant(
    tenant_id: UUID,
    identity: Identity,
    service: Annotated[TenantService, Depends(get_tenant_service)],
    payload: Payload = None,
) -> TenantResponse:
    return await service.update_tenant(identity, tenant_id, payload)


@router.post(
    "/{tenant_id}/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**COMMON_ERRORS, 400: {"model": APIError}, 409: {"model": APIError}},
)
async def create_user(
    tenant_id: UUID,
    identity: Identity,
    service: Annotated[UserService, Depends(get_user_service)],
    payload: Payload = None,
) -> UserResponse:
    return await service.create_user(identity, tenant_id, payload)


@router.get("/{tenant_id}/users", response_model=list[UserResponse], responses=COMMON_ERRORS)
async def list_users(
    tenant_id: UUID,
    identity: Identity,
    service: Annotated[UserService, Depends(get_user_service)],
) -> list[UserResponse]:
    return await service.list_users(identity, tenant_id)
