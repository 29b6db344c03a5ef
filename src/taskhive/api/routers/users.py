"""User update and delete endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends

from taskhive.api.dependencies import get_identity, get_user_service
from taskhive.api.schemas.errors import APIError
from taskhive.core.context import IdentityContext
from taskhive.db.schemas import DeleteResult, UserResponse
from taskhive.services import UserService

router = APIRouter(prefix="/users", tags=["users"])

Identity = Annotated[IdentityContext, Depends(get_identity)]


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={400: {"model": APIError}, 403: {"model": APIError}, 404: {"model": APIError}},
)
async def update_user(
    user_id: UUID,
    identity: Identity,
    service: Annotated[UserService, Depends(get_user_service)],
    payload: Annotated[dict[str, Any] | None, Body()] = None,
) -> UserResponse:
    return await service.update_user(identity, user_id, payload)


@router.delete(
    "/{user_id}",
    response_model=DeleteResult,
    responses={403: {"model": APIError}, 404: {"model": APIError}},
)
async def delete_user(
    user_id: UUID,
    identity: Identity,
    service: Annotated[UserService, Depends(get_user_service)],
) -> DeleteResult:
    return await service.delete_user(identity, user_id)
