"""Project endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status

from taskhive.api.dependencies import get_identity, get_project_service
from taskhive.api.schemas.errors import APIError
from taskhive.core.context import IdentityContext
from taskhive.db.schemas import DeleteResult, ProjectResponse
from taskhive.services import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])

Identity = Annotated[IdentityContext, Depends(get_identity)]
Payload = Annotated[dict[str, Any] | None, Body()]
Service = Annotated[ProjectService, Depends(get_project_service)]


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": APIError},
        403: {"model": APIError},
        409: {"model": APIError, "description": "Project quota reached"},
    },
)
async def create_project(identity: Identity, service: Service, payload: Payload = None) -> ProjectResponse:
    return await service.create_project(identity, payload)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(identity: Identity, service: Service) -> list[ProjectResponse]:
    return await service.list_projects(identity)


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    responses={400: {"model": APIError}, 403: {"model": APIError}, 404: {"model": APIError}},
)
async def update_project(
    project_id: UUID, identity: Identity, service: Service, payload: Payload = None
) -> ProjectResponse:
    return await service.update_project(identity, project_id, payload)


@router.delete(
    "/{project_id}",
    response_model=DeleteResult,
    responses={403: {"model": APIError}, 404: {"model": APIError}},
)
async def delete_project(project_id: UUID, identity: Identity, service: Service) -> DeleteResult:
    return await service.delete_project(identity, project_id)
