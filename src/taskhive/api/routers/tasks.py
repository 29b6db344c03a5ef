"""Task endpoints.

Task listing accepts ``status``, ``priority``, ``assignedTo``, ``search``,
``page`` and ``pageSize`` (snake_case spellings work too). An empty
``assignedTo`` selects unassigned tasks.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request, status

from taskhive.api.dependencies import get_identity, get_task_service
from taskhive.api.schemas.errors import APIError
from taskhive.core.context import IdentityContext
from taskhive.db.schemas import DeleteResult, TaskPage, TaskResponse
from taskhive.services import TaskService

router = APIRouter(tags=["tasks"])

Identity = Annotated[IdentityContext, Depends(get_identity)]
Payload = Annotated[dict[str, Any] | None, Body()]
Service = Annotated[TaskService, Depends(get_task_service)]

COMMON_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": APIError},
    403: {"model": APIError},
    404: {"model": APIError},
}


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses=COMMON_ERRORS,
)
async def create_task(
    project_id: UUID, identity: Identity, service: Service, payload: Payload = None
) -> TaskResponse:
    return await service.create_task(identity, project_id, payload)


@router.get("/projects/{project_id}/tasks", response_model=TaskPage, responses=COMMON_ERRORS)
async def list_tasks(
    project_id: UUID, request: Request, identity: Identity, service: Service
) -> TaskPage:
    return await service.list_tasks(identity, project_id, dict(request.query_params))


@router.patch("/tasks/{task_id}/status", response_model=TaskResponse, responses=COMMON_ERRORS)
async def update_task_status(
    task_id: UUID, identity: Identity, service: Service, payload: Payload = None
) -> TaskResponse:
    return await service.update_task_status(identity, task_id, payload)


@router.put("/tasks/{task_id}", response_model=TaskResponse, responses=COMMON_ERRORS)
async def update_task(
    task_id: UUID, identity: Identity, service: Service, payload: Payload = None
) -> TaskResponse:
    return await service.update_task(identity, task_id, payload)


@router.delete("/tasks/{task_id}", response_model=DeleteResult, responses=COMMON_ERRORS)
async def delete_task(task_id: UUID, identity: Identity, service: Service) -> DeleteResult:
    return await service.delete_task(identity, task_id)
