"""Task operations inside projects."""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from taskhive.core.context import IdentityContext
from taskhive.core.exceptions import ValidationFailedError
from taskhive.core.logging import get_logger
from taskhive.core.permissions import ResourceScope, authorize, permitted_fields
from taskhive.core.types import Action, EntityKind
from taskhive.db.models import Task
from taskhive.db.repositories import TaskRepository, UserRepository
from taskhive.db.schemas import (
    DeleteResult,
    TaskCreate,
    TaskFilters,
    TaskPage,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
    parse_payload,
)

from .base import EntityService, select_changes

logger = get_logger("taskhive.services.tasks")


class TaskService(EntityService):
    """Service for task CRUD, status changes and filtered listing.

    A task's tenant is copied from its project on creation and no
    operation changes a task's project.
    """

    def __init__(self, db):
        super().__init__(db)
        self.tasks = TaskRepository(db)
        self.users = UserRepository(db)

    async def create_task(
        self,
        requester: IdentityContext,
        project_id: UUID,
        payload: Mapping[str, Any] | None,
    ) -> TaskResponse:
        """Create a task in a project.

        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the requester is not a member of the project's tenant
            ValidationFailedError: If the payload is invalid or the assignee is outside the tenant
        """
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.PROJECT, project_id)
            authorize(requester, Action.TASK_CREATE, ResourceScope(tenant_id=resolved.tenant_id))
            project = resolved.entity

            data = parse_payload(TaskCreate, payload)
            if data.assigned_to is not None:
                await self._validate_assignee(project.tenant_id, data.assigned_to)

            task = await unit.insert(
                Task(
                    tenant_id=project.tenant_id,
                    project_id=project.id,
                    title=data.title,
                    description=data.description,
                    status=data.status.value,
                    priority=data.priority.value,
                    assigned_to=data.assigned_to,
                    created_by=requester.user_id,
                ),
                metadata={
                    "title": data.title,
                    "status": data.status.value,
                    "priority": data.priority.value,
                },
            )
            response = TaskResponse.model_validate(task)

        logger.info("task_created", task_id=str(task.id), project_id=str(project_id))
        return response

    async def list_tasks(
        self,
        requester: IdentityContext,
        project_id: UUID,
        filters: Mapping[str, Any] | None = None,
    ) -> TaskPage:
        """List a project's tasks matching all given filters, oldest first.

        ``total`` counts every match of the same predicate, read in the same
        transaction as the page.
        """
        async with self.transactor.unit(requester):
            tenant_id = await self.resolver.resolve_tenant(EntityKind.PROJECT, project_id)
            authorize(requester, Action.TASK_LIST, ResourceScope(tenant_id=tenant_id))

            criteria = parse_payload(TaskFilters, filters)
            tasks, total = await self.tasks.search(project_id, tenant_id, criteria)

            return TaskPage(
                data=[TaskResponse.model_validate(t) for t in tasks],
                page=criteria.page,
                page_size=criteria.page_size,
                total=total,
            )

    async def update_task(
        self,
        requester: IdentityContext,
        task_id: UUID,
        payload: Mapping[str, Any] | None,
    ) -> TaskResponse:
        """Update a task's fields. Creator, tenant admin or super_admin only.

        Raises:
            NotFoundError: If the task does not exist
            ForbiddenError: If the requester may not update the task
            ValidationFailedError: If the payload is invalid, empty, or the assignee is outside the tenant
        """
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.TASK, task_id)
            decision = authorize(requester, Action.TASK_UPDATE, resolved.scope)

            update = parse_payload(TaskUpdate, payload)
            changes = select_changes(
                update, permitted_fields(Action.TASK_UPDATE, decision.basis), Action.TASK_UPDATE
            )
            if changes.get("assigned_to") is not None:
                await self._validate_assignee(resolved.tenant_id, changes["assigned_to"])

            task = await unit.update(resolved.entity, changes)
            response = TaskResponse.model_validate(task)

        logger.info("task_updated", task_id=str(task_id), fields=sorted(changes))
        return response

    async def update_task_status(
        self,
        requester: IdentityContext,
        task_id: UUID,
        payload: Mapping[str, Any] | None,
    ) -> TaskResponse:
        """Set a task's status. Any member of the task's tenant may do this."""
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.TASK, task_id)
            authorize(requester, Action.TASK_UPDATE_STATUS, resolved.scope)

            data = parse_payload(TaskStatusUpdate, payload)
            task = await unit.update(resolved.entity, {"status": data.status.value})
            response = TaskResponse.model_validate(task)

        logger.info("task_status_updated", task_id=str(task_id), status=data.status.value)
        return response

    async def delete_task(self, requester: IdentityContext, task_id: UUID) -> DeleteResult:
        """Delete a task. Creator, tenant admin or super_admin only."""
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.TASK, task_id)
            authorize(requester, Action.TASK_DELETE, resolved.scope)
            task = resolved.entity

            await unit.delete(task, metadata={"title": task.title, "status": task.status})

        logger.info("task_deleted", task_id=str(task_id))
        return DeleteResult(id=task_id)

    async def _validate_assignee(self, tenant_id: UUID, user_id: UUID) -> None:
        assignee = await self.users.get(user_id)
        if assignee is None or assignee.tenant_id != tenant_id:
            raise ValidationFailedError(
                "Assigned user must belong to the same tenant",
                errors=[{"field": "assigned_to", "message": "User not found in this tenant"}],
            )
