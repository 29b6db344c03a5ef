"""Project operations with live task aggregates."""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from taskhive.core.context import IdentityContext
from taskhive.core.exceptions import ForbiddenError
from taskhive.core.logging import get_logger
from taskhive.core.permissions import ResourceScope, authorize, permitted_fields
from taskhive.core.types import Action, EntityKind, ProjectStatus, QuotaKind
from taskhive.db.models import Project
from taskhive.db.repositories import ProjectRepository, TaskRepository
from taskhive.db.schemas import (
    DeleteResult,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    parse_payload,
)

from .base import EntityService, select_changes

logger = get_logger("taskhive.services.projects")


class ProjectService(EntityService):
    """Service for project CRUD.

    Task counts are computed with live queries in the same transaction as
    the operation, so they are never stale.
    """

    def __init__(self, db):
        super().__init__(db)
        self.projects = ProjectRepository(db)
        self.tasks = TaskRepository(db)

    async def create_project(
        self, requester: IdentityContext, payload: Mapping[str, Any] | None
    ) -> ProjectResponse:
        """Create a project in the requester's tenant.

        Raises:
            ForbiddenError: If the requester has no tenant
            ValidationFailedError: If the payload is invalid
            QuotaExceededError: If the tenant is at max_projects
        """
        if requester.tenant_id is None:
            raise ForbiddenError("A tenant is required to create projects", Action.PROJECT_CREATE.value)
        tenant_id = requester.tenant_id

        async with self.transactor.unit(requester) as unit:
            authorize(requester, Action.PROJECT_CREATE, ResourceScope(tenant_id=tenant_id))
            data = parse_payload(ProjectCreate, payload)
            await self.quota.check_quota(tenant_id, QuotaKind.PROJECTS)

            project = await unit.insert(
                Project(
                    tenant_id=tenant_id,
                    name=data.name,
                    description=data.description,
                    status=ProjectStatus.ACTIVE.value,
                    created_by=requester.user_id,
                ),
                metadata={"name": data.name, "status": ProjectStatus.ACTIVE.value},
            )
            response = await self._with_counts(project)

        logger.info("project_created", project_id=str(project.id))
        return response

    async def list_projects(self, requester: IdentityContext) -> list[ProjectResponse]:
        """Projects of the requester's tenant; every project for a platform super_admin."""
        async with self.transactor.unit(requester):
            if requester.is_super_admin and requester.tenant_id is None:
                projects = await self.projects.list_for_tenant(None)
            else:
                authorize(requester, Action.PROJECT_LIST, ResourceScope(tenant_id=requester.tenant_id))
                projects = await self.projects.list_for_tenant(requester.tenant_id)

            counts = await self.projects.task_counts([p.id for p in projects])
            return [self._to_response(p, counts[p.id]) for p in projects]

    async def update_project(
        self,
        requester: IdentityContext,
        project_id: UUID,
        payload: Mapping[str, Any] | None,
    ) -> ProjectResponse:
        """Update a project's name, description or status.

        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the requester is not the creator, a tenant admin or super_admin
            ValidationFailedError: If the payload is invalid or names no field
        """
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.PROJECT, project_id)
            decision = authorize(requester, Action.PROJECT_UPDATE, resolved.scope)

            update = parse_payload(ProjectUpdate, payload)
            changes = select_changes(
                update, permitted_fields(Action.PROJECT_UPDATE, decision.basis), Action.PROJECT_UPDATE
            )

            project = await unit.update(resolved.entity, changes)
            response = await self._with_counts(project)

        logger.info("project_updated", project_id=str(project_id), fields=sorted(changes))
        return response

    async def delete_project(self, requester: IdentityContext, project_id: UUID) -> DeleteResult:
        """Delete a project together with its tasks."""
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.PROJECT, project_id)
            authorize(requester, Action.PROJECT_DELETE, resolved.scope)
            project = resolved.entity

            name = project.name
            deleted_tasks = await unit.cascade_delete(await self.tasks.list_for_project(project_id))
            await unit.delete(project, metadata={"name": name, "deleted_tasks": deleted_tasks})

        logger.info("project_deleted", project_id=str(project_id), deleted_tasks=deleted_tasks)
        return DeleteResult(id=project_id)

    async def _with_counts(self, project: Project) -> ProjectResponse:
        counts = await self.projects.task_counts([project.id])
        return self._to_response(project, counts[project.id])

    @staticmethod
    def _to_response(project: Project, counts: tuple[int, int]) -> ProjectResponse:
        task_count, completed_task_count = counts
        return ProjectResponse.model_validate(project).model_copy(
            update={"task_count": task_count, "completed_task_count": completed_task_count}
        )
