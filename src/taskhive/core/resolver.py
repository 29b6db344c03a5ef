"""Resolution of entity references to their owning tenant.

Tasks carry a denormalized copy of their project's tenant. The resolver
checks both hops and refuses to continue if they disagree.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.core.exceptions import DataIntegrityError, NotFoundError
from taskhive.core.permissions import ResourceScope
from taskhive.core.types import EntityKind
from taskhive.db.repositories import (
    ProjectRepository,
    TaskRepository,
    TenantRepository,
    UserRepository,
)

logger = structlog.get_logger("taskhive.resolver")


@dataclass(frozen=True)
class ResolvedEntity:
    """A loaded entity together with the tenant and owner it is scoped to."""

    kind: EntityKind
    entity: Any
    tenant_id: UUID | None
    owner_id: UUID | None = None

    @property
    def scope(self) -> ResourceScope:
        return ResourceScope(tenant_id=self.tenant_id, owner_id=self.owner_id)


class TenantResolver:
    """Loads entities and determines their tenant scope.

    The owner of a user record is the user itself; the owner of a project
    or task is its creator.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tenants = TenantRepository(db)
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)
        self.tasks = TaskRepository(db)

    async def resolve(self, kind: EntityKind, entity_id: UUID) -> ResolvedEntity:
        """Load an entity and its tenant scope.

        Raises:
            NotFoundError: If the entity does not exist
            DataIntegrityError: If a task's tenant differs from its project's tenant
        """
        match kind:
            case EntityKind.TENANT:
                tenant = await self.tenants.get_or_raise(entity_id)
                return ResolvedEntity(kind, tenant, tenant.id)
            case EntityKind.USER:
                user = await self.users.get_or_raise(entity_id)
                return ResolvedEntity(kind, user, user.tenant_id, user.id)
            case EntityKind.PROJECT:
                project = await self.projects.get_or_raise(entity_id)
                return ResolvedEntity(kind, project, project.tenant_id, project.created_by)
            case EntityKind.TASK:
                return await self._resolve_task(entity_id)
        raise ValueError(f"Unknown entity kind: {kind}")

    async def resolve_tenant(self, kind: EntityKind, entity_id: UUID) -> UUID | None:
        """Tenant that owns an entity."""
        resolved = await self.resolve(kind, entity_id)
        return resolved.tenant_id

    async def _resolve_task(self, task_id: UUID) -> ResolvedEntity:
        task = await self.tasks.get_or_raise(task_id)
        project = await self.projects.get(task.project_id)

        if project is None:
            logger.error("task_project_missing", task_id=str(task.id), project_id=str(task.project_id))
            raise DataIntegrityError(
                "Task references a project that does not exist",
                entity_kind=EntityKind.TASK.value,
                entity_id=task.id,
            )
        if project.tenant_id != task.tenant_id:
            logger.error(
                "task_tenant_mismatch",
                task_id=str(task.id),
                task_tenant_id=str(task.tenant_id),
                project_tenant_id=str(project.tenant_id),
            )
            raise DataIntegrityError(
                "Task tenant does not match its project's tenant",
                entity_kind=EntityKind.TASK.value,
                entity_id=task.id,
            )

        return ResolvedEntity(EntityKind.TASK, task, task.tenant_id, task.created_by)
