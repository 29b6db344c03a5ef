"""Project queries and task aggregates."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import case, func, select

from taskhive.core.types import EntityKind, TaskStatus
from taskhive.db.models import Project, Task

from .base import BaseRepository


class ProjectRepository(BaseRepository[Project, UUID]):
    entity_kind = EntityKind.PROJECT

    async def list_for_tenant(self, tenant_id: UUID | None) -> list[Project]:
        """Projects of one tenant, or of every tenant when tenant_id is None."""
        stmt = select(Project).order_by(Project.created_at, Project.id)
        if tenant_id is not None:
            stmt = stmt.where(Project.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_for_tenant(self, tenant_id: UUID) -> int:
        stmt = select(func.count(Project.id)).where(Project.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def task_counts(self, project_ids: Sequence[UUID]) -> dict[UUID, tuple[int, int]]:
        """(task_count, completed_task_count) per project from one grouped query."""
        counts = {project_id: (0, 0) for project_id in project_ids}
        if not counts:
            return counts

        completed = func.sum(case((Task.status == TaskStatus.COMPLETED.value, 1), else_=0))
        stmt = (
            select(Task.project_id, func.count(Task.id), completed)
            .where(Task.project_id.in_(list(counts)))
            .group_by(Task.project_id)
        )
        for project_id, total, done in (await self.db.execute(stmt)).all():
            counts[project_id] = (total, done or 0)
        return counts

    async def created_by(self, user_id: UUID) -> list[Project]:
        stmt = select(Project).where(Project.created_by == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
