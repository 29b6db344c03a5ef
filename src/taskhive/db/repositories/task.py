"""Task queries, including the filtered and paginated listing."""

from uuid import UUID

from sqlalchemy import ColumnElement, and_, func, or_, select

from taskhive.core.types import EntityKind
from taskhive.db.models import Task
from taskhive.db.schemas.task import TaskFilters

from .base import BaseRepository


class TaskRepository(BaseRepository[Task, UUID]):
    entity_kind = EntityKind.TASK

    @staticmethod
    def _predicate(project_id: UUID, tenant_id: UUID, filters: TaskFilters) -> ColumnElement[bool]:
        clauses: list[ColumnElement[bool]] = [
            Task.project_id == project_id,
            Task.tenant_id == tenant_id,
        ]
        if filters.status is not None:
            clauses.append(Task.status == filters.status.value)
        if filters.priority is not None:
            clauses.append(Task.priority == filters.priority.value)
        if filters.filters_unassigned:
            clauses.append(Task.assigned_to.is_(None))
        elif filters.assigned_to is not None:
            clauses.append(Task.assigned_to == filters.assigned_to)
        if filters.search:
            pattern = f"%{filters.search}%"
            clauses.append(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
        return and_(*clauses)

    async def search(
        self, project_id: UUID, tenant_id: UUID, filters: TaskFilters
    ) -> tuple[list[Task], int]:
        """One page of matching tasks and the total from the same predicate."""
        predicate = self._predicate(project_id, tenant_id, filters)

        total_stmt = select(func.count(Task.id)).where(predicate)
        total = (await self.db.execute(total_stmt)).scalar() or 0

        page_stmt = (
            select(Task)
            .where(predicate)
            .order_by(Task.created_at, Task.id)
            .limit(filters.page_size)
            .offset(filters.offset)
        )
        rows = (await self.db.execute(page_stmt)).scalars().all()
        return list(rows), total

    async def list_for_project(self, project_id: UUID) -> list[Task]:
        stmt = select(Task).where(Task.project_id == project_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def assigned_to(self, user_id: UUID) -> list[Task]:
        stmt = select(Task).where(Task.assigned_to == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def created_by(self, user_id: UUID) -> list[Task]:
        stmt = select(Task).where(Task.created_by == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
