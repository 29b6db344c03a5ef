"""Base repository with common read operations.

Repositories only read. Writes go through a ``UnitOfWork`` so that every
mutation is paired with its audit entry.

Usage:
    from taskhive.db.repositories.base import BaseRepository

    class ProjectRepository(BaseRepository[Project, UUID]):
        entity_kind = EntityKind.PROJECT

    repo = ProjectRepository(db_session)
    project = await repo.get_or_raise(project_id)
"""

from collections.abc import Sequence
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.core.exceptions import NotFoundError
from taskhive.core.types import EntityKind
from taskhive.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
PKType = TypeVar("PKType", bound=UUID | int | str)


class BaseRepository(Generic[ModelType, PKType]):
    """Generic repository for SQLAlchemy models.

    Type Parameters:
        ModelType: The SQLAlchemy model class
        PKType: The type of the primary key

    Attributes:
        model: The model class
        entity_kind: Kind reported by NotFoundError
        db: The database session
    """

    model: type[ModelType]
    entity_kind: EntityKind

    def __init__(self, db: AsyncSession):
        self.db = db

    def __init_subclass__(cls, **kwargs):
        """Extract model type from generic parameter."""
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", []):
            args = getattr(base, "__args__", None)
            if args and len(args) >= 1:
                first_arg = args[0]
                if isinstance(first_arg, type) and issubclass(first_arg, Base):
                    cls.model = first_arg
                    break

    async def get(self, pk: PKType) -> ModelType | None:
        """Get a single record by primary key."""
        return await self.db.get(self.model, pk)

    async def get_or_raise(self, pk: PKType) -> ModelType:
        """Get a single record by primary key or raise.

        Raises:
            NotFoundError: If no record has this key
        """
        result = await self.get(pk)
        if result is None:
            raise NotFoundError(self.entity_kind.value, pk)
        return result

    async def get_many(self, pks: Sequence[PKType]) -> list[ModelType]:
        """Get multiple records by primary keys. Missing keys are skipped."""
        if not pks:
            return []
        stmt = select(self.model).where(self.model.id.in_(pks))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
