"""User queries."""

from uuid import UUID

from sqlalchemy import func, select

from taskhive.core.types import EntityKind
from taskhive.db.models import User

from .base import BaseRepository


class UserRepository(BaseRepository[User, UUID]):
    entity_kind = EntityKind.USER

    async def get_by_email(self, tenant_id: UUID | None, email: str) -> User | None:
        """Find a user by email within a tenant, or among platform users when tenant_id is None."""
        tenant_clause = User.tenant_id.is_(None) if tenant_id is None else User.tenant_id == tenant_id
        stmt = select(User).where(tenant_clause, User.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_tenant(self, tenant_id: UUID) -> list[User]:
        stmt = (
            select(User)
            .where(User.tenant_id == tenant_id)
            .order_by(User.created_at, User.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_for_tenant(self, tenant_id: UUID) -> int:
        stmt = select(func.count(User.id)).where(User.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0
