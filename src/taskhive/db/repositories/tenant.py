"""Tenant queries, including the locked read used by quota checks."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select

from taskhive.core.types import EntityKind
from taskhive.db.models import Project, Task, Tenant, User
from taskhive.db.schemas.tenant import TenantStats

from .base import BaseRepository


class TenantRepository(BaseRepository[Tenant, UUID]):
    entity_kind = EntityKind.TENANT

    async def get_by_subdomain(self, subdomain: str) -> Tenant | None:
        stmt = select(Tenant).where(Tenant.subdomain == subdomain)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_update(self, tenant_id: UUID) -> Tenant | None:
        """Load a tenant and lock its row until the transaction ends.

        Serializes concurrent creations that are counted against the
        tenant's quotas. SQLite ignores the clause; its engines begin every
        transaction with ``BEGIN IMMEDIATE`` instead.
        """
        stmt = (
            select(Tenant)
            .where(Tenant.id == tenant_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Tenant]:
        stmt = select(Tenant).order_by(Tenant.created_at, Tenant.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def stats_for(self, tenant_ids: Sequence[UUID]) -> dict[UUID, TenantStats]:
        """Live user, project and task counts per tenant, one grouped query each."""
        stats = {tenant_id: TenantStats() for tenant_id in tenant_ids}
        if not stats:
            return stats

        for model, field in (
            (User, "total_users"),
            (Project, "total_projects"),
            (Task, "total_tasks"),
        ):
            stmt = (
                select(model.tenant_id, func.count(model.id))
                .where(model.tenant_id.in_(list(stats)))
                .group_by(model.tenant_id)
            )
            for tenant_id, count in (await self.db.execute(stmt)).all():
                setattr(stats[tenant_id], field, count)

        return stats
