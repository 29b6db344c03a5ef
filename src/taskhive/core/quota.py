"""Per-tenant resource ceilings.

The guard reads the tenant's ceiling under a row lock and counts live
resources in the same transaction, so concurrent creations at the
boundary are serialized by the database instead of racing. On SQLite the
lock is taken by ``BEGIN IMMEDIATE`` when the transaction starts.
"""

from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.core.exceptions import NotFoundError, QuotaExceededError
from taskhive.core.types import EntityKind, QuotaKind
from taskhive.db.repositories import ProjectRepository, TenantRepository, UserRepository

logger = structlog.get_logger("taskhive.quota")


@dataclass(frozen=True)
class QuotaStatus:
    """Usage of a capped resource at the time of the check."""

    tenant_id: UUID
    resource_kind: QuotaKind
    limit: int
    current: int


class QuotaGuard:
    """Checks a tenant's live resource count against its ceiling.

    Must run inside the unit that performs the insert; the tenant row lock
    is held until that unit commits or rolls back.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tenants = TenantRepository(db)
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)

    async def check_quota(self, tenant_id: UUID, kind: QuotaKind) -> QuotaStatus:
        """Allow one more resource of ``kind`` or fail before any write.

        Raises:
            NotFoundError: If the tenant does not exist
            QuotaExceededError: If the live count has reached the ceiling
        """
        tenant = await self.tenants.get_for_update(tenant_id)
        if tenant is None:
            raise NotFoundError(EntityKind.TENANT.value, tenant_id)

        if kind == QuotaKind.USERS:
            limit = tenant.max_users
            current = await self.users.count_for_tenant(tenant_id)
        else:
            limit = tenant.max_projects
            current = await self.projects.count_for_tenant(tenant_id)

        status = QuotaStatus(tenant_id=tenant_id, resource_kind=kind, limit=limit, current=current)
        if current >= limit:
            logger.warning(
                "quota_exceeded",
                quota_tenant_id=str(tenant_id),
                resource=kind.value,
                limit=limit,
                current=current,
            )
            raise QuotaExceededError(
                f"Max {kind.value} limit reached for this tenant",
                tenant_id=tenant_id,
                resource_kind=kind.value,
                limit=limit,
                current=current,
            )
        return status
