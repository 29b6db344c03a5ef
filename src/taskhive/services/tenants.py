"""Tenant reads and updates.

Tenants are created through registration (see ``AuthService``) and are
never hard-deleted.
"""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from taskhive.core.context import IdentityContext
from taskhive.core.logging import get_logger
from taskhive.core.permissions import ResourceScope, authorize, permitted_fields
from taskhive.core.types import Action, EntityKind
from taskhive.db.models import Tenant
from taskhive.db.repositories import TenantRepository
from taskhive.db.schemas import TenantResponse, TenantStats, TenantUpdate, parse_payload

from .base import EntityService, select_changes

logger = get_logger("taskhive.services.tenants")


class TenantService(EntityService):
    """Service for tenant operations.

    Every update is audit-logged with a before/after snapshot.
    """

    def __init__(self, db):
        super().__init__(db)
        self.tenants = TenantRepository(db)

    async def get_tenant(self, requester: IdentityContext, tenant_id: UUID) -> TenantResponse:
        """Get a tenant with live usage statistics.

        Raises:
            NotFoundError: If the tenant does not exist
            ForbiddenError: If the requester is not a member (super_admin excepted)
        """
        async with self.transactor.unit(requester):
            resolved = await self.resolver.resolve(EntityKind.TENANT, tenant_id)
            authorize(requester, Action.TENANT_READ, resolved.scope)
            return await self._with_stats(resolved.entity)

    async def list_tenants(self, requester: IdentityContext) -> list[TenantResponse]:
        """List every tenant, oldest first. super_admin only."""
        authorize(requester, Action.TENANT_LIST, ResourceScope(tenant_id=None))

        async with self.transactor.unit(requester):
            tenants = await self.tenants.list_all()
            stats = await self.tenants.stats_for([t.id for t in tenants])
            return [self._to_response(t, stats[t.id]) for t in tenants]

    async def update_tenant(
        self,
        requester: IdentityContext,
        tenant_id: UUID,
        payload: Mapping[str, Any] | None,
    ) -> TenantResponse:
        """Update a tenant.

        tenant_admin may rename their own tenant; super_admin may also change
        plan, status and quota ceilings. Lowering a ceiling below current
        usage is allowed and only affects future creations.

        Raises:
            NotFoundError: If the tenant does not exist
            ForbiddenError: If the requester may not change any requested field
            ValidationFailedError: If the payload is invalid or empty
        """
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.TENANT, tenant_id)
            decision = authorize(requester, Action.TENANT_UPDATE, resolved.scope)

            update = parse_payload(TenantUpdate, payload)
            changes = select_changes(
                update, permitted_fields(Action.TENANT_UPDATE, decision.basis), Action.TENANT_UPDATE
            )

            tenant = await unit.update(resolved.entity, changes)
            response = await self._with_stats(tenant)

        logger.info("tenant_updated", target_tenant_id=str(tenant_id), fields=sorted(changes))
        return response

    async def _with_stats(self, tenant: Tenant) -> TenantResponse:
        stats = await self.tenants.stats_for([tenant.id])
        return self._to_response(tenant, stats[tenant.id])

    @staticmethod
    def _to_response(tenant: Tenant, stats: TenantStats) -> TenantResponse:
        return TenantResponse.model_validate(tenant).model_copy(update={"stats": stats})
