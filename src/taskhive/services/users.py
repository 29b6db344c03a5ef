"""User management inside a tenant."""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.core.audit import snapshot
from taskhive.core.context import IdentityContext
from taskhive.core.exceptions import ConflictError
from taskhive.core.logging import get_logger
from taskhive.core.permissions import authorize, permitted_fields
from taskhive.core.security import PasswordHasher
from taskhive.core.types import Action, EntityKind, QuotaKind
from taskhive.db.models import User
from taskhive.db.repositories import ProjectRepository, TaskRepository, UserRepository
from taskhive.db.schemas import DeleteResult, UserCreate, UserResponse, UserUpdate, parse_payload

from .base import EntityService, select_changes

logger = get_logger("taskhive.services.users")


class UserService(EntityService):
    """Creates, lists, updates and deletes users of a tenant."""

    def __init__(self, db: AsyncSession, hasher: PasswordHasher | None = None):
        super().__init__(db)
        self.hasher = hasher or PasswordHasher()
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)
        self.tasks = TaskRepository(db)

    async def create_user(
        self,
        requester: IdentityContext,
        tenant_id: UUID,
        payload: Mapping[str, Any] | None,
    ) -> UserResponse:
        """Create a user in a tenant, subject to the tenant's user quota.

        Raises:
            NotFoundError: If the tenant does not exist
            ForbiddenError: If the requester is not an admin of the tenant
            ValidationFailedError: If the payload is invalid
            QuotaExceededError: If the tenant is at max_users
            ConflictError: If the email is already used in the tenant
        """
        async with self.transactor.unit(
            requester, conflict_message="Email already exists in this tenant"
        ) as unit:
            resolved = await self.resolver.resolve(EntityKind.TENANT, tenant_id)
            authorize(requester, Action.USER_CREATE, resolved.scope)

            data = parse_payload(UserCreate, payload)
            await self.quota.check_quota(tenant_id, QuotaKind.USERS)

            if await self.users.get_by_email(tenant_id, data.email) is not None:
                raise ConflictError("Email already exists in this tenant")

            user = await unit.insert(
                User(
                    tenant_id=tenant_id,
                    email=data.email,
                    password_hash=await self.hasher.hash(data.password),
                    role=data.role,
                    first_name=data.first_name,
                    last_name=data.last_name,
                ),
                metadata={"email": data.email, "role": data.role},
            )
            response = UserResponse.model_validate(user)

        logger.info("user_created", created_user_id=str(user.id), target_tenant_id=str(tenant_id))
        return response

    async def list_users(self, requester: IdentityContext, tenant_id: UUID) -> list[UserResponse]:
        """List the users of a tenant, oldest first."""
        async with self.transactor.unit(requester):
            resolved = await self.resolver.resolve(EntityKind.TENANT, tenant_id)
            authorize(requester, Action.USER_LIST, resolved.scope)
            users = await self.users.list_for_tenant(tenant_id)
            return [UserResponse.model_validate(u) for u in users]

    async def update_user(
        self,
        requester: IdentityContext,
        user_id: UUID,
        payload: Mapping[str, Any] | None,
    ) -> UserResponse:
        """Update a user.

        Updating oneself only ever changes first/last name, whatever the
        role. Admins may also change another user's role.

        Raises:
            NotFoundError: If the user does not exist
            ForbiddenError: If the requester may not change any requested field
            ValidationFailedError: If the payload is invalid or empty
        """
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.USER, user_id)
            decision = authorize(requester, Action.USER_UPDATE, resolved.scope)

            update = parse_payload(UserUpdate, payload)
            changes = select_changes(
                update, permitted_fields(Action.USER_UPDATE, decision.basis), Action.USER_UPDATE
            )

            user = await unit.update(resolved.entity, changes)
            response = UserResponse.model_validate(user)

        logger.info("user_updated", updated_user_id=str(user_id), fields=sorted(changes))
        return response

    async def delete_user(self, requester: IdentityContext, user_id: UUID) -> DeleteResult:
        """Delete a user. Nobody can delete themselves.

        Tasks assigned to or created by the user, and projects they created,
        keep existing with the reference cleared.

        Raises:
            NotFoundError: If the user does not exist
            ForbiddenError: If the requester is the user, or not an admin of their tenant
        """
        async with self.transactor.unit(requester) as unit:
            resolved = await self.resolver.resolve(EntityKind.USER, user_id)
            authorize(requester, Action.USER_DELETE, resolved.scope)
            user = resolved.entity

            deleted_user = snapshot(user)
            unassigned = await unit.cascade_update(
                await self.tasks.assigned_to(user_id), {"assigned_to": None}
            )
            orphaned_tasks = await unit.cascade_update(
                await self.tasks.created_by(user_id), {"created_by": None}
            )
            orphaned_projects = await unit.cascade_update(
                await self.projects.created_by(user_id), {"created_by": None}
            )

            await unit.delete(
                user,
                metadata={
                    "deleted_user": deleted_user,
                    "unassigned_tasks": unassigned,
                    "cleared_task_creator": orphaned_tasks,
                    "cleared_project_creator": orphaned_projects,
                },
            )

        logger.info("user_deleted", deleted_user_id=str(user_id))
        return DeleteResult(id=user_id)
