"""Shared collaborators and helpers for entity services."""

from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.core.exceptions import ForbiddenError, ValidationFailedError
from taskhive.core.quota import QuotaGuard
from taskhive.core.resolver import TenantResolver
from taskhive.core.transactor import MutationTransactor
from taskhive.core.types import Action
from taskhive.db.schemas.base import UpdatePayload


class EntityService:
    """Base for services that compose resolver, evaluator, quota guard and transactor."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session.

        Args:
            db: Async SQLAlchemy session; each operation runs one transaction on it
        """
        self.db = db
        self.transactor = MutationTransactor(db)
        self.resolver = TenantResolver(db)
        self.quota = QuotaGuard(db)


def select_changes(update: UpdatePayload, permitted: frozenset[str], action: Action) -> dict[str, Any]:
    """Keep the requested changes the actor may make, as column values.

    Requested fields outside ``permitted`` are dropped. Nothing requested is
    a validation error; nothing permitted among what was requested is a
    denial.

    Raises:
        ValidationFailedError: If the payload names no recognized field
        ForbiddenError: If none of the requested fields may be changed
    """
    requested = update.changes()
    if not requested:
        raise ValidationFailedError("No fields to update")

    allowed = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in requested.items()
        if key in permitted
    }
    if not allowed:
        raise ForbiddenError("No permitted fields to update", action=action.value)
    return allowed
