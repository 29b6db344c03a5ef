"""Atomic mutation units.

Every mutating service operation runs inside one ``UnitOfWork``. A unit
performs the primary mutation and appends its audit entry in the same
transaction; it commits when the block exits cleanly and rolls back on
any exception, so either both persist or neither does.

Usage:
    transactor = MutationTransactor(db)

    async with transactor.unit(ctx) as unit:
        project = await unit.insert(Project(...), metadata={"name": "Roadmap"})
"""

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Any, TypeVar
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.core.audit import AuditLogger, snapshot
from taskhive.core.context import IdentityContext
from taskhive.core.exceptions import ConflictError, InternalError
from taskhive.core.types import AuditAction
from taskhive.db.models import AuditLogEntry, Base

logger = structlog.get_logger("taskhive.transactor")

M = TypeVar("M", bound=Base)


class UnitOfWork:
    """Mutations of one operation, each paired with exactly one audit entry.

    Attributes:
        db: Session whose transaction the unit owns
        actor: Identity recorded as the actor of every entry
        entries: Audit entries appended so far
    """

    def __init__(self, db: AsyncSession, actor: IdentityContext | None):
        self.db = db
        self.actor = actor
        self.audit = AuditLogger(db)
        self.entries: list[AuditLogEntry] = []

    async def insert(
        self,
        obj: M,
        *,
        metadata: dict[str, Any] | None = None,
        actor_id: UUID | None = None,
    ) -> M:
        """Insert a record and audit it as CREATE.

        ``actor_id`` overrides the unit's actor, for records created by
        someone who does not exist yet (the first admin of a tenant).
        """
        self.db.add(obj)
        await self.db.flush()
        await self._record(obj, AuditAction.CREATE, metadata, actor_id)
        return obj

    async def update(
        self,
        obj: M,
        changes: dict[str, Any],
        *,
        metadata: dict[str, Any] | None = None,
    ) -> M:
        """Apply changes to a record and audit it as UPDATE.

        Metadata defaults to the before/after snapshot of the record.
        """
        before = snapshot(obj)
        for key, value in changes.items():
            setattr(obj, key, value)
        await self.db.flush()

        if metadata is None:
            metadata = {"before": before, "after": snapshot(obj)}
        await self._record(obj, AuditAction.UPDATE, metadata)
        return obj

    async def delete(self, obj: Base, *, metadata: dict[str, Any] | None = None) -> None:
        """Delete a record and audit it as DELETE."""
        await self.db.delete(obj)
        await self.db.flush()
        await self._record(obj, AuditAction.DELETE, metadata)

    async def cascade_delete(self, objs: Iterable[Base]) -> int:
        """Delete dependent records as part of the audited operation.

        The operation's single audit entry describes the cascade.
        """
        count = 0
        for obj in objs:
            await self.db.delete(obj)
            count += 1
        await self.db.flush()
        return count

    async def cascade_update(self, objs: Iterable[Base], changes: dict[str, Any]) -> int:
        """Update dependent records as part of the audited operation."""
        count = 0
        for obj in objs:
            for key, value in changes.items():
                setattr(obj, key, value)
            count += 1
        await self.db.flush()
        return count

    async def _record(
        self,
        obj: Base,
        action: AuditAction,
        metadata: dict[str, Any] | None,
        actor_id: UUID | None = None,
    ) -> AuditLogEntry:
        if actor_id is None and self.actor is not None:
            actor_id = self.actor.user_id

        entry = await self.audit.log_mutation(
            tenant_id=getattr(obj, "tenant_id", None),
            table_name=obj.__tablename__,
            record_id=obj.id,
            action=action,
            actor_user_id=actor_id,
            metadata=metadata,
            correlation_id=self.actor.correlation_id if self.actor else None,
        )
        self.entries.append(entry)
        return entry


class MutationTransactor:
    """Opens units of work on a session.

    ``IntegrityError`` from the store is reported as ``ConflictError``;
    any other storage failure as ``InternalError``. Domain errors raised
    inside the unit propagate unchanged after the rollback.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def unit(
        self,
        actor: IdentityContext | None,
        *,
        conflict_message: str = "Resource already exists",
    ) -> AsyncIterator[UnitOfWork]:
        unit = UnitOfWork(self.db, actor)
        try:
            yield unit
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("unit_conflict", error=str(e.orig))
            raise ConflictError(conflict_message) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("unit_failed", error_type=type(e).__name__)
            raise InternalError("Storage failure") from e
        except Exception:
            await self.db.rollback()
            raise
