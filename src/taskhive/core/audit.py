"""Audit logging for tenant-scoped mutations.

Entries are written by the ``UnitOfWork`` in the same transaction as the
mutation they describe, never on their own.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhive.core.context import get_current_context_or_none
from taskhive.core.types import AuditAction
from taskhive.db.models import AuditLogEntry, Base

# Columns that never appear in audit snapshots
REDACTED_COLUMNS = frozenset({"password_hash"})


def snapshot(obj: Base) -> dict[str, Any]:
    """JSON-safe copy of a model's column values, without credential material."""
    state: dict[str, Any] = {}
    for attr in inspect(obj).mapper.column_attrs:
        if attr.key in REDACTED_COLUMNS:
            continue
        value = getattr(obj, attr.key)
        if isinstance(value, UUID):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        state[attr.key] = value
    return state


class AuditLogger:
    """Service for creating and querying audit log entries.

    Entries are immutable, append-only records of every mutation.
    """

    def __init__(self, db: AsyncSession):
        """Initialize audit logger with database session.

        Args:
            db: Async SQLAlchemy session for database operations
        """
        self.db = db

    async def log_mutation(
        self,
        *,
        tenant_id: UUID | None,
        table_name: str,
        record_id: UUID,
        action: AuditAction | str,
        actor_user_id: UUID | None,
        metadata: dict[str, Any] | None = None,
        correlation_id: UUID | None = None,
    ) -> AuditLogEntry:
        """Append an audit entry to the current transaction.

        Args:
            tenant_id: Tenant the mutated record belongs to
            table_name: Table of the mutated record
            record_id: Primary key of the mutated record
            action: CREATE, UPDATE or DELETE
            actor_user_id: User that performed the mutation
            metadata: Summary or before/after snapshot (JSON serializable)
            correlation_id: Request correlation id (defaults to the current identity's)

        Returns:
            The flushed AuditLogEntry
        """
        if isinstance(action, AuditAction):
            action = action.value

        if correlation_id is None:
            ctx = get_current_context_or_none()
            correlation_id = ctx.correlation_id if ctx else None

        entry = AuditLogEntry(
            tenant_id=tenant_id,
            table_name=table_name,
            record_id=record_id,
            action=action,
            actor_user_id=actor_user_id,
            details=metadata or {},
            correlation_id=correlation_id,
        )

        self.db.add(entry)
        await self.db.flush()

        return entry

    async def query_entries(
        self,
        tenant_id: UUID | None = None,
        table_name: str | None = None,
        record_id: UUID | None = None,
        action: AuditAction | str | None = None,
        actor_user_id: UUID | None = None,
        correlation_id: UUID | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditLogEntry]:
        """Query audit entries with filters.

        Args:
            tenant_id: Filter by tenant
            table_name: Filter by mutated table
            record_id: Filter by mutated record
            action: Filter by CREATE/UPDATE/DELETE
            actor_user_id: Filter by actor
            correlation_id: Filter by request correlation id
            limit: Max results (max 1000)
            offset: Pagination offset

        Returns:
            Matching entries, oldest first
        """
        if isinstance(action, AuditAction):
            action = action.value

        query = select(AuditLogEntry).order_by(
            AuditLogEntry.created_at,
            AuditLogEntry.id,  # Secondary sort for equal timestamps
        )

        if tenant_id is not None:
            query = query.where(AuditLogEntry.tenant_id == tenant_id)
        if table_name is not None:
            query = query.where(AuditLogEntry.table_name == table_name)
        if record_id is not None:
            query = query.where(AuditLogEntry.record_id == record_id)
        if action is not None:
            query = query.where(AuditLogEntry.action == action)
        if actor_user_id is not None:
            query = query.where(AuditLogEntry.actor_user_id == actor_user_id)
        if correlation_id is not None:
            query = query.where(AuditLogEntry.correlation_id == correlation_id)

        query = query.limit(min(limit, 1000)).offset(offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())
