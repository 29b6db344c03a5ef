"""Audit log model for accountability of tenant-scoped mutations."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Index, String, event
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from .base import Base, PortableJSON, PortableUUID, utcnow


class AuditLogEntry(Base):
    """Immutable audit log entry.

    Exactly one entry is written per mutating operation, in the same
    transaction as the mutation itself. Entries are append-only.
    """

    __tablename__ = "audit_logs"

    # UUIDv7 is time-ordered, making entries naturally sortable by ID
    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    # null for platform users that do not belong to a tenant
    tenant_id: Mapped[UUID | None] = mapped_column(PortableUUID(), nullable=True)
    table_name: Mapped[str] = mapped_column(String(50), nullable=False)
    record_id: Mapped[UUID] = mapped_column(PortableUUID(), nullable=False)
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    actor_user_id: Mapped[UUID | None] = mapped_column(PortableUUID(), nullable=True)

    # "metadata" is reserved on declarative classes
    details: Mapped[dict] = mapped_column("metadata", PortableJSON(), nullable=False, default=dict)

    correlation_id: Mapped[UUID | None] = mapped_column(PortableUUID(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_audit_tenant", "tenant_id"),
        Index("idx_audit_record", "table_name", "record_id"),
        Index("idx_audit_correlation", "correlation_id"),
        Index("idx_audit_created", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLogEntry(id={self.id}, table={self.table_name}, "
            f"record={self.record_id}, action={self.action})>"
        )


@event.listens_for(AuditLogEntry, "before_update")
def _reject_audit_update(mapper, connection, target) -> None:
    raise RuntimeError(f"Audit log entries are immutable: {target.id}")


@event.listens_for(AuditLogEntry, "before_delete")
def _reject_audit_delete(mapper, connection, target) -> None:
    raise RuntimeError(f"Audit log entries are append-only: {target.id}")
