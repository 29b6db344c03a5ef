"""Task model."""

from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from taskhive.core.types import TaskPriority, TaskStatus

from .base import Base, PortableUUID, TimestampMixin


class Task(Base, TimestampMixin):
    """A task inside a project.

    ``tenant_id`` is denormalized from the parent project and must always
    equal ``project.tenant_id``.
    """

    __tablename__ = "tasks"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    tenant_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("tenants.id"), nullable=False
    )
    project_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("projects.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.TODO.value
    )
    priority: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskPriority.MEDIUM.value
    )
    assigned_to: Mapped[UUID | None] = mapped_column(
        PortableUUID(), ForeignKey("users.id"), nullable=True
    )
    created_by: Mapped[UUID | None] = mapped_column(
        PortableUUID(), ForeignKey("users.id"), nullable=True
    )

    __table_args__ = (
        Index("idx_tasks_project", "project_id"),
        Index("idx_tasks_tenant", "tenant_id"),
        Index("idx_tasks_assigned", "assigned_to"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title}, status={self.status})>"
