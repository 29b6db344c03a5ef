"""Project model."""

from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from taskhive.core.types import ProjectStatus

from .base import Base, PortableUUID, TimestampMixin


class Project(Base, TimestampMixin):
    """A project owned by a tenant."""

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    tenant_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("tenants.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.ACTIVE.value
    )
    # Cleared when the creating user is deleted
    created_by: Mapped[UUID | None] = mapped_column(
        PortableUUID(), ForeignKey("users.id"), nullable=True
    )

    __table_args__ = (Index("idx_projects_tenant", "tenant_id"),)

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name})>"
