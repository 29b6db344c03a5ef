"""Tenant model for multi-tenancy support."""

from uuid import UUID

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from taskhive.core.types import Plan, TenantStatus

from .base import Base, PortableUUID, TimestampMixin


class Tenant(Base, TimestampMixin):
    """Tenant (customer organization) in the system.

    Every user, project and task belongs to exactly one tenant. Tenants are
    never hard-deleted; they are suspended instead.
    """

    __tablename__ = "tenants"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    # Subscription
    plan: Mapped[str] = mapped_column(String(20), nullable=False, default=Plan.PRO.value)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TenantStatus.ACTIVE.value
    )

    # Quotas (checked on creation only)
    max_users: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    max_projects: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    @property
    def tenant_id(self) -> UUID:
        """A tenant is its own scope."""
        return self.id

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, subdomain={self.subdomain})>"
