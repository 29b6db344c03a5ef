"""Pydantic schemas for tenant registration, updates and responses."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from taskhive.core.types import Plan, TenantStatus

from .base import PayloadModel, UpdatePayload
from .user import UserResponse

# Subdomain: lowercase alphanumeric with inner hyphens, 1-63 chars
SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AdminAccount(PayloadModel):
    """First administrator created together with a tenant."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class TenantRegistration(PayloadModel):
    """Schema for registering a new tenant with its first admin."""

    name: str = Field(..., min_length=1, max_length=255, description="Tenant display name")
    subdomain: str = Field(..., min_length=1, max_length=63)
    plan: Plan | None = None
    admin: AdminAccount

    @field_validator("subdomain")
    @classmethod
    def validate_subdomain(cls, v: str) -> str:
        """Validate subdomain format: lowercase alphanumeric with hyphens."""
        v = v.lower()
        if not SUBDOMAIN_PATTERN.match(v):
            raise ValueError(
                "Subdomain must be lowercase alphanumeric with hyphens, "
                "cannot start or end with hyphen"
            )
        return v


class TenantUpdate(UpdatePayload):
    """Schema for updating an existing tenant. Which fields apply depends on the actor."""

    name: str | None = Field(None, min_length=1, max_length=255)
    plan: Plan | None = None
    status: TenantStatus | None = None
    max_users: int | None = Field(None, ge=0)
    max_projects: int | None = Field(None, ge=0)


class TenantStats(BaseModel):
    """Live resource counts of a tenant."""

    total_users: int = 0
    total_projects: int = 0
    total_tasks: int = 0


class TenantResponse(BaseModel):
    """Schema for tenant API responses."""

    id: UUID
    name: str
    subdomain: str
    plan: Plan
    status: TenantStatus
    max_users: int
    max_projects: int
    created_at: datetime
    updated_at: datetime
    stats: TenantStats | None = None

    model_config = {"from_attributes": True}


class RegistrationResult(BaseModel):
    """Outcome of a tenant registration."""

    token: str
    user: UserResponse
    tenant: TenantResponse
