"""Pydantic schemas for users."""

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from taskhive.core.types import Role

from .base import PayloadModel, UpdatePayload

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# super_admin is never granted through the API
AssignableRole = Literal["tenant_admin", "user"]


class UserCreate(PayloadModel):
    """Schema for creating a user inside a tenant."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    role: AssignableRole = "user"
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class UserUpdate(UpdatePayload):
    """Schema for updating a user. Self updates may only change names."""

    nullable_fields = frozenset({"first_name", "last_name"})

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    role: AssignableRole | None = None


class UserResponse(BaseModel):
    """Sanitized user. Credential material is never included."""

    id: UUID
    tenant_id: UUID | None
    email: str
    role: Role
    first_name: str | None
    last_name: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
