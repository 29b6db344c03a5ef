"""Pydantic schemas for login and the current profile."""

from pydantic import BaseModel, Field, field_validator

from .base import PayloadModel
from .tenant import TenantResponse
from .user import UserResponse


class LoginRequest(PayloadModel):
    """Credentials. Without a subdomain only platform users can log in."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    subdomain: str | None = None

    @field_validator("subdomain", mode="before")
    @classmethod
    def blank_subdomain(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.lower() if isinstance(v, str) else v


class LoginResult(BaseModel):
    token: str
    user: UserResponse


class Profile(BaseModel):
    """The authenticated user and their tenant, if any."""

    user: UserResponse
    tenant: TenantResponse | None = None
