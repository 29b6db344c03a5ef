"""Pydantic schemas for audit log entries."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from taskhive.core.types import AuditAction


class AuditLogResponse(BaseModel):
    """Schema for an audit log entry."""

    id: UUID
    tenant_id: UUID | None
    table_name: str
    record_id: UUID
    action: AuditAction
    actor_user_id: UUID | None
    metadata: dict[str, Any] = Field(validation_alias="details")
    correlation_id: UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}
