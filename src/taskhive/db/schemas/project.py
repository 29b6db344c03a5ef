"""Pydantic schemas for projects."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from taskhive.core.types import ProjectStatus

from .base import PayloadModel, UpdatePayload


class ProjectCreate(PayloadModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class ProjectUpdate(UpdatePayload):
    nullable_fields = frozenset({"description"})

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus | None = None


class ProjectResponse(BaseModel):
    """Project with task aggregates computed in the same transaction."""

    id: UUID
    tenant_id: UUID
    name: str
    description: str | None
    status: ProjectStatus
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime
    task_count: int = 0
    completed_task_count: int = 0

    model_config = {"from_attributes": True}
