"""Pydantic schemas for tasks and task listing."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from taskhive.core.types import TaskPriority, TaskStatus

from .base import PayloadModel, UpdatePayload

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class TaskCreate(PayloadModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: UUID | None = None

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class TaskUpdate(UpdatePayload):
    nullable_fields = frozenset({"description", "assigned_to"})

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: UUID | None = None

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class TaskStatusUpdate(PayloadModel):
    status: TaskStatus


class TaskFilters(PayloadModel):
    """Conjunctive task filters and pagination.

    ``assigned_to`` present but empty or null selects unassigned tasks.
    Page size is clamped to [1, 100] and pages below 1 become 1.
    """

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: UUID | None = None
    search: str | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("status", "priority", "search", mode="before")
    @classmethod
    def blank_is_absent(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("page", mode="before")
    @classmethod
    def clamp_page(cls, v: Any) -> int:
        try:
            page = int(v)
        except (TypeError, ValueError):
            return 1
        return max(page, 1)

    @field_validator("page_size", mode="before")
    @classmethod
    def clamp_page_size(cls, v: Any) -> int:
        try:
            size = int(v)
        except (TypeError, ValueError):
            return DEFAULT_PAGE_SIZE
        if size < 1:
            return DEFAULT_PAGE_SIZE if size == 0 else 1
        return min(size, MAX_PAGE_SIZE)

    @property
    def filters_unassigned(self) -> bool:
        return "assigned_to" in self.model_fields_set and self.assigned_to is None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class TaskResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    project_id: UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    assigned_to: UUID | None
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskPage(BaseModel):
    """One page of a filtered task listing."""

    data: list[TaskResponse]
    page: int
    page_size: int
    total: int
