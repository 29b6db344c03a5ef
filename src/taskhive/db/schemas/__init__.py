"""Pydantic schemas for payload validation and responses."""

from .audit import AuditLogResponse
from .auth import LoginRequest, LoginResult, Profile
from .base import DeleteResult, PayloadModel, UpdatePayload, parse_payload
from .project import ProjectCreate, ProjectResponse, ProjectUpdate
from .task import TaskCreate, TaskFilters, TaskPage, TaskResponse, TaskStatusUpdate, TaskUpdate
from .tenant import (
    AdminAccount,
    RegistrationResult,
    TenantRegistration,
    TenantResponse,
    TenantStats,
    TenantUpdate,
)
from .user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "AuditLogResponse",
    "LoginRequest",
    "LoginResult",
    "Profile",
    "DeleteResult",
    "PayloadModel",
    "UpdatePayload",
    "parse_payload",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectUpdate",
    "TaskCreate",
    "TaskFilters",
    "TaskPage",
    "TaskResponse",
    "TaskStatusUpdate",
    "TaskUpdate",
    "AdminAccount",
    "RegistrationResult",
    "TenantRegistration",
    "TenantResponse",
    "TenantStats",
    "TenantUpdate",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
