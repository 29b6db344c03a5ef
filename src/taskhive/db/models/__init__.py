"""Database models."""

from .audit import AuditLogEntry
from .base import Base, PortableJSON, PortableUUID, TimestampMixin
from .project import Project
from .task import Task
from .tenant import Tenant
from .user import User

__all__ = [
    "Base",
    "PortableJSON",
    "PortableUUID",
    "TimestampMixin",
    "Tenant",
    "User",
    "Project",
    "Task",
    "AuditLogEntry",
]
