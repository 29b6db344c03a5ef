"""Repositories for read access to persisted entities."""

from .base import BaseRepository
from .project import ProjectRepository
from .task import TaskRepository
from .tenant import TenantRepository
from .user import UserRepository

__all__ = [
    "BaseRepository",
    "ProjectRepository",
    "TaskRepository",
    "TenantRepository",
    "UserRepository",
]
