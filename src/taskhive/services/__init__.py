"""Entity services composing resolver, evaluator, quota guard and transactor."""

from .auth import AuthService
from .projects import ProjectService
from .tasks import TaskService
from .tenants import TenantService
from .users import UserService

__all__ = [
    "AuthService",
    "ProjectService",
    "TaskService",
    "TenantService",
    "UserService",
]
