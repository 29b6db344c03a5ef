"""Closed enumerations shared by the core and the HTTP boundary."""

from enum import Enum


class Role(str, Enum):
    """Role of an authenticated actor."""

    SUPER_ADMIN = "super_admin"  # Platform operator, not bound to a tenant
    TENANT_ADMIN = "tenant_admin"  # Manages everything inside one tenant
    USER = "user"  # Regular member of a tenant


class Plan(str, Enum):
    """Subscription plan of a tenant."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class TenantStatus(str, Enum):
    """Lifecycle status of a tenant."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    TRIAL = "trial"


class ProjectStatus(str, Enum):
    """Status of a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    """Status of a task. Any transition is allowed."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EntityKind(str, Enum):
    """Kinds of tenant-scoped entities the resolver understands."""

    TENANT = "tenant"
    USER = "user"
    PROJECT = "project"
    TASK = "task"


class QuotaKind(str, Enum):
    """Resources whose live count is capped per tenant."""

    USERS = "users"
    PROJECTS = "projects"


class AuditAction(str, Enum):
    """Kind of mutation recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Action(str, Enum):
    """Operations subject to permission evaluation."""

    # Tenants
    TENANT_LIST = "tenant.list"
    TENANT_READ = "tenant.read"
    TENANT_UPDATE = "tenant.update"

    # Users
    USER_CREATE = "user.create"
    USER_LIST = "user.list"
    USER_UPDATE = "user.update"
    USER_DELETE = "user.delete"

    # Projects
    PROJECT_CREATE = "project.create"
    PROJECT_LIST = "project.list"
    PROJECT_UPDATE = "project.update"
    PROJECT_DELETE = "project.delete"

    # Tasks
    TASK_CREATE = "task.create"
    TASK_LIST = "task.list"
    TASK_UPDATE = "task.update"
    TASK_UPDATE_STATUS = "task.update_status"
    TASK_DELETE = "task.delete"
