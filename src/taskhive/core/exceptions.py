"""Core exceptions for authorization, quotas and tenant-scoped mutations.

Every error raised by the core carries an ``ErrorKind`` so the HTTP
boundary can classify it without inspecting the concrete class.
"""

from enum import Enum
from typing import Any
from uuid import UUID

from taskhive.utils.exceptions import TaskHiveError


class ErrorKind(str, Enum):
    """Classification of core errors."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INTERNAL = "internal"
    AUTHENTICATION = "authentication"


class CoreError(TaskHiveError):
    """Base class for classified errors raised by the core."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ContextNotSetError(TaskHiveError):
    """Raised when attempting to access an identity context that is not set.

    This error indicates a programming error - code requiring an identity
    is being called outside of a request_context() block.
    """

    def __init__(self, message: str = "Identity context is not set"):
        super().__init__(message)


class ValidationFailedError(CoreError):
    """Raised when a payload is malformed or violates a field constraint.

    Attributes:
        errors: Field-level problems, each ``{"field": ..., "message": ...}``
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        if not self.errors:
            return f"ValidationFailedError: {self.message}"
        fields = ", ".join(str(e.get("field")) for e in self.errors)
        return f"ValidationFailedError: {self.message} (fields={fields})"


class NotFoundError(CoreError):
    """Raised when a referenced entity does not exist.

    Attributes:
        entity_kind: Kind of entity that was looked up (tenant, user, ...)
        entity_id: Identifier that was looked up
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity_kind: str, entity_id: UUID | str | None = None, message: str | None = None):
        super().__init__(message or f"{entity_kind.capitalize()} not found")
        self.entity_kind = entity_kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"NotFoundError({self.entity_kind}, {self.entity_id}): {self.message}"


class ForbiddenError(CoreError):
    """Raised when the permission evaluator denies an operation.

    Attributes:
        action: The action that was denied
        reason: Human readable denial reason
    """

    kind = ErrorKind.FORBIDDEN

    def __init__(self, reason: str, action: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.action = action

    def __str__(self) -> str:
        return f"ForbiddenError({self.action}): {self.reason}"


class ConflictError(CoreError):
    """Raised when a mutation collides with a uniqueness or state constraint."""

    kind = ErrorKind.CONFLICT


class QuotaExceededError(ConflictError):
    """Raised when creating a resource would exceed the tenant's ceiling.

    Attributes:
        tenant_id: Tenant whose quota was checked
        resource_kind: Resource that is capped (users, projects)
        limit: The tenant's ceiling for that resource
        current: Live count at the time of the check
    """

    def __init__(
        self,
        message: str,
        tenant_id: UUID,
        resource_kind: str,
        limit: int,
        current: int,
    ):
        super().__init__(message)
        self.tenant_id = tenant_id
        self.resource_kind = resource_kind
        self.limit = limit
        self.current = current

    def __str__(self) -> str:
        return (
            f"QuotaExceededError: {self.message} "
            f"(tenant={self.tenant_id}, resource={self.resource_kind}, "
            f"limit={self.limit}, current={self.current})"
        )


class InternalError(CoreError):
    """Raised for unexpected storage failures. Details never leave the process."""

    kind = ErrorKind.INTERNAL


class DataIntegrityError(InternalError):
    """Raised when stored data violates a cross-entity invariant.

    Attributes:
        entity_kind: Kind of entity whose data is inconsistent
        entity_id: Identifier of that entity
    """

    def __init__(self, message: str, entity_kind: str, entity_id: UUID):
        super().__init__(message)
        self.entity_kind = entity_kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"DataIntegrityError({self.entity_kind}, {self.entity_id}): {self.message}"


class AuthenticationError(CoreError):
    """Raised when credentials or a bearer token cannot be verified."""

    kind = ErrorKind.AUTHENTICATION
