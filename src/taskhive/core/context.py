"""Identity context for async-safe, tenant-scoped operations.

The authenticated actor travels through the core as an explicit
``IdentityContext`` argument. The same object is also published in a
context variable for the duration of a request so log records can be
correlated without threading it through every call.

Usage:
    from taskhive.core.context import IdentityContext, request_context

    ctx = create_context(user_id=user_uuid, tenant_id=tenant_uuid, role=Role.USER)

    async with ...:
        with request_context(ctx):
            await project_service.create_project(ctx, payload)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from uuid_utils.compat import uuid7

from taskhive.core.exceptions import ContextNotSetError
from taskhive.core.types import Role


class IdentityContext(BaseModel):
    """The authenticated actor of a single request.

    Immutable once constructed. ``tenant_id`` may only be ``None`` for a
    super_admin that does not belong to any tenant.
    """

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    tenant_id: UUID | None = None
    role: Role

    # Correlation
    request_id: UUID = Field(default_factory=uuid7)
    correlation_id: UUID = Field(default_factory=uuid7)

    @model_validator(mode="after")
    def validate_tenant_binding(self) -> Self:
        """Only super_admin may act without a tenant."""
        if self.tenant_id is None and self.role != Role.SUPER_ADMIN:
            raise ValueError(f"tenant_id is required for role '{self.role.value}'")
        return self

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    def to_log_dict(self) -> dict[str, Any]:
        """Fields bound onto every log record emitted under this identity."""
        return {
            "request_id": str(self.request_id),
            "correlation_id": str(self.correlation_id),
            "tenant_id": str(self.tenant_id) if self.tenant_id else None,
            "user_id": str(self.user_id),
            "role": self.role.value,
        }


# =============================================================================
# Context Variable Management
# =============================================================================

_identity_context: ContextVar[IdentityContext | None] = ContextVar(
    "identity_context", default=None
)


def get_current_context() -> IdentityContext:
    """Get the identity of the current request.

    Raises:
        ContextNotSetError: If no identity is set in the current execution context
    """
    ctx = _identity_context.get()
    if ctx is None:
        raise ContextNotSetError(
            "No identity context is set. Use request_context() context manager."
        )
    return ctx


def get_current_context_or_none() -> IdentityContext | None:
    """Get the identity of the current request, or None if not set."""
    return _identity_context.get()


def set_context(ctx: IdentityContext) -> Token[IdentityContext | None]:
    """Set the identity context and return a token for restoration.

    This is a low-level API. Prefer using the request_context() context manager.
    """
    return _identity_context.set(ctx)


def reset_context(token: Token[IdentityContext | None]) -> None:
    """Reset the context to its previous value using a token."""
    _identity_context.reset(token)


@contextmanager
def request_context(ctx: IdentityContext) -> Iterator[IdentityContext]:
    """Context manager for publishing an identity for the duration of a block.

    Works for both sync and async code because contextvars are
    propagated to async tasks.
    """
    token = set_context(ctx)
    try:
        yield ctx
    finally:
        reset_context(token)


def create_context(
    *,
    user_id: UUID,
    tenant_id: UUID | None,
    role: Role | str,
    request_id: UUID | None = None,
    correlation_id: UUID | None = None,
) -> IdentityContext:
    """Factory function to create an IdentityContext with generated ids.

    Args:
        user_id: Authenticated user
        tenant_id: Tenant of the user (None only for super_admin)
        role: Role of the user
        request_id: Optional request id (auto-generated if not provided)
        correlation_id: Optional correlation id (auto-generated if not provided)
    """
    return IdentityContext(
        user_id=user_id,
        tenant_id=tenant_id,
        role=Role(role),
        request_id=request_id or uuid7(),
        correlation_id=correlation_id or uuid7(),
    )
