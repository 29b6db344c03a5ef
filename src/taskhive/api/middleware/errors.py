"""Error handling middleware for mapping exceptions to HTTP responses."""

from datetime import UTC, datetime
from typing import Any, Callable
from uuid import UUID

import structlog
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from taskhive.api.schemas.errors import APIError, ErrorCode
from taskhive.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ContextNotSetError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    QuotaExceededError,
    ValidationFailedError,
)

logger = structlog.get_logger("taskhive.api.errors")

# Exception to HTTP status/error code mapping, most specific first
# Format: Exception -> (status_code, error_code)
EXCEPTION_MAP: dict[type[Exception], tuple[int, str]] = {
    AuthenticationError: (401, ErrorCode.UNAUTHORIZED.value),
    ValidationFailedError: (400, ErrorCode.VALIDATION_ERROR.value),
    NotFoundError: (404, ErrorCode.NOT_FOUND.value),
    ForbiddenError: (403, ErrorCode.FORBIDDEN.value),
    QuotaExceededError: (409, ErrorCode.QUOTA_EXCEEDED.value),
    ConflictError: (409, ErrorCode.CONFLICT.value),
    InternalError: (500, ErrorCode.INTERNAL_ERROR.value),
    ContextNotSetError: (500, ErrorCode.INTERNAL_ERROR.value),
}


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an APIError body."""
    request_id = get_request_id(request)
    error = APIError(
        error_code=error_code,
        message=message,
        details=details,
        request_id=request_id,
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json"),
        headers={"X-Request-ID": request_id, **(headers or {})},
    )


def get_request_id(request: Request) -> str:
    """Extract request ID from state or return a placeholder."""
    rid = getattr(request.state, "request_id", None)
    if rid is None:
        return "unknown"
    return str(rid) if isinstance(rid, UUID) else rid


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed path/query/body errors in the APIError format."""
    return error_response(
        request,
        422,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        {"errors": [{"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]} for e in exc.errors()]},
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Internal failures never expose their detail to the client.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exception to JSON error response."""
        status_code, error_code, message, details = self._map_exception(exc)

        if status_code >= 500:
            logger.exception("unhandled_error", error_type=type(exc).__name__)

        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return error_response(request, status_code, error_code, message, details, headers)

    def _map_exception(
        self, exc: Exception
    ) -> tuple[int, str, str, dict | None]:
        """Map exception to (status_code, error_code, message, details)."""
        for exc_type, (status_code, error_code) in EXCEPTION_MAP.items():
            if not isinstance(exc, exc_type):
                continue

            if status_code >= 500:
                return status_code, error_code, "Internal server error", None

            return status_code, error_code, exc.message, self._details(exc)

        return 500, ErrorCode.INTERNAL_ERROR.value, "Internal server error", None

    def _details(self, exc: Exception) -> dict | None:
        if isinstance(exc, ValidationFailedError):
            return {"errors": exc.errors} if exc.errors else None
        if isinstance(exc, NotFoundError):
            return {"entity": exc.entity_kind}
        if isinstance(exc, QuotaExceededError):
            return {"resource": exc.resource_kind, "limit": exc.limit, "current": exc.current}
        return None
