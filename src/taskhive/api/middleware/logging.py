"""Request logging middleware."""

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from uuid_utils.compat import uuid7

from taskhive.core.logging import log_request_end

logger = structlog.get_logger("taskhive.api.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a request ID and logs one line per request.

    Sets:
        request.state.request_id: UUIDv7 for the request
        X-Request-ID response header: For client correlation
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and log request/response."""
        start_time = time.perf_counter()
        request_id = uuid7()
        request.state.request_id = request_id

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = str(request_id)

        identity = getattr(request.state, "identity", None)
        log_request_end(
            logger,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id=str(request_id),
            tenant_id=str(identity.tenant_id) if identity and identity.tenant_id else None,
            user_id=str(identity.user_id) if identity else None,
            client_ip=self._get_client_ip(request),
        )

        return response

    def _get_client_ip(self, request: Request) -> str | None:
        """Extract client IP from request, considering proxy headers."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return None
