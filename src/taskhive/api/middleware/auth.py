"""Authentication middleware for bearer token validation."""

import re
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from taskhive.api.middleware.errors import error_response
from taskhive.api.schemas.errors import ErrorCode
from taskhive.config.settings import get_settings
from taskhive.core.exceptions import AuthenticationError
from taskhive.core.security import TokenService

# Paths that don't require authentication
SKIP_AUTH_PATHS = {
    "/health",
    "/health/db",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/api/auth/register-tenant",
    "/api/auth/login",
}

SKIP_AUTH_PREFIXES = (
    "/docs",
    "/redoc",
)

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware that verifies the bearer token and records the identity.

    The identity is the only source of tenant scope; nothing in the body
    or query string can change it.

    Sets:
        request.state.identity: IdentityContext of the authenticated user
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and validate authentication."""
        if self._should_skip_auth(request.url.path) or request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return self._unauthorized_response(request, "Missing Authorization header")

        match = BEARER_PATTERN.match(auth_header)
        if not match:
            return self._unauthorized_response(request, "Invalid Authorization header format")

        try:
            identity = self._token_service(request).verify(match.group(1))
        except AuthenticationError as e:
            return self._unauthorized_response(request, e.message)

        request.state.identity = identity.model_copy(
            update={"request_id": getattr(request.state, "request_id", identity.request_id)}
        )
        return await call_next(request)

    def _should_skip_auth(self, path: str) -> bool:
        """Check if path should skip authentication."""
        return path in SKIP_AUTH_PATHS or path.startswith(SKIP_AUTH_PREFIXES)

    def _token_service(self, request: Request) -> TokenService:
        settings = getattr(request.app.state, "settings", None) or get_settings()
        return TokenService.from_settings(settings)

    def _unauthorized_response(self, request: Request, message: str) -> Response:
        """Create a 401 unauthorized response."""
        return error_response(
            request,
            401,
            ErrorCode.UNAUTHORIZED.value,
            message,
            headers={"WWW-Authenticate": "Bearer"},
        )
