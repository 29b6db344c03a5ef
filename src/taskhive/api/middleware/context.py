"""Identity context middleware for log correlation."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from taskhive.core.context import request_context


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Publishes the authenticated identity in a ContextVar for the request.

    Requires:
        request.state.identity: Set by AuthenticationMiddleware (absent on public paths)

    Sets:
        X-Correlation-ID response header: Correlation id of the identity
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request within the identity's context."""
        identity = getattr(request.state, "identity", None)
        if identity is None:
            return await call_next(request)

        with request_context(identity):
            response = await call_next(request)

        response.headers["X-Correlation-ID"] = str(identity.correlation_id)
        return response
