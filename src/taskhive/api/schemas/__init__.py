"""API-only response schemas."""

from .errors import APIError, ErrorCode
from .health import ComponentHealth, HealthDetailResponse, HealthResponse, HealthStatus

__all__ = [
    "APIError",
    "ErrorCode",
    "ComponentHealth",
    "HealthDetailResponse",
    "HealthResponse",
    "HealthStatus",
]
