"""API routers."""

from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router
from .projects import router as projects_router
from .tasks import router as tasks_router
from .tenants import router as tenants_router
from .users import router as users_router

# Everything except health checks lives under /api
api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router)
api_router.include_router(tenants_router)
api_router.include_router(users_router)
api_router.include_router(projects_router)
api_router.include_router(tasks_router)

__all__ = ["api_router", "health_router"]
