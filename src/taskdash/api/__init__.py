"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health and auth routers are
open (no auth required); /auth/me guards itself.
"""

from fastapi import APIRouter, Depends

from taskdash.api.auth import router as auth_router
from taskdash.api.health import router as health_router
from taskdash.api.stats import router as stats_router
from taskdash.api.tasks import router as tasks_router
from taskdash.auth.dependencies import get_current_user

# All protected routers require a valid bearer token
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
api_router.include_router(stats_router, tags=["stats"], dependencies=_auth)
