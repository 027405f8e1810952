"""Server-rendered browser UI.

Pages and htmx fragments behind the session bridge, plus the public
login/registration forms.
"""

from fastapi import APIRouter

from taskdash.web.auth import router as ui_auth_router
from taskdash.web.pages import router as pages_router
from taskdash.web.tasks import router as ui_tasks_router

ui_router = APIRouter(include_in_schema=False)
ui_router.include_router(pages_router)
ui_router.include_router(ui_auth_router)
ui_router.include_router(ui_tasks_router)
