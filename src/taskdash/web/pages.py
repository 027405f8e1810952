"""Full-page browser routes.

Learn: /, /login and /register are public. If the browser already has
a live session they redirect to /dashboard rather than showing a login
form to someone who is logged in. /dashboard and /stats are gated by
the session bridge.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.identity import Identity
from taskdash.auth.session_bridge import (
    SessionBridge,
    get_browser_session,
    get_session_bridge,
    get_session_identity,
)
from taskdash.auth.sessions import BrowserSession
from taskdash.clock import get_today
from taskdash.db.engine import get_db
from taskdash.services.scoring import compute_snapshot
from taskdash.services.task_service import TaskService
from taskdash.web.templating import templates

router = APIRouter()


async def _public_page(
    request: Request,
    template: str,
    session: BrowserSession,
    bridge: SessionBridge,
):
    if await bridge.has_live_session(session):
        return RedirectResponse("/dashboard", status_code=303)
    error: Optional[str] = request.query_params.get("error")
    return templates.TemplateResponse(request, template, {"error": error})


@router.get("/", response_class=HTMLResponse)
async def index_page(
    request: Request,
    session: BrowserSession = Depends(get_browser_session),
    bridge: SessionBridge = Depends(get_session_bridge),
):
    return await _public_page(request, "index.html", session, bridge)


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    session: BrowserSession = Depends(get_browser_session),
    bridge: SessionBridge = Depends(get_session_bridge),
):
    return await _public_page(request, "login.html", session, bridge)


@router.get("/register", response_class=HTMLResponse)
async def register_page(
    request: Request,
    session: BrowserSession = Depends(get_browser_session),
    bridge: SessionBridge = Depends(get_session_bridge),
):
    return await _public_page(request, "register.html", session, bridge)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    identity: Identity = Depends(get_session_identity),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    tasks = await TaskService(db).list_tasks(identity.user_id)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "username": identity.username,
            "tasks": tasks,
            "snapshot": compute_snapshot(tasks, today),
            "error": request.query_params.get("error"),
        },
    )


@router.get("/stats", response_class=HTMLResponse)
async def stats_page(
    request: Request,
    identity: Identity = Depends(get_session_identity),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    tasks = await TaskService(db).list_tasks(identity.user_id)
    return templates.TemplateResponse(
        request,
        "stats.html",
        {
            "username": identity.username,
            "snapshot": compute_snapshot(tasks, today),
        },
    )
