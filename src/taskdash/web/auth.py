"""Browser login, registration and logout form posts.

Learn: These routes are public and outside the session gate. On
success they bind the freshly issued JWT to a new session id; on
failure they redirect back to the form with ?error=... Logout never
validates anything; it destroys the session and goes to /login.
"""

from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Depends, Form
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.jwt import CredentialAuthority, get_authority
from taskdash.auth.session_bridge import (
    SessionBridge,
    get_browser_session,
    get_session_bridge,
)
from taskdash.auth.sessions import BrowserSession
from taskdash.db.engine import get_db
from taskdash.errors import TaskdashError
from taskdash.services.account_service import AccountService

logger = structlog.get_logger()

router = APIRouter(prefix="/ui")


def _svc(
    db: AsyncSession = Depends(get_db),
    authority: CredentialAuthority = Depends(get_authority),
) -> AccountService:
    return AccountService(db, authority)


def _back_to(page: str, message: str) -> RedirectResponse:
    return RedirectResponse(f"{page}?{urlencode({'error': message})}", status_code=303)


@router.post("/register")
async def ui_register(
    username: str = Form(...),
    password: str = Form(...),
    email: str = Form(""),
    session: BrowserSession = Depends(get_browser_session),
    bridge: SessionBridge = Depends(get_session_bridge),
    svc: AccountService = Depends(_svc),
):
    try:
        await svc.register(username=username, password=password, email=email or None)
        token, user = await svc.login(username, password)
    except TaskdashError as e:
        logger.info("ui.register_failed", username=username, reason=e.message)
        return _back_to("/register", e.message)

    await bridge.establish(session, token, user.username)
    return RedirectResponse("/dashboard", status_code=303)


@router.post("/login")
async def ui_login(
    username: str = Form(...),
    password: str = Form(...),
    session: BrowserSession = Depends(get_browser_session),
    bridge: SessionBridge = Depends(get_session_bridge),
    svc: AccountService = Depends(_svc),
):
    try:
        token, user = await svc.login(username, password)
    except TaskdashError:
        return _back_to("/login", "Invalid credentials")

    await bridge.establish(session, token, user.username)
    return RedirectResponse("/dashboard", status_code=303)


@router.post("/logout")
async def ui_logout(
    session: BrowserSession = Depends(get_browser_session),
    bridge: SessionBridge = Depends(get_session_bridge),
):
    await bridge.logout(session)
    return RedirectResponse("/login", status_code=303)
