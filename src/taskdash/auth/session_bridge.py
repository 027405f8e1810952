"""Session bridge — gates browser routes on a session-held credential.

Learn: Browsers authenticate once and keep the JWT server-side in
their session record. Every gated page re-runs the full resolver on
that stored JWT, so a token that expired or whose account vanished is
rejected here exactly as the API gate would reject it.

State machine per gated request:
  NoSession          → LoginRequired
  NoCredential       → LoginRequired
  CredentialPresent  → resolve()
      ok             → Authorized (Identity returned)
      any failure    → session destroyed, LoginRequired

Public pages (login, register, landing) use has_live_session() instead,
which never raises and only clears the stale credential.
"""

from typing import Optional

import structlog
from fastapi import Depends, Request

from taskdash.auth.identity import Identity, IdentityResolver, get_identity_resolver
from taskdash.auth.jwt import IdentityError
from taskdash.auth.sessions import CREDENTIAL_KEY, USERNAME_KEY, BrowserSession
from taskdash.errors import LoginRequired

logger = structlog.get_logger()


class SessionBridge:
    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver

    async def gate(self, session: BrowserSession) -> Identity:
        """Return the session's identity or raise LoginRequired."""
        if not session.exists:
            raise LoginRequired()

        token: Optional[str] = session.get(CREDENTIAL_KEY)
        if not token:
            raise LoginRequired()

        try:
            return await self.resolver.resolve(token, source="session")
        except IdentityError as e:
            logger.warning(
                "session.invalidated",
                reason=type(e).__name__,
                username=session.get(USERNAME_KEY),
            )
            await session.destroy()
            raise LoginRequired()

    async def has_live_session(self, session: BrowserSession) -> bool:
        """Non-throwing probe for public pages.

        A dead credential is removed from the record; the record itself
        survives so the page can still render.
        """
        token: Optional[str] = session.get(CREDENTIAL_KEY)
        if not token:
            return False
        if not self.resolver.authority.is_live(token):
            await session.remove(CREDENTIAL_KEY)
            return False
        try:
            await self.resolver.resolve(token, source="session")
        except IdentityError as e:
            logger.info("session.stale_credential", reason=type(e).__name__)
            await session.remove(CREDENTIAL_KEY)
            return False
        return True

    async def establish(self, session: BrowserSession, token: str, username: str) -> None:
        """Bind a freshly issued credential to a new session id."""
        await session.renew()
        await session.set(CREDENTIAL_KEY, token)
        await session.set(USERNAME_KEY, username)
        logger.info("session.established", username=username)

    async def logout(self, session: BrowserSession) -> None:
        """Always succeeds; no validation of what the session holds."""
        username = session.get(USERNAME_KEY)
        await session.destroy()
        logger.info("session.logout", username=username)


# ─── FastAPI dependencies ────────────────────────────────


def get_browser_session(request: Request) -> BrowserSession:
    """The session loaded by SessionMiddleware for this request."""
    return request.state.session


def get_session_bridge(
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> SessionBridge:
    return SessionBridge(resolver)


async def get_session_identity(
    request: Request,
    session: BrowserSession = Depends(get_browser_session),
    bridge: SessionBridge = Depends(get_session_bridge),
) -> Identity:
    """Gate dependency for browser routes."""
    identity = await bridge.gate(session)
    request.state.identity = identity
    return identity
