"""Session middleware — loads and persists the server-side browser session.

Learn: Reads the session cookie, loads the record from the configured
SessionStore into request.state.session, and after the handler runs,
issues or clears the cookie depending on what happened to the session:
- renewed (login)         → Set-Cookie with the new id
- destroyed (logout/fail) → cookie deleted
- cookie pointed nowhere  → cookie deleted (stale id)
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from taskdash.auth.sessions import BrowserSession, SessionStore


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        store: SessionStore,
        cookie_name: str = "taskdash_session",
        max_age: int = 86400,
        secure: bool = False,
    ):
        super().__init__(app)
        self.store = store
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure

    async def dispatch(self, request: Request, call_next) -> Response:
        cookie = request.cookies.get(self.cookie_name)
        session = await BrowserSession.load(self.store, cookie)
        request.state.session = session

        response: Response = await call_next(request)

        if session.issued and session.exists:
            response.set_cookie(
                self.cookie_name,
                session.session_id,
                max_age=self.max_age,
                httponly=True,
                samesite="lax",
                secure=self.secure,
            )
        elif cookie and not session.exists:
            response.delete_cookie(self.cookie_name)
        return response
