"""Exception handlers — one error taxonomy, two renderings.

Learn: API paths (/api/...) always get the same JSON body:
    {timestamp, status, message, path}
Browser paths never see JSON errors; they are redirected instead:
- LoginRequired → /login
- other domain errors → the page the form came from, with ?error=<message>

htmx requests (HX-Request: true) can't follow a 303 into a full page,
so they get an empty 200 with an HX-Redirect header instead.

Anything unclassified is logged with its traceback and answered with a
generic 500 message, so no internal detail crosses the boundary. When the
failing page is itself the redirect target, it is rendered in place with
the error instead.
"""

from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, RedirectResponse, Response

from taskdash.errors import LoginRequired, TaskdashError
from taskdash.web.templating import templates

logger = structlog.get_logger()

UNEXPECTED_ERROR = "An unexpected error occurred"

# Form posts that fail bounce back to the page holding the form.
_FORM_PAGES = {
    "/ui/login": "/login",
    "/ui/register": "/register",
}


def is_api_request(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def error_body(status: int, message: str, path: str) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status,
        "message": message,
        "path": path,
    }


def error_response(
    request: Request,
    status: int,
    message: str,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=error_body(status, message, request.url.path),
        headers=headers,
    )


def browser_redirect(request: Request, url: str) -> Response:
    if request.headers.get("HX-Request") == "true":
        return Response(status_code=200, headers={"HX-Redirect": url})
    return RedirectResponse(url, status_code=303)


def browser_error(request: Request, message: str, status: int) -> Response:
    """Send the browser back to a page that can show the message."""
    page = _FORM_PAGES.get(request.url.path, "/dashboard")
    if page == request.url.path:
        # The page itself failed; redirecting to it again would loop.
        return templates.TemplateResponse(
            request, "base.html", {"error": message}, status_code=status
        )
    return browser_redirect(request, f"{page}?{urlencode({'error': message})}")


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


async def taskdash_error_handler(request: Request, exc: TaskdashError) -> Response:
    logger.info(
        "request.rejected",
        error=type(exc).__name__,
        status=exc.status_code,
        message=exc.message,
    )
    if is_api_request(request):
        return error_response(request, exc.status_code, exc.message, exc.headers)
    return browser_error(request, exc.message, exc.status_code)


async def login_required_handler(request: Request, exc: LoginRequired) -> Response:
    if is_api_request(request):
        return error_response(request, 401, "Authentication required")
    return browser_redirect(request, "/login")


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    message = ", ".join(
        f"{_field_name(err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.info("request.validation_failed", message=message)
    if is_api_request(request):
        return error_response(request, 400, message)
    return browser_error(request, message, 400)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    if is_api_request(request) or request.url.path.startswith("/static/"):
        return error_response(request, exc.status_code, str(exc.detail), exc.headers)
    return browser_error(request, str(exc.detail), exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.exception("request.unhandled_error", error=type(exc).__name__)
    if is_api_request(request):
        return error_response(request, 500, UNEXPECTED_ERROR)
    return browser_error(request, UNEXPECTED_ERROR, 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskdashError, taskdash_error_handler)
    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
