"""Domain errors shared by the API and the browser UI.

Learn: Services raise these instead of HTTPException so the same
service call can back a JSON endpoint and an HTML form post. The
exception handlers in taskdash.exception_handlers decide how each
surface renders them (structured JSON body vs. redirect).
"""

from typing import Optional


class TaskdashError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code: int = 400

    def __init__(self, message: str, headers: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers


class ResourceNotFound(TaskdashError):
    status_code = 404


class ValidationFailed(TaskdashError):
    status_code = 400


class DuplicateAccount(TaskdashError):
    status_code = 409


class BadCredentials(TaskdashError):
    status_code = 401

    def __init__(self):
        super().__init__("Invalid username or password")


class Unauthenticated(TaskdashError):
    """Uniform API rejection. Never says which identity check failed."""

    status_code = 401

    def __init__(self):
        super().__init__(
            "Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )


class LoginRequired(Exception):
    """Raised by the session bridge; rendered as a redirect to /login."""
