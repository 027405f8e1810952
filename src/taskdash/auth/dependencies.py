"""FastAPI auth dependencies for the JSON API.

Learn: These are used as Depends() in route handlers (or at the
include_router level) to extract and validate the current identity
from the request.

The API is stateless: every call carries "Authorization: Bearer <jwt>".
Whatever goes wrong (no header, wrong scheme, bad signature, expired,
account gone), the client sees the same 401 body. The specific reason
is logged server-side only.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from taskdash.auth.identity import Identity, IdentityResolver, get_identity_resolver
from taskdash.auth.jwt import IdentityError
from taskdash.errors import Unauthenticated

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


class RequestAuthGate:
    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver

    async def authenticate(self, authorization: Optional[str]) -> Identity:
        """Resolve the Authorization header value or raise Unauthenticated."""
        # Auth schemes are case-insensitive (RFC 7235)
        scheme = (authorization or "")[:len(BEARER_PREFIX)]
        if scheme.lower() != BEARER_PREFIX.lower():
            raise Unauthenticated()

        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            raise Unauthenticated()

        try:
            return await self.resolver.resolve(token, source="bearer")
        except IdentityError as e:
            logger.info("auth.bearer_rejected", reason=type(e).__name__)
            raise Unauthenticated()


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    """Extract current identity (required — 401 if no valid auth).

    Learn: The resolved identity is also stored on request.state so
    middleware and error handlers can see who made the call. Handlers
    take it from this dependency and never decode tokens themselves.
    """
    identity = await RequestAuthGate(resolver).authenticate(authorization)
    request.state.identity = identity
    return identity
