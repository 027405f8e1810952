"""JWT credential issuing and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The
same token is handed to API clients in the login response and stored
server-side in the browser session, so both surfaces share one
validation path.

Claims:
- sub: username at issue time
- uid: the account's stable id (used for the live lookup)
- iat / exp: issue and expiry timestamps

Verification order is signature → expiry → required claims. PyJWT
checks the signature before it looks at any registered claim, so a
tampered token that is also expired reports as a bad signature.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

import jwt

from taskdash.config import settings

if TYPE_CHECKING:
    from taskdash.auth.identity import Identity


class IdentityError(Exception):
    """Any failure to turn a credential into a live identity."""


class CredentialError(IdentityError):
    """Raised when a credential cannot be trusted."""


class CredentialMalformed(CredentialError):
    """Token is undecodable or is missing required claims."""


class CredentialSignatureInvalid(CredentialMalformed):
    """Token decodes but was not signed with our secret."""


class CredentialExpired(CredentialError):
    """Token is genuine but its exp claim has passed."""


@dataclass(frozen=True)
class CredentialClaims:
    subject: str
    user_id: str
    issued_at: datetime
    expires_at: datetime


class CredentialAuthority:
    """Issues and verifies signed bearer credentials.

    Stateless: holds only the signing parameters, so a single instance
    can serve every request concurrently.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: Optional[timedelta] = None):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl or timedelta(minutes=settings.access_token_expire_minutes)

    def issue(self, identity: "Identity", ttl: Optional[timedelta] = None) -> str:
        """Create a signed token for the identity, expiring after ttl."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": identity.username,
            "uid": str(identity.user_id),
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.ttl),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> CredentialClaims:
        """Verify and decode a token.

        Returns the claims on success.
        Raises CredentialSignatureInvalid, CredentialMalformed or
        CredentialExpired on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "uid", "iat", "exp"]},
            )
        except jwt.InvalidSignatureError:
            raise CredentialSignatureInvalid("Token signature is invalid")
        except jwt.ExpiredSignatureError:
            raise CredentialExpired("Token has expired")
        except jwt.InvalidTokenError as e:
            raise CredentialMalformed(f"Invalid token: {e}")

        if not isinstance(payload["uid"], str) or not payload["uid"]:
            raise CredentialMalformed("Invalid token: bad uid claim")

        return CredentialClaims(
            subject=payload["sub"],
            user_id=payload["uid"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def is_live(self, token: Optional[str]) -> bool:
        """Probe a token without raising. Used by read-only checks."""
        if not token:
            return False
        try:
            self.verify(token)
        except CredentialError:
            return False
        return True


@lru_cache
def get_authority() -> CredentialAuthority:
    """FastAPI dependency — the process-wide authority built from settings."""
    return CredentialAuthority(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
