"""Identity resolution — credential → live account.

Learn: A valid signature and an unexpired exp are necessary but not
sufficient. The resolver also looks the account up on every call, so
a token whose account has been deleted stops working immediately even
though it still verifies. Both the API gate and the session bridge go
through resolve(), which keeps their validation semantics identical.

Accounts are looked up by the stable id in the uid claim, never by the
username in sub; the returned Identity carries the current username.
"""

import uuid
from dataclasses import dataclass
from typing import Literal

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.jwt import (
    CredentialAuthority,
    CredentialMalformed,
    IdentityError,
    get_authority,
)
from taskdash.db.engine import get_db
from taskdash.db.stores import AccountStore

IdentitySource = Literal["bearer", "session"]


class UnknownSubject(IdentityError):
    """Credential verifies, but its account no longer exists."""


@dataclass(frozen=True)
class Identity:
    """The authenticated user behind a request. Never stored."""

    user_id: uuid.UUID
    username: str
    source: IdentitySource = "bearer"


class IdentityResolver:
    def __init__(self, authority: CredentialAuthority, accounts: AccountStore):
        self.authority = authority
        self.accounts = accounts

    async def resolve(self, token: str, source: IdentitySource = "bearer") -> Identity:
        """Verify the token, then confirm its account still exists.

        Raises a CredentialError subclass or UnknownSubject.
        """
        claims = self.authority.verify(token)
        try:
            user_id = uuid.UUID(claims.user_id)
        except ValueError:
            raise CredentialMalformed("Invalid token: uid is not a UUID")

        user = await self.accounts.find_by_id(user_id)
        if user is None:
            raise UnknownSubject(f"No account for subject {claims.subject!r}")

        return Identity(user_id=user.id, username=user.username, source=source)


def get_identity_resolver(
    authority: CredentialAuthority = Depends(get_authority),
    db: AsyncSession = Depends(get_db),
) -> IdentityResolver:
    return IdentityResolver(authority, AccountStore(db))
