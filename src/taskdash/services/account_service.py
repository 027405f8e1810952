"""Account service — registration and password login.

Learn: Login returns a JWT for the account. The API hands it to the
client as {token, username}; the browser flow stores the same token in
the session record. Unknown username and wrong password raise the same
BadCredentials so the response doesn't reveal which accounts exist.

Duplicate checks run before the insert for friendly messages; the unique
constraints still decide when two registrations race.
"""

from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.identity import Identity
from taskdash.auth.jwt import CredentialAuthority
from taskdash.auth.password import hash_password, verify_password
from taskdash.db.models import User
from taskdash.db.stores import AccountStore
from taskdash.errors import BadCredentials, DuplicateAccount

logger = structlog.get_logger()


class AccountService:
    def __init__(self, db: AsyncSession, authority: CredentialAuthority):
        self.accounts = AccountStore(db)
        self.authority = authority

    async def register(
        self, username: str, password: str, email: Optional[str] = None
    ) -> User:
        if await self.accounts.exists_by_username(username):
            raise DuplicateAccount("Username already exists")
        if email and await self.accounts.exists_by_email(email):
            raise DuplicateAccount("Email already exists")

        try:
            user = await self.accounts.save(
                User(
                    username=username,
                    email=email or None,
                    password_hash=hash_password(password),
                )
            )
        except IntegrityError:
            # A concurrent registration won the unique constraint.
            await self.accounts.rollback()
            logger.info("account.register_conflict", username=username)
            if await self.accounts.exists_by_username(username):
                raise DuplicateAccount("Username already exists")
            raise DuplicateAccount("Email already exists")

        logger.info("account.registered", username=username, user_id=str(user.id))
        return user

    async def login(self, username: str, password: str) -> tuple[str, User]:
        """Check the password and issue a credential. Returns (token, user)."""
        user = await self.accounts.find_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", username=username)
            raise BadCredentials()

        token = self.authority.issue(Identity(user_id=user.id, username=user.username))
        return token, user
