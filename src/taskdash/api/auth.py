"""Auth API — registration, login, current user.

Learn: Routes for API-client authentication:
- POST /auth/register → create a new account
- POST /auth/login → username/password → {token, username}
- GET /auth/me → the identity behind the bearer token

The token returned by /login is the same kind the browser UI keeps in
its session record, so one account works on both surfaces.
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.dependencies import get_current_user
from taskdash.auth.identity import Identity
from taskdash.auth.jwt import CredentialAuthority, get_authority
from taskdash.db.engine import get_db
from taskdash.db.stores import AccountStore
from taskdash.errors import ResourceNotFound
from taskdash.services.account_service import AccountService

router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    token: str
    username: str


class AccountRead(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: uuid.UUID
    username: str
    email: Optional[str] = None
    created_at: datetime


def _svc(
    db: AsyncSession = Depends(get_db),
    authority: CredentialAuthority = Depends(get_authority),
) -> AccountService:
    return AccountService(db, authority)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AccountRead, status_code=201)
async def register(body: RegisterRequest, svc: AccountService = Depends(_svc)):
    """Create a new account. 409 if the username or email is taken."""
    return await svc.register(
        username=body.username,
        password=body.password,
        email=body.email,
    )


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AccountService = Depends(_svc)):
    """Login with username and password → bearer token."""
    token, user = await svc.login(body.username, body.password)
    return AuthResponse(token=token, username=user.username)


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=AccountRead)
async def get_me(
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's account."""
    user = await AccountStore(db).find_by_id(identity.user_id)
    if user is None:
        raise ResourceNotFound("User not found")
    return user
