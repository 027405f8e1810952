"""Test fixtures — a fresh in-memory database and session store per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite :memory: engine (StaticPool keeps the one
   connection alive, so the schema survives between sessions).
2. The app's get_db dependency is overridden to hand out that test's session.
3. Each test builds its own app with its own InMemorySessionStore, so tests
   can look inside the store to check what the session bridge did.
4. "Today" is pinned through the get_today dependency so scores are stable.

Env vars are set before importing taskdash so the settings singleton picks
them up (fast bcrypt, SQLite URL for the module-level engine).
"""

import os

os.environ.setdefault("TASKDASH_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKDASH_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid  # noqa: E402
from datetime import date  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskdash.auth.jwt import get_authority  # noqa: E402
from taskdash.auth.sessions import InMemorySessionStore  # noqa: E402
from taskdash.clock import get_today  # noqa: E402
from taskdash.db.engine import get_db, init_models  # noqa: E402
from taskdash.main import create_app  # noqa: E402

TODAY = date(2026, 3, 16)


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db_engine):
    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture()
def session_store():
    return InMemorySessionStore(ttl_seconds=3600)


@pytest.fixture()
def authority():
    return get_authority()


@pytest.fixture()
def app(db_session, session_store):
    app = create_app(session_store=session_store)

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client running the real auth pipeline (no identity mocks)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


async def register_and_login(client, username=None, password="password_123"):
    """Create an account through the API and return (username, token)."""
    username = username or f"user-{uuid.uuid4().hex[:8]}"
    r = await client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert r.status_code == 201, r.text
    r = await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password},
    )
    assert r.status_code == 200, r.text
    return username, r.json()["token"]


@pytest_asyncio.fixture()
async def auth_headers(client):
    _, token = await register_and_login(client)
    return {"Authorization": f"Bearer {token}"}
