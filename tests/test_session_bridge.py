"""Tests for SessionBridge — the browser-side gate.

Learn: The bridge is tested against a real InMemorySessionStore and a
real resolver over SQLite. What matters is not only the LoginRequired
outcome but the side effect on the store: a failed gate check must
leave no trace of the session behind.
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from taskdash.auth.identity import Identity, IdentityResolver
from taskdash.auth.jwt import CredentialAuthority
from taskdash.auth.session_bridge import SessionBridge
from taskdash.auth.sessions import (
    CREDENTIAL_KEY,
    USERNAME_KEY,
    BrowserSession,
    InMemorySessionStore,
)
from taskdash.db.stores import AccountStore
from taskdash.errors import LoginRequired
from taskdash.services.account_service import AccountService


@pytest.fixture()
def authority():
    return CredentialAuthority("bridge-test-secret")


@pytest.fixture()
def store():
    return InMemorySessionStore()


@pytest.fixture()
def bridge(authority, db_session):
    return SessionBridge(IdentityResolver(authority, AccountStore(db_session)))


@pytest_asyncio.fixture()
async def user(authority, db_session):
    return await AccountService(db_session, authority).register("alice", "pw-alice")


async def _session_with(store, **data) -> BrowserSession:
    await store.set("sid", data)
    return await BrowserSession.load(store, "sid")


# ═══════════════════════════════════════════════════════════
# gate()
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_gate_without_session_requires_login(bridge, store):
    session = await BrowserSession.load(store, None)
    with pytest.raises(LoginRequired):
        await bridge.gate(session)


@pytest.mark.asyncio
async def test_gate_without_credential_requires_login(bridge, store):
    session = await _session_with(store, username="alice")
    with pytest.raises(LoginRequired):
        await bridge.gate(session)


@pytest.mark.asyncio
async def test_gate_with_valid_credential_returns_identity(bridge, store, authority, user):
    token = authority.issue(Identity(user_id=user.id, username=user.username))
    session = await _session_with(store, credential=token, username="alice")

    identity = await bridge.gate(session)

    assert identity.user_id == user.id
    assert identity.source == "session"
    assert session.exists


@pytest.mark.asyncio
async def test_gate_with_expired_credential_destroys_session(bridge, store, authority, user):
    token = authority.issue(
        Identity(user_id=user.id, username=user.username), ttl=timedelta(seconds=-1)
    )
    session = await _session_with(store, credential=token, username="alice")

    with pytest.raises(LoginRequired):
        await bridge.gate(session)

    assert session.destroyed
    assert await store.get("sid") is None
    assert len(store) == 0

    # The next request with the same cookie finds nothing
    again = await BrowserSession.load(store, "sid")
    with pytest.raises(LoginRequired):
        await bridge.gate(again)


@pytest.mark.asyncio
async def test_gate_with_garbage_credential_destroys_session(bridge, store):
    session = await _session_with(store, credential="junk", username="alice")
    with pytest.raises(LoginRequired):
        await bridge.gate(session)
    assert await store.get("sid") is None


@pytest.mark.asyncio
async def test_gate_for_deleted_account_destroys_session(
    bridge, store, authority, user, db_session
):
    token = authority.issue(Identity(user_id=user.id, username=user.username))
    await AccountStore(db_session).delete(user)
    session = await _session_with(store, credential=token, username="alice")

    with pytest.raises(LoginRequired):
        await bridge.gate(session)
    assert await store.get("sid") is None


# ═══════════════════════════════════════════════════════════
# has_live_session() / establish() / logout()
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_has_live_session_true_for_valid_credential(bridge, store, authority, user):
    token = authority.issue(Identity(user_id=user.id, username=user.username))
    session = await _session_with(store, credential=token, username="alice")
    assert await bridge.has_live_session(session) is True


@pytest.mark.asyncio
async def test_has_live_session_clears_only_the_dead_credential(
    bridge, store, authority, user
):
    token = authority.issue(
        Identity(user_id=user.id, username=user.username), ttl=timedelta(seconds=-1)
    )
    session = await _session_with(store, credential=token, username="alice")

    assert await bridge.has_live_session(session) is False
    assert await store.get("sid") == {USERNAME_KEY: "alice"}


@pytest.mark.asyncio
async def test_has_live_session_false_without_session(bridge, store):
    session = await BrowserSession.load(store, None)
    assert await bridge.has_live_session(session) is False
    assert not session.exists


@pytest.mark.asyncio
async def test_establish_rotates_session_id(bridge, store, authority, user):
    session = await _session_with(store, username="someone-else")
    token = authority.issue(Identity(user_id=user.id, username=user.username))

    await bridge.establish(session, token, "alice")

    assert session.session_id != "sid"
    assert await store.get("sid") is None
    assert await store.get(session.session_id) == {
        CREDENTIAL_KEY: token,
        USERNAME_KEY: "alice",
    }
    assert (await bridge.gate(session)).username == "alice"


@pytest.mark.asyncio
async def test_logout_destroys_without_validating(bridge, store):
    session = await _session_with(store, credential="junk", username="alice")
    await bridge.logout(session)

    assert session.destroyed
    assert len(store) == 0


@pytest.mark.asyncio
async def test_logout_without_session_is_a_no_op(bridge, store):
    session = await BrowserSession.load(store, None)
    await bridge.logout(session)
    assert not session.exists
