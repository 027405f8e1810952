"""Tests for demo account seeding."""

import pytest

from taskdash.auth.password import verify_password
from taskdash.db.stores import AccountStore, TaskStore
from taskdash.services.scoring import compute_snapshot
from taskdash.services.seed import DEMO_PASSWORD, DEMO_TASKS, DEMO_USERNAME, seed_demo_account

from conftest import TODAY


@pytest.mark.asyncio
async def test_seed_creates_demo_account(db_session):
    user = await seed_demo_account(db_session, today=TODAY)

    assert user.username == DEMO_USERNAME
    assert verify_password(DEMO_PASSWORD, user.password_hash)
    tasks = await TaskStore(db_session).find_all_by_owner(user.id)
    assert len(tasks) == len(DEMO_TASKS) == 18


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session):
    await seed_demo_account(db_session, today=TODAY)
    assert await seed_demo_account(db_session, today=TODAY) is None

    user = await AccountStore(db_session).find_by_username(DEMO_USERNAME)
    assert len(await TaskStore(db_session).find_all_by_owner(user.id)) == 18


@pytest.mark.asyncio
async def test_seeded_account_scores_as_expected(db_session):
    user = await seed_demo_account(db_session, today=TODAY)
    snap = compute_snapshot(await TaskStore(db_session).find_all_by_owner(user.id), TODAY)

    assert (snap.todo, snap.in_progress, snap.done) == (9, 4, 5)
    assert (snap.high, snap.medium, snap.low) == (7, 7, 4)
    assert snap.urgency.overdue == 2
    assert snap.urgency.due_soon == 3
    assert snap.urgency.on_track == 8
    assert snap.score == 45


@pytest.mark.asyncio
async def test_seeded_account_can_log_in(client, db_session):
    await seed_demo_account(db_session, today=TODAY)
    r = await client.post(
        "/api/v1/auth/login", json={"username": DEMO_USERNAME, "password": DEMO_PASSWORD}
    )
    assert r.status_code == 200
    assert r.json()["username"] == DEMO_USERNAME
