"""Tests for the taskdash CLI.

Learn: The CLI talks to the server over HTTP, so the tests swap its
client factory for one backed by httpx.MockTransport and drive the
commands with click's CliRunner.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from taskdash.cli import main as cli

STATS = {
    "today": "2026-03-16",
    "total": 2,
    "todo": 1,
    "inProgress": 0,
    "done": 1,
    "high": 1,
    "medium": 1,
    "low": 0,
    "byPriority": {},
    "urgency": {"overdue": 1, "dueToday": 0, "dueSoon": 0, "onTrack": 0, "noDate": 0},
    "completionRate": 50,
    "components": {"completion": 20, "highPriority": 25, "overdue": 16, "active": 0},
    "score": 61,
    "grade": "C",
    "gradeClass": "grade-c",
    "color": "#FBBF24",
    "message": "Making progress! Clear overdue items to boost your score.",
}

TASKS = [
    {"id": 2, "status": "TODO", "priority": "HIGH", "dueDate": "2026-03-15", "title": "Fix login"},
    {"id": 1, "status": "DONE", "priority": "MEDIUM", "dueDate": None, "title": "Write docs"},
]


def handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/v1/auth/login":
        body = json.loads(request.content)
        if body["password"] != "pw":
            return httpx.Response(401, json={"status": 401, "message": "Invalid username or password"})
        return httpx.Response(200, json={"token": "tok-123", "username": body["username"]})
    if request.headers.get("Authorization") != "Bearer tok-123":
        return httpx.Response(401, json={"status": 401, "message": "Authentication required"})
    if path == "/api/v1/tasks":
        return httpx.Response(200, json=TASKS)
    if path == "/api/v1/stats":
        return httpx.Response(200, json=STATS)
    return httpx.Response(404, json={"status": 404, "message": "Not Found"})


@pytest.fixture(autouse=True)
def mock_api(monkeypatch):
    def fake_client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.Client(
            base_url="http://taskdash.test",
            headers=headers,
            transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    monkeypatch.delenv("TASKDASH_TOKEN", raising=False)


@pytest.fixture()
def runner():
    return CliRunner()


def test_login_prints_token(runner):
    result = runner.invoke(cli.main, ["login", "alice", "--password", "pw"])
    assert result.exit_code == 0
    assert result.output.strip() == "tok-123"


def test_login_failure_exits_nonzero(runner):
    result = runner.invoke(cli.main, ["login", "alice", "--password", "wrong"])
    assert result.exit_code == 1
    assert "Invalid username or password" in result.output


def test_tasks_requires_token(runner):
    result = runner.invoke(cli.main, ["tasks"])
    assert result.exit_code == 1
    assert "TASKDASH_TOKEN" in result.output


def test_tasks_table(runner):
    result = runner.invoke(cli.main, ["tasks", "--token", "tok-123"])
    assert result.exit_code == 0
    assert "Fix login" in result.output
    assert "Write docs" in result.output


def test_tasks_status_filter_and_json(runner, monkeypatch):
    monkeypatch.setenv("TASKDASH_TOKEN", "tok-123")
    result = runner.invoke(cli.main, ["tasks", "--status", "done", "--json"])
    assert result.exit_code == 0
    rows = json.loads(result.output)
    assert [r["title"] for r in rows] == ["Write docs"]


def test_stats_output(runner):
    result = runner.invoke(cli.main, ["stats", "--token", "tok-123"])
    assert result.exit_code == 0
    assert "Score: 61/100  Grade: C" in result.output
    assert "Making progress" in result.output
    assert "Overdue: 1" in result.output


def test_stats_with_bad_token(runner):
    result = runner.invoke(cli.main, ["stats", "--token", "nope"])
    assert result.exit_code == 1
    assert "Authentication required" in result.output
