"""taskdash CLI — run the server, seed demo data, and query the API.

Usage:
    taskdash serve                       # Run the API + UI with uvicorn
    taskdash seed                        # Create the demo "test" account
    taskdash login USERNAME              # Print a bearer token
    taskdash tasks                       # List your tasks (needs TASKDASH_TOKEN)
    taskdash stats                       # Show your productivity score
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TASKDASH_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.Client:
    """Build an HTTP client pointed at the taskdash backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.Client(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _token_from_env(token: Optional[str]) -> str:
    tok = token or os.environ.get("TASKDASH_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set TASKDASH_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> None:
    """Exit with the server's error message on a non-2xx response."""
    if r.is_success:
        return
    try:
        message = r.json().get("message", r.text)
    except ValueError:
        message = r.text
    click.secho(f"Error {r.status_code}: {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="taskdash", prog_name="taskdash")
def main():
    """taskdash — per-user task tracking with a productivity score."""


@main.command()
@click.option("--host", default=None, help="Bind address (default from TASKDASH_HOST)")
@click.option("--port", default=None, type=int, help="Port (default from TASKDASH_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the web server."""
    import uvicorn

    from taskdash.config import settings

    uvicorn.run(
        "taskdash.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command()
def seed():
    """Create the demo account (test / test) with sample tasks."""
    from taskdash.db.engine import async_session_factory, engine, init_models
    from taskdash.services.seed import DEMO_USERNAME, seed_demo_account

    async def _seed():
        await init_models(engine)
        async with async_session_factory() as db:
            user = await seed_demo_account(db)
        await engine.dispose()
        return user

    user = asyncio.run(_seed())
    if user is None:
        click.echo(f"Account '{DEMO_USERNAME}' already exists, nothing to do.")
    else:
        click.secho(f"Seeded account '{DEMO_USERNAME}' (password: test)", fg="green")


@main.command()
@click.argument("username")
@click.password_option(confirmation_prompt=False)
def login(username: str, password: str):
    """Log in and print a bearer token (export it as TASKDASH_TOKEN)."""
    with _client() as c:
        r = c.post("/api/v1/auth/login", json={"username": username, "password": password})
    _check(r)
    click.echo(r.json()["token"])


@main.command()
@click.option("--token", help="Bearer token (or set TASKDASH_TOKEN)")
@click.option("--status", "status_filter", help="Only show tasks with this status")
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def tasks(token: Optional[str], status_filter: Optional[str], as_json: bool):
    """List your tasks."""
    with _client(_token_from_env(token)) as c:
        r = c.get("/api/v1/tasks")
    _check(r)
    rows = r.json()
    if status_filter:
        rows = [t for t in rows if t["status"] == status_filter.upper()]

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    if not rows:
        click.echo("No tasks.")
        return

    _print_table(rows, [("ID", "id", 6), ("STATUS", "status", 12), ("PRIORITY", "priority", 8),
                        ("DUE", "dueDate", 10), ("TITLE", "title", 50)])


@main.command()
@click.option("--token", help="Bearer token (or set TASKDASH_TOKEN)")
def stats(token: Optional[str]):
    """Show your productivity score and urgency breakdown."""
    with _client(_token_from_env(token)) as c:
        r = c.get("/api/v1/stats")
    _check(r)
    s = r.json()

    click.secho(f"Score: {s['score']}/100  Grade: {s['grade']}", bold=True)
    click.echo(s["message"])
    click.echo("")
    comp = s["components"]
    click.echo(
        f"Completion {comp['completion']}/40 · High priority {comp['highPriority']}/25 · "
        f"Overdue {comp['overdue']}/20 · Active {comp['active']}/15"
    )
    click.echo(
        f"{s['total']} tasks: {s['todo']} to do, {s['inProgress']} in progress, "
        f"{s['done']} done ({s['completionRate']}% complete)"
    )
    u = s["urgency"]
    overdue_fg = "red" if u["overdue"] else None
    click.secho(f"Overdue: {u['overdue']}", fg=overdue_fg)
    click.echo(
        f"Due today: {u['dueToday']}  Due soon: {u['dueSoon']}  "
        f"On track: {u['onTrack']}  No date: {u['noDate']}"
    )


if __name__ == "__main__":
    main()
