"""Demo account seeding.

Creates user "test" (password "test") with a spread of tasks whose due
dates are relative to today, so the stats page has overdue, due-soon and
on-track work to show. Safe to run repeatedly: it does nothing once
the account exists.
"""

from datetime import date, timedelta
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.password import hash_password
from taskdash.db.models import Task, User
from taskdash.db.stores import AccountStore, TaskStore

logger = structlog.get_logger()

DEMO_USERNAME = "test"
DEMO_EMAIL = "test@test.com"
DEMO_PASSWORD = "test"

# (title, description, status, priority, due offset in days)
DEMO_TASKS: list[tuple[str, str, str, str, int]] = [
    ("Set up project repository", "Initialise Git repo, add .gitignore, push initial commit to remote.", "DONE", "HIGH", -10),
    ("Write project README", "Document setup steps, tech stack, and environment variables.", "DONE", "MEDIUM", -7),
    ("Design database schema", "Create ERD for users, tasks, comments, and labels tables.", "DONE", "HIGH", -5),
    ("Implement JWT authentication", "Add login and register endpoints secured with JWT tokens.", "DONE", "HIGH", -3),
    ("Create database migrations", "Write the initial schema migration scripts.", "DONE", "MEDIUM", -2),
    ("Build task CRUD API", "REST endpoints for creating, reading, updating, and deleting tasks.", "IN_PROGRESS", "HIGH", 1),
    ("Add task filtering and sorting", "Allow filtering tasks by status and priority; support sort by due date.", "IN_PROGRESS", "MEDIUM", 3),
    ("Write unit tests for services", "Cover the account and task services with pytest.", "IN_PROGRESS", "HIGH", 2),
    ("Publish OpenAPI docs", "Expose interactive API docs with request/response examples.", "IN_PROGRESS", "LOW", 4),
    ("Implement pagination on task list", "Add page and size query params to GET /api/v1/tasks.", "TODO", "MEDIUM", 5),
    ("Add task labels / tags", "Allow users to attach colour-coded labels to tasks for grouping.", "TODO", "LOW", 7),
    ("Send email notifications", "Notify users via email when a task is approaching its due date.", "TODO", "MEDIUM", 9),
    ("Set up CI/CD pipeline", "Build, test, and deploy on every push to main.", "TODO", "HIGH", 6),
    ("Add user profile endpoint", "GET /api/v1/auth/me returns current user details; PATCH allows updates.", "TODO", "LOW", 10),
    ("Implement task comments", "Allow users to leave timestamped comments on any task they own.", "TODO", "LOW", 14),
    ("Performance profiling", "Run load tests and identify slow DB queries to optimise.", "TODO", "MEDIUM", 20),
    ("Overdue: security audit", "Review OWASP Top-10 checklist and fix any identified vulnerabilities.", "TODO", "HIGH", -1),
    ("Overdue: update dependencies", "Bump FastAPI, SQLAlchemy, and PyJWT to their latest stable versions.", "TODO", "MEDIUM", -4),
]


async def seed_demo_account(db: AsyncSession, today: Optional[date] = None) -> Optional[User]:
    """Create the demo account and its tasks. Returns None if it already exists."""
    accounts = AccountStore(db)
    if await accounts.exists_by_username(DEMO_USERNAME):
        logger.info("seed.skipped", username=DEMO_USERNAME)
        return None

    today = today or date.today()
    user = await accounts.save(
        User(
            username=DEMO_USERNAME,
            email=DEMO_EMAIL,
            password_hash=hash_password(DEMO_PASSWORD),
        )
    )
    tasks = [
        Task(
            user_id=user.id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            due_date=today + timedelta(days=offset),
        )
        for title, description, status, priority, offset in DEMO_TASKS
    ]
    await TaskStore(db).save_all(tasks)
    logger.info("seed.created", username=DEMO_USERNAME, tasks=len(tasks))
    return user
