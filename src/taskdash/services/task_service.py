"""Task service — owner-scoped CRUD.

Learn: Every operation takes the acting user's id from the resolved
Identity; the service never works out who the caller is on its own.
A task that belongs to someone else is reported exactly like one that
doesn't exist.

Updates are partial: any argument left as None keeps the stored value.
"""

import uuid
from datetime import date
from typing import Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.db.models import Task, TaskPriority, TaskStatus
from taskdash.db.stores import TaskStore
from taskdash.errors import ResourceNotFound

logger = structlog.get_logger()


class TaskService:
    """Business logic for a single user's tasks."""

    def __init__(self, db: AsyncSession):
        self.tasks = TaskStore(db)

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        owner_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        due_date: Optional[date] = None,
    ) -> Task:
        """Create a task; status defaults to TODO and priority to MEDIUM."""
        task = Task(
            user_id=owner_id,
            title=title,
            description=description,
            status=(status or TaskStatus.TODO).value,
            priority=(priority or TaskPriority.MEDIUM).value,
            due_date=due_date,
        )
        task = await self.tasks.save(task)
        logger.info("task.created", task_id=task.id, user_id=str(owner_id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, owner_id: uuid.UUID) -> Sequence[Task]:
        return await self.tasks.find_all_by_owner(owner_id)

    async def get_task(self, task_id: int, owner_id: uuid.UUID) -> Task:
        task = await self.tasks.find_by_id_and_owner(task_id, owner_id)
        if task is None:
            raise ResourceNotFound(f"Task not found with id: {task_id}")
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        task_id: int,
        owner_id: uuid.UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        due_date: Optional[date] = None,
    ) -> Task:
        task = await self.get_task(task_id, owner_id)

        if title is not None:
            task.title = title
        if description is not None:
            task.description = description
        if status is not None:
            task.status = status.value
        if priority is not None:
            task.priority = priority.value
        if due_date is not None:
            task.due_date = due_date

        return await self.tasks.save(task)

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: int, owner_id: uuid.UUID) -> None:
        task = await self.get_task(task_id, owner_id)
        await self.tasks.delete(task)
        logger.info("task.deleted", task_id=task_id, user_id=str(owner_id))
