"""Task API routes.

Learn: These routes are the HTTP interface to TaskService. The acting
user always comes from the bearer gate (get_current_user); handlers
pass identity.user_id down and never look at tokens themselves.

Key patterns:
- POST for creation
- PUT and PATCH both apply a partial update (absent fields unchanged)
- DELETE returns 204 with no body
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.dependencies import get_current_user
from taskdash.auth.identity import Identity
from taskdash.db.engine import get_db
from taskdash.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskdash.services.task_service import TaskService

router = APIRouter()


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("/tasks", response_model=list[TaskRead])
async def list_tasks(
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, newest first."""
    return await svc.list_tasks(identity.user_id)


@router.post("/tasks", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task. Status defaults to TODO, priority to MEDIUM."""
    return await svc.create_task(
        owner_id=identity.user_id,
        title=body.title,
        description=body.description,
        status=body.status,
        priority=body.priority,
        due_date=body.due_date,
    )


@router.get("/tasks/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: int,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    return await svc.get_task(task_id, identity.user_id)


@router.api_route("/tasks/{task_id}", methods=["PUT", "PATCH"], response_model=TaskRead)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task. Fields left out keep their value."""
    return await svc.update_task(
        task_id=task_id,
        owner_id=identity.user_id,
        title=body.title,
        description=body.description,
        status=body.status,
        priority=body.priority,
        due_date=body.due_date,
    )


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: int,
    identity: Identity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    await svc.delete_task(task_id, identity.user_id)
    return Response(status_code=204)
