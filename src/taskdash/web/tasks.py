"""htmx task routes for the dashboard.

Learn: Each mutating route re-renders the task list fragment, which
htmx swaps into the page. All of them sit behind the session gate;
an htmx call from an expired session gets HX-Redirect: /login.

Form fields mirror the API's wire names (dueDate, taskId). Blank
form values mean "not given".
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.identity import Identity
from taskdash.auth.session_bridge import get_session_identity
from taskdash.db.engine import get_db
from taskdash.db.models import TaskPriority, TaskStatus
from taskdash.errors import ValidationFailed
from taskdash.services.task_service import TaskService
from taskdash.web.templating import templates

router = APIRouter(prefix="/ui/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


def _given(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def parse_status(value: Optional[str]) -> Optional[TaskStatus]:
    value = _given(value)
    if value is None:
        return None
    try:
        return TaskStatus(value.upper())
    except ValueError:
        raise ValidationFailed(f"status: unknown value {value!r}")


def parse_priority(value: Optional[str]) -> Optional[TaskPriority]:
    value = _given(value)
    if value is None:
        return None
    try:
        return TaskPriority(value.upper())
    except ValueError:
        raise ValidationFailed(f"priority: unknown value {value!r}")


def parse_due_date(value: Optional[str]) -> Optional[date]:
    value = _given(value)
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationFailed(f"dueDate: {value!r} is not an ISO date")


async def _render_list(request: Request, svc: TaskService, identity: Identity):
    tasks = await svc.list_tasks(identity.user_id)
    return templates.TemplateResponse(request, "task_list.html", {"tasks": tasks})


@router.get("/list")
async def list_tasks(
    request: Request,
    identity: Identity = Depends(get_session_identity),
    svc: TaskService = Depends(_task_svc),
):
    return await _render_list(request, svc, identity)


@router.post("/create")
async def create_task(
    request: Request,
    title: str = Form(""),
    description: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    due_date: Optional[str] = Form(None, alias="dueDate"),
    identity: Identity = Depends(get_session_identity),
    svc: TaskService = Depends(_task_svc),
):
    if _given(title) is None:
        raise ValidationFailed("title: must not be blank")
    await svc.create_task(
        owner_id=identity.user_id,
        title=title.strip(),
        description=_given(description),
        status=parse_status(status),
        priority=parse_priority(priority),
        due_date=parse_due_date(due_date),
    )
    return await _render_list(request, svc, identity)


@router.post("/update")
async def update_task(
    request: Request,
    task_id: int = Form(..., alias="taskId"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    due_date: Optional[str] = Form(None, alias="dueDate"),
    identity: Identity = Depends(get_session_identity),
    svc: TaskService = Depends(_task_svc),
):
    await svc.update_task(
        task_id=task_id,
        owner_id=identity.user_id,
        title=_given(title),
        description=description,
        status=parse_status(status),
        priority=parse_priority(priority),
        due_date=parse_due_date(due_date),
    )
    return await _render_list(request, svc, identity)


@router.delete("/{task_id}")
async def delete_task(
    request: Request,
    task_id: int,
    identity: Identity = Depends(get_session_identity),
    svc: TaskService = Depends(_task_svc),
):
    await svc.delete_task(task_id, identity.user_id)
    return await _render_list(request, svc, identity)


@router.post("/{task_id}/done")
async def mark_done(
    request: Request,
    task_id: int,
    identity: Identity = Depends(get_session_identity),
    svc: TaskService = Depends(_task_svc),
):
    await svc.update_task(task_id, identity.user_id, status=TaskStatus.DONE)
    return await _render_list(request, svc, identity)


@router.post("/{task_id}/status", status_code=204)
async def move_task(
    task_id: int,
    status: str = Form(...),
    identity: Identity = Depends(get_session_identity),
    svc: TaskService = Depends(_task_svc),
):
    """Board drag-and-drop: change status only, no fragment."""
    new_status = parse_status(status)
    if new_status is None:
        raise ValidationFailed("status: must not be blank")
    await svc.update_task(task_id, identity.user_id, status=new_status)
    return Response(status_code=204)
