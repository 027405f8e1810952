"""Stats API — the caller's productivity snapshot as JSON.

Same numbers as the /stats page; computed fresh on every call.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskdash.auth.dependencies import get_current_user
from taskdash.auth.identity import Identity
from taskdash.clock import get_today
from taskdash.db.engine import get_db
from taskdash.schemas.stats import StatsRead
from taskdash.services.scoring import compute_snapshot
from taskdash.services.task_service import TaskService

router = APIRouter()


@router.get("/stats", response_model=StatsRead)
async def get_stats(
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    tasks = await TaskService(db).list_tasks(identity.user_id)
    return StatsRead.model_validate(compute_snapshot(tasks, today))
