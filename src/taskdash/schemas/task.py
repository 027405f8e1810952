"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT/PATCH to modify a task (all optional)
- TaskRead: what the API returns

Wire names are camelCase (dueDate, createdAt, userId); snake_case names
are accepted on input too (populate_by_name).
"""

import uuid
from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskdash.db.models import TaskPriority, TaskStatus

camel_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    from_attributes=True,
)


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


Title = Annotated[str, Field(max_length=255), AfterValidator(_not_blank)]


class TaskCreate(BaseModel):
    model_config = camel_config

    title: Title
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    """Partial update: only non-None fields are applied."""

    model_config = camel_config

    title: Optional[Title] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None


class TaskRead(BaseModel):
    model_config = camel_config

    id: int
    user_id: uuid.UUID
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date]
    created_at: datetime
