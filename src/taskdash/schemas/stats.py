"""Pydantic schemas for the score snapshot returned by /api/v1/stats."""

from datetime import date

from pydantic import BaseModel

from taskdash.schemas.task import camel_config


class StatusCountsRead(BaseModel):
    model_config = camel_config

    todo: int
    in_progress: int
    done: int
    total: int


class UrgencyRead(BaseModel):
    model_config = camel_config

    overdue: int
    due_today: int
    due_soon: int
    on_track: int
    no_date: int


class ComponentsRead(BaseModel):
    model_config = camel_config

    completion: int
    high_priority: int
    overdue: int
    active: int


class StatsRead(BaseModel):
    model_config = camel_config

    today: date
    total: int
    todo: int
    in_progress: int
    done: int
    high: int
    medium: int
    low: int
    by_priority: dict[str, StatusCountsRead]
    urgency: UrgencyRead
    completion_rate: int
    components: ComponentsRead
    score: int
    grade: str
    grade_class: str
    color: str
    message: str
