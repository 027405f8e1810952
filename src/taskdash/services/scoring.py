"""Productivity scoring — pure aggregation over a user's task list.

Learn: compute_snapshot() is a pure function of (tasks, today). It does
no I/O and keeps no state, so the stats page, the dashboard and the
/api/v1/stats endpoint all call it directly on a freshly loaded task list.

Composite score (0–100), four independently capped components:
  completion     done * 40 // total             (0 when there are no tasks)
  high priority  high_done * 25 // high         (full 25 with no HIGH tasks)
  overdue        max(0, 20 - overdue * 4)       (5+ overdue zero it)
  active         min(15, in_progress * 3)       (caps at 5 in progress)

Urgency buckets only look at tasks that aren't DONE:
  overdue < today == due_today < due_soon < today+4 <= on_track; no_date
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Protocol, Sequence

from taskdash.db.models import TaskPriority, TaskStatus

# Ordered (threshold, value) tables. The first threshold the score reaches wins.
GRADES: Sequence[tuple[int, str]] = (
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
    (50, "D"),
)
GRADE_FALLBACK = "F"

COLORS: Sequence[tuple[int, str]] = (
    (85, "#4ADE80"),
    (70, "#60A5FA"),
    (40, "#FBBF24"),
)
COLOR_FALLBACK = "#F87171"

GRADE_CLASSES: Sequence[tuple[int, str]] = (
    (80, "grade-a"),
    (70, "grade-b"),
    (50, "grade-c"),
)
GRADE_CLASS_FALLBACK = "grade-f"

MESSAGES: Sequence[tuple[int, str]] = (
    (90, "Outstanding! Your task management is excellent."),
    (80, "Great work! You're staying on top of your workload."),
    (70, "Good momentum! Keep tackling those high-priority tasks."),
    (60, "Making progress! Clear overdue items to boost your score."),
    (40, "Needs attention. Focus on high-priority and overdue tasks."),
)
MESSAGE_FALLBACK = "Time to regroup. Start by clearing overdue and high-priority tasks."

# Tasks due strictly before today + DUE_SOON_DAYS (and after today) are "due soon".
DUE_SOON_DAYS = 4


class ScorableTask(Protocol):
    status: str
    priority: str
    due_date: Optional[date]


def lookup(table: Sequence[tuple[int, str]], score: int, fallback: str) -> str:
    for threshold, value in table:
        if score >= threshold:
            return value
    return fallback


@dataclass(frozen=True)
class StatusCounts:
    todo: int = 0
    in_progress: int = 0
    done: int = 0

    @property
    def total(self) -> int:
        return self.todo + self.in_progress + self.done


@dataclass(frozen=True)
class UrgencyBuckets:
    overdue: int = 0
    due_today: int = 0
    due_soon: int = 0
    on_track: int = 0
    no_date: int = 0


@dataclass(frozen=True)
class ScoreComponents:
    completion: int
    high_priority: int
    overdue: int
    active: int

    @property
    def total(self) -> int:
        return self.completion + self.high_priority + self.overdue + self.active


@dataclass(frozen=True)
class ScoreSnapshot:
    total: int
    todo: int
    in_progress: int
    done: int
    high: int
    medium: int
    low: int
    by_priority: dict[str, StatusCounts]
    urgency: UrgencyBuckets
    completion_rate: int
    components: ScoreComponents
    score: int
    grade: str
    grade_class: str
    color: str
    message: str
    today: date


def classify_due(due: Optional[date], today: date) -> str:
    """Urgency bucket name for a not-done task's due date."""
    if due is None:
        return "no_date"
    if due < today:
        return "overdue"
    if due == today:
        return "due_today"
    if due < today + timedelta(days=DUE_SOON_DAYS):
        return "due_soon"
    return "on_track"


def score_components(
    total: int,
    done: int,
    high: int,
    high_done: int,
    overdue: int,
    in_progress: int,
) -> ScoreComponents:
    return ScoreComponents(
        completion=0 if total == 0 else done * 40 // total,
        high_priority=25 if high == 0 else high_done * 25 // high,
        overdue=max(0, 20 - overdue * 4),
        active=min(15, in_progress * 3),
    )


def compute_snapshot(tasks: Iterable[ScorableTask], today: date) -> ScoreSnapshot:
    """Aggregate a point-in-time task list into the dashboard metrics."""
    tally: dict[tuple[str, str], int] = {}
    buckets = {"overdue": 0, "due_today": 0, "due_soon": 0, "on_track": 0, "no_date": 0}

    for task in tasks:
        status = TaskStatus(task.status).value
        priority = TaskPriority(task.priority).value
        tally[(priority, status)] = tally.get((priority, status), 0) + 1
        if status != TaskStatus.DONE.value:
            buckets[classify_due(task.due_date, today)] += 1

    by_priority = {
        p.value: StatusCounts(
            todo=tally.get((p.value, TaskStatus.TODO.value), 0),
            in_progress=tally.get((p.value, TaskStatus.IN_PROGRESS.value), 0),
            done=tally.get((p.value, TaskStatus.DONE.value), 0),
        )
        for p in TaskPriority
    }
    todo = sum(c.todo for c in by_priority.values())
    in_progress = sum(c.in_progress for c in by_priority.values())
    done = sum(c.done for c in by_priority.values())
    total = todo + in_progress + done

    high = by_priority[TaskPriority.HIGH.value]
    components = score_components(
        total=total,
        done=done,
        high=high.total,
        high_done=high.done,
        overdue=buckets["overdue"],
        in_progress=in_progress,
    )
    score = max(0, min(100, components.total))

    return ScoreSnapshot(
        total=total,
        todo=todo,
        in_progress=in_progress,
        done=done,
        high=high.total,
        medium=by_priority[TaskPriority.MEDIUM.value].total,
        low=by_priority[TaskPriority.LOW.value].total,
        by_priority=by_priority,
        urgency=UrgencyBuckets(**buckets),
        completion_rate=0 if total == 0 else done * 100 // total,
        components=components,
        score=score,
        grade=lookup(GRADES, score, GRADE_FALLBACK),
        grade_class=lookup(GRADE_CLASSES, score, GRADE_CLASS_FALLBACK),
        color=lookup(COLORS, score, COLOR_FALLBACK),
        message=lookup(MESSAGES, score, MESSAGE_FALLBACK),
        today=today,
    )
