"""Tests for the productivity scoring engine.

Learn: compute_snapshot() is pure, so these tests feed it lightweight
stand-in tasks and a fixed "today" instead of going through the DB.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

import pytest

from taskdash.services.scoring import (
    COLORS,
    GRADES,
    classify_due,
    compute_snapshot,
    lookup,
    score_components,
)

TODAY = date(2026, 3, 16)


@dataclass
class T:
    status: str = "TODO"
    priority: str = "MEDIUM"
    due_date: Optional[date] = None


def days(n: int) -> date:
    return TODAY + timedelta(days=n)


# ═══════════════════════════════════════════════════════════
# Composite score
# ═══════════════════════════════════════════════════════════


def test_empty_list_scores_45():
    snap = compute_snapshot([], TODAY)

    assert snap.total == 0
    assert snap.score == 45
    assert snap.components.completion == 0
    assert snap.components.high_priority == 25
    assert snap.components.overdue == 20
    assert snap.components.active == 0
    assert snap.completion_rate == 0
    assert snap.grade == "F"


def test_done_overdue_high_task_scores_85():
    """A DONE task never counts as overdue, whatever its due date."""
    snap = compute_snapshot([T("DONE", "HIGH", days(-3))], TODAY)

    assert snap.urgency.overdue == 0
    assert snap.score == 85
    assert snap.grade == "A"
    assert snap.completion_rate == 100


def test_components_use_integer_division():
    tasks = [T("DONE"), T("TODO"), T("TODO")]
    snap = compute_snapshot(tasks, TODAY)
    assert snap.components.completion == 13  # 40 // 3
    assert snap.completion_rate == 33


def test_high_priority_component():
    tasks = [T("DONE", "HIGH"), T("TODO", "HIGH"), T("IN_PROGRESS", "HIGH")]
    snap = compute_snapshot(tasks, TODAY)
    assert snap.components.high_priority == 8  # 25 // 3


def test_overdue_component_floors_at_zero():
    tasks = [T(due_date=days(-1)) for _ in range(6)]
    snap = compute_snapshot(tasks, TODAY)
    assert snap.urgency.overdue == 6
    assert snap.components.overdue == 0


def test_active_component_caps_at_15():
    snap = compute_snapshot([T("IN_PROGRESS") for _ in range(7)], TODAY)
    assert snap.components.active == 15


def test_score_components_bounds():
    best = score_components(total=10, done=10, high=2, high_done=2, overdue=0, in_progress=9)
    assert best.total == 100
    worst = score_components(total=10, done=0, high=2, high_done=0, overdue=9, in_progress=0)
    assert worst.total == 0


def test_snapshot_is_deterministic():
    tasks = [T("DONE", "HIGH", days(-1)), T("TODO", "LOW", days(2)), T("IN_PROGRESS")]
    assert compute_snapshot(tasks, TODAY) == compute_snapshot(list(tasks), TODAY)


# ═══════════════════════════════════════════════════════════
# Counting
# ═══════════════════════════════════════════════════════════


def test_counts_and_cross_tab():
    tasks = [
        T("TODO", "HIGH"),
        T("DONE", "HIGH"),
        T("IN_PROGRESS", "MEDIUM"),
        T("TODO", "LOW"),
        T("TODO", "LOW"),
    ]
    snap = compute_snapshot(tasks, TODAY)

    assert (snap.todo, snap.in_progress, snap.done) == (3, 1, 1)
    assert (snap.high, snap.medium, snap.low) == (2, 1, 2)
    assert snap.by_priority["HIGH"].todo == 1
    assert snap.by_priority["HIGH"].done == 1
    assert snap.by_priority["LOW"].total == 2
    assert sum(c.total for c in snap.by_priority.values()) == snap.total


def test_urgency_buckets_cover_every_open_task():
    tasks = [
        T(due_date=days(-2)),
        T(due_date=days(0)),
        T(due_date=days(1)),
        T(due_date=days(3)),
        T(due_date=days(4)),
        T(due_date=None),
        T("DONE", due_date=days(-5)),
    ]
    u = compute_snapshot(tasks, TODAY).urgency

    assert (u.overdue, u.due_today, u.due_soon, u.on_track, u.no_date) == (1, 1, 2, 1, 1)
    assert u.overdue + u.due_today + u.due_soon + u.on_track + u.no_date == 6


@pytest.mark.parametrize(
    "offset,bucket",
    [(-1, "overdue"), (0, "due_today"), (1, "due_soon"), (3, "due_soon"), (4, "on_track")],
)
def test_classify_due_boundaries(offset, bucket):
    assert classify_due(days(offset), TODAY) == bucket


def test_classify_due_without_date():
    assert classify_due(None, TODAY) == "no_date"


# ═══════════════════════════════════════════════════════════
# Lookup tables
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "score,grade",
    [(100, "A+"), (90, "A+"), (89, "A"), (80, "A"), (79, "B"), (70, "B"),
     (69, "C"), (60, "C"), (59, "D"), (50, "D"), (49, "F"), (0, "F")],
)
def test_grade_thresholds(score, grade):
    assert lookup(GRADES, score, "F") == grade


def test_color_thresholds():
    assert lookup(COLORS, 85, "red") == "#4ADE80"
    assert lookup(COLORS, 84, "red") == "#60A5FA"
    assert lookup(COLORS, 40, "red") == "#FBBF24"
    assert lookup(COLORS, 39, "red") == "red"


def test_snapshot_carries_labels():
    snap = compute_snapshot([], TODAY)
    assert snap.grade_class == "grade-f"
    assert snap.color == "#FBBF24"
    assert snap.message.startswith("Needs attention")
    assert snap.today == TODAY
