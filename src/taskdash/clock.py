"""Current-date dependency.

Scoring is a pure function of (tasks, today); routes get "today" from
here so tests can pin it with app.dependency_overrides.
"""

from datetime import date


def get_today() -> date:
    return date.today()
