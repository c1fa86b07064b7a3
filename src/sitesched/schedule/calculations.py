"""Date arithmetic over schedule tasks.

All functions are pure. A task whose start or end is ``None`` has an unknown
date range; functions that need the missing value return ``None`` (or
``False`` for predicates) rather than a poisoned result.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from sitesched.models import index_tasks

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sitesched.models import Task

DAYS_PER_WEEK = 7


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO date string, ``date`` or ``datetime`` into a ``date``.

    Returns None for missing or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        text = value.strip()
        # Timestamps ("2025-03-01T00:00:00Z") keep only their date part
        if len(text) > 10 and text[10] in "T ":
            text = text[:10]
        return date.fromisoformat(text)
    except (ValueError, AttributeError):
        return None


def _today(today: date | None) -> date:
    return today if today is not None else date.today()  # noqa: DTZ011


def calculate_duration(start: date, end: date) -> int:
    """Duration in days counting both endpoints. Never less than 1."""
    return max(1, (end - start).days + 1)


def calculate_end_date(start: date, duration_days: int) -> date:
    """End date of a task starting on ``start`` that lasts ``duration_days``."""
    return start + timedelta(days=duration_days - 1)


def task_duration(task: Task) -> int | None:
    """Duration of a task, or None when its date range is unknown."""
    if task.start is None or task.end is None:
        return None
    return calculate_duration(task.start, task.end)


def calculate_earliest_start(task: Task, all_tasks: Sequence[Task]) -> date | None:
    """Earliest date a task can start given its dependencies.

    The day after the latest-ending dependency. Dependencies that are not in
    ``all_tasks`` or have no known end are skipped; when none remain, the
    task's own start is returned.
    """
    if not task.dependencies:
        return task.start

    index = index_tasks(all_tasks)
    dependency_ends: list[date] = []
    for dep_id in task.dependency_ids:
        dependency = index.get(dep_id)
        if dependency is not None and dependency.end is not None:
            dependency_ends.append(dependency.end)

    if not dependency_ends:
        return task.start
    return max(dependency_ends) + timedelta(days=1)


def calculate_project_duration(tasks: Sequence[Task]) -> int:
    """Inclusive day span from the earliest start to the latest end.

    Tasks with unknown dates are ignored. Returns 0 when no task is dated.
    """
    starts = [t.start for t in tasks if t.start is not None]
    ends = [t.end for t in tasks if t.end is not None]
    if not starts or not ends:
        return 0
    return (max(ends) - min(starts)).days + 1


def calculate_progress_from_cost(actual_cost: float, estimated_cost: float) -> int:
    """Percent complete implied by spend against estimate, capped at 100."""
    if estimated_cost <= 0:
        return 0
    return min(100, round(actual_cost / estimated_cost * 100))


def is_task_overdue(task: Task, today: date | None = None) -> bool:
    """True when the task's end date has passed and it is not complete."""
    if task.end is None:
        return False
    return task.end < _today(today) and task.progress < 100


def calculate_schedule_variance(task: Task, today: date | None = None) -> int | None:
    """Days behind (positive) or ahead (negative) of the task's end date.

    Complete tasks always have zero variance. Returns None when the end date
    is unknown.
    """
    if task.progress >= 100:
        return 0
    if task.end is None:
        return None
    return (_today(today) - task.end).days


def get_ready_to_start_tasks(tasks: Sequence[Task], today: date | None = None) -> list[Task]:
    """Tasks that have not started, are due to start and have every dependency complete."""
    current = _today(today)
    index = index_tasks(tasks)

    ready: list[Task] = []
    for task in tasks:
        if task.progress > 0:
            continue
        if task.start is None or task.start > current:
            continue
        if all(dep_id in index and index[dep_id].is_complete for dep_id in task.dependency_ids):
            ready.append(task)
    return ready


def tasks_overlap(task_a: Task, task_b: Task) -> bool:
    """True if the two tasks' inclusive date ranges intersect."""
    if not (task_a.has_valid_dates and task_b.has_valid_dates):
        return False
    assert task_a.start is not None and task_a.end is not None
    assert task_b.start is not None and task_b.end is not None
    return task_a.start <= task_b.end and task_b.start <= task_a.end


def format_duration(days: int) -> str:
    """Human-readable duration, e.g. "3 days", "2 weeks", "1w 3d"."""
    if days == 1:
        return "1 day"
    if days < DAYS_PER_WEEK:
        return f"{days} days"

    weeks, remaining = divmod(days, DAYS_PER_WEEK)
    if remaining == 0:
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    return f"{weeks}w {remaining}d"
