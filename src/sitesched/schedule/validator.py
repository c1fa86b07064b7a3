"""Structural validation of tasks before an edit is saved."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sitesched.logger import get_logger
from sitesched.models import ValidationResult, index_tasks

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sitesched.models import Task

logger = get_logger()

MIN_PROGRESS = 0
MAX_PROGRESS = 100


def validate_task(task: Task, all_tasks: Sequence[Task]) -> ValidationResult:
    """Check a task's dates, progress and dependency chain.

    Errors are collected rather than raised so the caller can show all of
    them at once and block the save.

    Args:
        task: The edited task
        all_tasks: The schedule the task belongs to, used to follow dependencies

    Returns:
        ValidationResult with one message per problem found
    """
    errors: list[str] = []

    if task.start is None:
        errors.append("Invalid start date")
    if task.end is None:
        errors.append("Invalid end date")
    if task.start is not None and task.end is not None and task.start > task.end:
        errors.append("Start date must be before end date")

    if detect_circular_dependency(task, index_tasks(all_tasks)):
        errors.append("Circular dependency detected")

    if not MIN_PROGRESS <= task.progress <= MAX_PROGRESS:
        errors.append("Progress must be between 0 and 100")

    if errors:
        logger.changes(f"Task {task.id} failed validation: {'; '.join(errors)}")
    return ValidationResult(valid=not errors, errors=errors)


def validate_schedule(tasks: Sequence[Task]) -> dict[str, ValidationResult]:
    """Validate every task in a schedule, keyed by task ID."""
    return {task.id: validate_task(task, tasks) for task in tasks}


def detect_circular_dependency(
    task: Task,
    tasks_by_id: dict[str, Task],
    visited: frozenset[str] = frozenset(),
) -> bool:
    """Depth-first search for a dependency path that returns to a task already on it.

    Each recursive call gets its own copy of the visited set, so two sibling
    branches reaching the same task are not mistaken for a cycle. Worst case
    is exponential on dense graphs, which is acceptable for schedules of a few
    hundred tasks.
    """
    if task.id in visited:
        logger.checks(f"    cycle reached {task.id} via {sorted(visited)}")
        return True

    path = visited | {task.id}
    for dep_id in task.dependency_ids:
        dependency = tasks_by_id.get(dep_id)
        if dependency is not None and detect_circular_dependency(dependency, tasks_by_id, path):
            return True

    return False
