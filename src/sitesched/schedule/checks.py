"""Schedule warning generation.

A warning pass is a pure transform over a snapshot of the task list. It is
re-run whenever the schedule loads or a task changes; nothing is persisted.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from urllib.parse import quote

from sitesched.logger import changes_enabled, checks_enabled, get_logger
from sitesched.models import ScheduleWarning, Severity, index_tasks

from .calculations import calculate_earliest_start, is_task_overdue, tasks_overlap
from .sequences import (
    get_suggested_dependencies,
    identify_construction_phase,
    is_sequence_violation,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sitesched.models import Task

    from .config import WarningSettings

logger = get_logger()


def warning_id(kind: str, *task_ids: str) -> str:
    """Build a warning ID as ``{kind}-{task}[/{other}]``.

    Task IDs are free-form and often contain hyphens, so each one is
    percent-encoded (``/`` becomes ``%2F``) and the parts are joined with
    ``/``. Two different task pairs therefore never share an ID.
    """
    return f"{kind}-" + "/".join(quote(task_id, safe="") for task_id in task_ids)


def generate_schedule_warnings(
    tasks: Sequence[Task],
    settings: WarningSettings,
    today: date | None = None,
) -> list[ScheduleWarning]:
    """Run every enabled check over every task and return the de-duplicated warnings.

    Warning IDs are built from the check kind and every task ID involved, so
    each finding has one stable ID across passes. If an ID is produced twice
    the later warning replaces the earlier one in its original position.

    Args:
        tasks: Snapshot of the schedule's tasks
        settings: Which optional checks to run
        today: Date to evaluate overdue tasks against (defaults to today)

    Returns:
        Warnings in task order, then check order
    """
    current = today if today is not None else date.today()  # noqa: DTZ011
    index = index_tasks(tasks)
    warnings: list[ScheduleWarning] = []

    for task in tasks:
        logger.checks(f"Checking task {task.id} ({task.name})")

        invalid = check_invalid_dates(task)
        if invalid:
            warnings.append(invalid)

        warnings.extend(check_unresolved_dependencies(task, index))

        if settings.unusual_sequence:
            warnings.extend(check_construction_sequencing(task, tasks))

        if settings.date_overlap:
            overlap = check_dependency_overlap(task, tasks)
            if overlap:
                warnings.append(overlap)

        if settings.change_order_timing and task.is_change_order:
            co_warning = check_change_order_timing(task, tasks)
            if co_warning:
                warnings.append(co_warning)

        if settings.resource_conflicts and task.payee_id:
            warnings.extend(check_resource_conflicts(task, tasks))

        if is_task_overdue(task, current):
            warnings.append(
                ScheduleWarning(
                    id=warning_id("overdue", task.id),
                    severity=Severity.ERROR,
                    message=f'"{task.name}" is overdue. Scheduled completion: {task.end}',
                    task_id=task.id,
                    task_name=task.name,
                    suggestion="Adjust schedule or update task progress",
                    can_dismiss=False,
                )
            )

        if settings.unusual_sequence:
            missing = check_missing_dependencies(task, tasks)
            if missing:
                warnings.append(missing)

    deduplicated = {warning.id: warning for warning in warnings}
    if changes_enabled():
        for warning in deduplicated.values():
            logger.changes(f"[{warning.severity.value}] {warning.id}: {warning.message}")
    return list(deduplicated.values())


def check_construction_sequencing(task: Task, all_tasks: Sequence[Task]) -> list[ScheduleWarning]:
    """One warning per other task this task is out of phase order with."""
    if identify_construction_phase(task.name) is None:
        return []

    warnings: list[ScheduleWarning] = []
    for other in all_tasks:
        if other.id == task.id:
            continue
        result = is_sequence_violation(task, other)
        if not result.violation:
            continue
        warnings.append(
            ScheduleWarning(
                id=warning_id("sequence", task.id, other.id),
                severity=Severity.WARNING,
                message=(
                    f'"{task.name}" has unusual sequencing with "{other.name}". {result.reason}'
                ),
                task_id=task.id,
                task_name=task.name,
                suggestion="Review construction sequence or add dependency",
            )
        )
    return warnings


def check_dependency_overlap(task: Task, all_tasks: Sequence[Task]) -> ScheduleWarning | None:
    """Warn when a task starts before the day after its latest dependency ends."""
    if not task.dependencies or task.start is None:
        return None

    earliest = calculate_earliest_start(task, all_tasks)
    if earliest is None or task.start >= earliest:
        return None

    index = index_tasks(all_tasks)
    blockers: list[Task] = []
    for dep_id in task.dependency_ids:
        dependency = index.get(dep_id)
        if dependency is not None and dependency.end is not None and dependency.end >= task.start:
            blockers.append(dependency)
    blocker_names = ", ".join(f'"{b.name}" (ends {b.end})' for b in blockers)
    days = (earliest - task.start).days

    return ScheduleWarning(
        id=warning_id("dep-overlap", task.id),
        severity=Severity.WARNING,
        message=f'"{task.name}" starts before dependencies are complete: {blocker_names}',
        task_id=task.id,
        task_name=task.name,
        suggestion=f"Consider moving start date {days} day(s) later to {earliest.isoformat()}",
    )


def check_change_order_timing(task: Task, all_tasks: Sequence[Task]) -> ScheduleWarning | None:
    """Note a change order scheduled ahead of the base work in its category."""
    if task.start is None:
        return None

    related = [
        t
        for t in all_tasks
        if not t.is_change_order and t.category == task.category and t.start is not None
    ]
    if not related:
        return None

    base_start = min(t.start or date.max for t in related)
    if task.start >= base_start:
        return None

    days = (base_start - task.start).days
    return ScheduleWarning(
        id=warning_id("co-timing", task.id),
        severity=Severity.INFO,
        message=f'Change order "{task.name}" is scheduled {days} day(s) before related base work',
        task_id=task.id,
        task_name=task.name,
        suggestion="Verify this timing is intentional",
    )


def check_resource_conflicts(task: Task, all_tasks: Sequence[Task]) -> list[ScheduleWarning]:
    """Warn about other tasks booked to the same payee over overlapping dates."""
    if not task.payee_id:
        return []

    warnings: list[ScheduleWarning] = []
    for other in all_tasks:
        if other.id == task.id or other.payee_id != task.payee_id:
            continue
        if checks_enabled():
            logger.checks(f"    resource {task.payee_id}: {task.id} vs {other.id}")
        if not tasks_overlap(task, other):
            continue
        warnings.append(
            ScheduleWarning(
                id=warning_id("resource-conflict", task.id, other.id),
                severity=Severity.WARNING,
                message=(
                    f'"{task.name}" overlaps with "{other.name}" - '
                    f"same {task.payee_name or 'subcontractor'}"
                ),
                task_id=task.id,
                task_name=task.name,
                suggestion="Adjust schedules to avoid resource conflict",
            )
        )
    return warnings


def check_missing_dependencies(task: Task, all_tasks: Sequence[Task]) -> ScheduleWarning | None:
    """Suggest predecessor phases present in the schedule but not linked."""
    suggestions = get_suggested_dependencies(task, all_tasks)
    if not suggestions:
        return None

    return ScheduleWarning(
        id=warning_id("missing-deps", task.id),
        severity=Severity.INFO,
        message=f'"{task.name}" may need additional dependencies',
        task_id=task.id,
        task_name=task.name,
        suggestion=". ".join(s.reason for s in suggestions),
    )


def check_unresolved_dependencies(task: Task, index: dict[str, Task]) -> list[ScheduleWarning]:
    """Flag dependency references that name no task in the schedule.

    Calculations skip these references; this makes the skip visible.
    """
    return [
        ScheduleWarning(
            id=warning_id("unresolved-dep", task.id, dep.task_id),
            severity=Severity.INFO,
            message=(
                f'"{task.name}" depends on "{dep}", which is not in this schedule; '
                "it is ignored in date calculations"
            ),
            task_id=task.id,
            task_name=task.name,
            suggestion="Remove the dependency or restore the missing task",
        )
        for dep in task.dependencies
        if dep.task_id not in index
    ]


def check_invalid_dates(task: Task) -> ScheduleWarning | None:
    """Report a task whose start or end date could not be read."""
    if task.has_valid_dates:
        return None

    dates = (("start", task.start), ("end", task.end))
    missing = [label for label, value in dates if value is None]
    return ScheduleWarning(
        id=warning_id("invalid-dates", task.id),
        severity=Severity.ERROR,
        message=f'"{task.name}" has an invalid {" and ".join(missing)} date',
        task_id=task.id,
        task_name=task.name,
        suggestion="Set valid start and end dates",
        can_dismiss=False,
    )
