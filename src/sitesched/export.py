"""CSV export of schedules: a task list and a day-by-day activity sheet."""

from __future__ import annotations

import csv
import re
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, TextIO

from .config import ExportSortOrder, ScheduleExportOptions
from .logger import get_logger
from .schedule.calculations import calculate_duration

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import Task

logger = get_logger()

# Longer daily sheets are still written but usually mean a mistyped year
LONG_DAILY_EXPORT_DAYS = 5 * 365


def format_category(category: str) -> str:
    """``rough_labor`` -> ``Rough Labor``."""
    return " ".join(word[:1].upper() + word[1:] for word in category.split("_"))


def status_from_progress(progress: int) -> str:
    if progress <= 0:
        return "Not Started"
    if progress < 100:
        return "In Progress"
    return "Complete"


def format_currency(amount: float) -> str:
    return f"${amount:.2f}"


def sanitize_filename(name: str) -> str:
    """Lower-case a name and reduce it to letters, digits, ``-`` and ``_``."""
    cleaned = re.sub(r"[^a-zA-Z0-9\-_]", "_", name)
    return re.sub(r"_+", "_", cleaned).lower()


def default_export_filename(project_name: str, on: date, *, by_day: bool = False) -> str:
    kind = "daily_schedule" if by_day else "schedule"
    return f"{sanitize_filename(project_name)}_{kind}_{on.isoformat()}.csv"


def _sorted_tasks(tasks: Sequence[Task], sort_by: ExportSortOrder) -> list[Task]:
    if sort_by == ExportSortOrder.CATEGORY:
        return sorted(tasks, key=lambda t: t.category.lower())
    if sort_by == ExportSortOrder.NAME:
        return sorted(tasks, key=lambda t: t.name.lower())
    # Undated tasks go last
    return sorted(tasks, key=lambda t: (t.start is None, t.start or date.min))


def _iso(value: date | None) -> str:
    return value.isoformat() if value else ""


def export_schedule_csv(
    tasks: Sequence[Task],
    project_name: str,
    options: ScheduleExportOptions,
    output: TextIO,
    exported_at: datetime | None = None,
) -> bool:
    """Write one row per task to ``output``.

    Returns:
        False (writing nothing) when there are no tasks, otherwise True
    """
    if not tasks:
        return False

    exported_at = exported_at or datetime.now()  # noqa: DTZ005
    ordered = _sorted_tasks(tasks, options.sort_by)

    headers = ["Task Name", "Category", "Start Date", "End Date", "Duration (Days)", "Type"]
    if options.include_progress:
        headers += ["Progress (%)", "Status"]
    if options.include_costs:
        headers += ["Estimated Cost", "Actual Cost", "Cost Variance"]
    if options.include_dependencies:
        headers += ["Dependencies", "Dependent Tasks"]
    if options.include_notes:
        headers.append("Notes")

    writer = csv.writer(output, lineterminator="\n")
    writer.writerow([f"Project: {project_name}"])
    writer.writerow([f"Exported: {exported_at:%Y-%m-%d %H:%M}"])
    writer.writerow([f"Total Tasks: {len(tasks)}"])
    writer.writerow([])
    writer.writerow(headers)

    for task in ordered:
        duration = (
            str(calculate_duration(task.start, task.end))
            if task.start is not None and task.end is not None
            else ""
        )
        row = [
            task.name,
            format_category(task.category),
            _iso(task.start),
            _iso(task.end),
            duration,
            "Change Order" if task.is_change_order else "Original Estimate",
        ]

        if options.include_progress:
            row += [str(task.progress), status_from_progress(task.progress)]

        if options.include_costs:
            row += [
                format_currency(task.estimated_cost),
                format_currency(task.actual_cost),
                format_currency(task.actual_cost - task.estimated_cost),
            ]

        if options.include_dependencies:
            dependency_names = "; ".join(str(dep) for dep in task.dependencies)
            dependents = "; ".join(t.name for t in ordered if task.id in t.dependency_ids)
            row += [dependency_names or "None", dependents or "None"]

        if options.include_notes:
            row.append((task.notes or "").replace("\n", " "))

        writer.writerow(row)

    return True


def export_schedule_by_day(
    tasks: Sequence[Task],
    project_name: str,
    output: TextIO,
    exported_at: datetime | None = None,
) -> bool:
    """Write one row per calendar day from the first start to the last end.

    Tasks with unknown dates are left out. Returns False (writing nothing)
    when no task is dated.
    """
    dated = [t for t in tasks if t.start is not None and t.end is not None]
    if not dated:
        return False

    exported_at = exported_at or datetime.now()  # noqa: DTZ005
    first = min(t.start for t in dated if t.start is not None)
    last = max(t.end for t in dated if t.end is not None)
    total_days = (last - first).days + 1
    if total_days > LONG_DAILY_EXPORT_DAYS:
        logger.warning(
            f"Daily export spans {total_days} days ({first} to {last}); "
            "check for a mistyped start or end date"
        )

    writer = csv.writer(output, lineterminator="\n")
    writer.writerow([f"Project: {project_name}"])
    writer.writerow(["Daily Activity Schedule"])
    writer.writerow([f"Exported: {exported_at:%Y-%m-%d %H:%M}"])
    writer.writerow([f"Date Range: {first:%b %d, %Y} - {last:%b %d, %Y}"])
    writer.writerow([f"Total Days: {total_days}"])
    writer.writerow([f"Total Tasks: {len(tasks)}"])
    writer.writerow([])
    writer.writerow(
        ["Date", "Day of Week", "Active Tasks", "Tasks Starting", "Tasks Ending", "Total Active"]
    )

    for offset in range(total_days):
        day = first + timedelta(days=offset)
        active = [t for t in dated if t.start <= day <= t.end]  # type: ignore[operator]
        starting = [t.name for t in dated if t.start == day]
        ending = [t.name for t in dated if t.end == day]
        writer.writerow(
            [
                day.isoformat(),
                f"{day:%A}",
                "; ".join(f"{t.name} ({format_category(t.category)})" for t in active) or "None",
                "; ".join(starting) or "None",
                "; ".join(ending) or "None",
                str(len(active)),
            ]
        )

    return True
