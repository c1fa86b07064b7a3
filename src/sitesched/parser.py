"""YAML parser for schedule files.

A schedule file holds the approved estimate's line items and the line items
of approved change orders. Each line item becomes one schedule task.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .logger import get_logger
from .models import Task, TaskDependency
from .schedule.calculations import calculate_progress_from_cost, parse_date
from .schemas import ScheduleFileSchema

if TYPE_CHECKING:
    from .config import SiteschedConfig
    from .schemas import LineItemSchema

logger = get_logger()

DEFAULT_DURATION_DAYS = 7


def _default_task_list() -> list[Task]:
    return []


@dataclass
class Schedule:
    """A project's materialized task list."""

    project_name: str
    project_start: date | None = None
    tasks: list[Task] = field(default_factory=_default_task_list)

    def get_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


def materialize_line_items(  # noqa: PLR0913 - mirrors the line item source fields
    line_items: dict[str, LineItemSchema],
    *,
    is_change_order: bool,
    change_order_number: str | None = None,
    project_start: date | None = None,
    default_duration_days: int = DEFAULT_DURATION_DAYS,
    today: date | None = None,
) -> list[Task]:
    """Convert line items into schedule tasks.

    - Change order task names are prefixed with ``CO-{number}: ``
    - A missing start falls back to the project start, then to today
    - A missing end falls back to ``default_duration_days`` calendar days after
      the start, so the task spans ``default_duration_days + 1`` inclusive days
    - A date that is present but unparseable becomes ``None``
    - Progress is taken as given, or derived from actual vs. estimated cost
    """
    fallback_start = project_start or today or date.today()  # noqa: DTZ011
    tasks: list[Task] = []

    for item_id, item in line_items.items():
        name = (
            f"CO-{change_order_number}: {item.description}" if is_change_order else item.description
        )

        if item.scheduled_start_date is None:
            start: date | None = fallback_start
        else:
            start = parse_date(item.scheduled_start_date)

        if item.scheduled_end_date is not None:
            end = parse_date(item.scheduled_end_date)
        elif start is not None:
            end = start + timedelta(days=default_duration_days)
        else:
            end = None

        if start is None or end is None:
            logger.warning(f"Line item {item_id} has an unparseable schedule date")

        progress = (
            item.progress
            if item.progress is not None
            else calculate_progress_from_cost(item.actual_cost, item.total_cost)
        )

        tasks.append(
            Task(
                id=item_id,
                name=name,
                category=item.category,
                start=start,
                end=end,
                progress=progress,
                dependencies=[
                    TaskDependency(task_id=dep.task_id, task_name=dep.task_name)
                    for dep in item.dependencies
                ],
                is_change_order=is_change_order,
                change_order_number=change_order_number,
                payee_id=item.payee_id,
                payee_name=item.payee_name,
                estimated_cost=item.total_cost,
                actual_cost=item.actual_cost,
                notes=item.schedule_notes,
            )
        )

    return tasks


class ScheduleParser:
    """Parser for schedule YAML files."""

    def __init__(self, config: SiteschedConfig | None = None, today: date | None = None):
        self.default_duration_days = (
            config.materialize.default_duration_days if config else DEFAULT_DURATION_DAYS
        )
        self.today = today

    def parse_file(self, file_path: Path | str) -> Schedule:
        """Parse a YAML file into a Schedule."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}", path)

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}", path) from e

        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level", path)

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> Schedule:
        """Validate loaded YAML data and materialize its tasks."""
        try:
            schema = ScheduleFileSchema.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid schedule structure: {e}") from e

        project_start = schema.project.start_date
        tasks = materialize_line_items(
            schema.estimate.line_items,
            is_change_order=False,
            project_start=project_start,
            default_duration_days=self.default_duration_days,
            today=self.today,
        )
        for change_order in schema.change_orders:
            tasks.extend(
                materialize_line_items(
                    change_order.line_items,
                    is_change_order=True,
                    change_order_number=change_order.number,
                    project_start=project_start,
                    default_duration_days=self.default_duration_days,
                    today=self.today,
                )
            )

        logger.changes(f"Loaded {len(tasks)} tasks for {schema.project.name}")
        return Schedule(project_name=schema.project.name, project_start=project_start, tasks=tasks)


def load_schedule(
    file_path: Path | str, config: SiteschedConfig | None = None, today: date | None = None
) -> Schedule:
    """Parse a schedule file using the given (or default) configuration."""
    return ScheduleParser(config, today).parse_file(file_path)
