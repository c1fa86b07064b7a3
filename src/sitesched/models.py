"""Data models for sitesched."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


@dataclass(frozen=True)
class TaskDependency:
    """A task's dependency on another task in the same schedule.

    Carries identity only. The dependent may start the day after the
    dependency ends; there is no lag beyond that.
    """

    task_id: str
    task_name: str | None = None

    def __str__(self) -> str:
        return self.task_name or self.task_id


def _default_dependency_list() -> list[TaskDependency]:
    return []


@dataclass
class Task:
    """A schedulable unit of work materialized from an estimate or change order line item.

    ``start`` and ``end`` are inclusive calendar dates. Either is ``None`` when the
    source value was unparseable; every calculation treats ``None`` as unknown
    instead of guessing.
    """

    id: str
    name: str
    category: str
    start: date | None
    end: date | None
    progress: int = 0
    dependencies: list[TaskDependency] = field(default_factory=_default_dependency_list)
    is_change_order: bool = False
    change_order_number: str | None = None
    payee_id: str | None = None
    payee_name: str | None = None
    estimated_cost: float = 0.0
    actual_cost: float = 0.0
    notes: str | None = None

    @property
    def dependency_ids(self) -> list[str]:
        """Dependency task IDs in declaration order, without duplicates."""
        return list(dict.fromkeys(dep.task_id for dep in self.dependencies))

    @property
    def has_valid_dates(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def is_complete(self) -> bool:
        return self.progress >= 100


def index_tasks(tasks: Iterable[Task]) -> dict[str, Task]:
    """Map task ID to task. The first task with a given ID wins."""
    index: dict[str, Task] = {}
    for task in tasks:
        index.setdefault(task.id, task)
    return index


class Severity(str, Enum):
    """How serious a schedule warning is."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ScheduleWarning:
    """An advisory finding about a task, regenerated on every warning pass."""

    id: str
    severity: Severity
    message: str
    task_id: str
    task_name: str
    suggestion: str | None = None
    can_dismiss: bool = True


def _default_str_list() -> list[str]:
    return []


@dataclass
class ValidationResult:
    """Outcome of validating a task before an edit is saved."""

    valid: bool
    errors: list[str] = field(default_factory=_default_str_list)


@dataclass(frozen=True)
class SequenceCheck:
    """Result of comparing two tasks against the construction sequence rules."""

    violation: bool
    reason: str | None = None


@dataclass(frozen=True)
class DependencySuggestion:
    """A task that should probably be added as a dependency, and why."""

    task_id: str
    reason: str
