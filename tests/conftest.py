"""Pytest configuration and fixtures for sitesched tests."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from sitesched import context
from sitesched.logger import reset_logger
from sitesched.models import Task, TaskDependency
from sitesched.schedule.config import WarningSettings

TODAY = date(2025, 6, 1)


@pytest.fixture(autouse=True)
def clean_state() -> None:
    """Reset the logger and CLI context before each test for isolation."""
    reset_logger()
    context.reset()


@pytest.fixture
def all_checks() -> WarningSettings:
    return WarningSettings.all_enabled()


@pytest.fixture
def no_optional_checks() -> WarningSettings:
    return WarningSettings(
        unusual_sequence=False,
        date_overlap=False,
        change_order_timing=False,
        resource_conflicts=False,
    )


def deps(*task_ids: str) -> list[TaskDependency]:
    """Create a dependency list from task ID strings."""
    return [TaskDependency(task_id=task_id) for task_id in task_ids]


def make_task(
    task_id: str,
    name: str | None = None,
    start: str | date | None = "2025-03-03",
    end: str | date | None = "2025-03-07",
    *,
    depends_on: tuple[str, ...] = (),
    **kwargs: Any,
) -> Task:
    """Build a Task with sensible defaults; dates may be ISO strings."""
    return Task(
        id=task_id,
        name=name or task_id,
        category=kwargs.pop("category", "labor"),
        start=date.fromisoformat(start) if isinstance(start, str) else start,
        end=date.fromisoformat(end) if isinstance(end, str) else end,
        dependencies=deps(*depends_on),
        **kwargs,
    )
