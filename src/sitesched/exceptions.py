"""Exceptions raised at the file and CLI boundary.

The warning engine itself never raises for bad schedule data; it reports
problems as warnings. These are for loaders and strict analysis.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class SiteschedError(Exception):
    """Base exception for all sitesched errors."""


class ValidationError(SiteschedError):
    """Schedule data does not fit the schema or the dependency graph is unusable."""


class CircularDependencyError(ValidationError):
    """Tasks whose dependencies loop back on themselves."""

    def __init__(self, task_ids: Iterable[str]):
        self.task_ids = list(task_ids)
        super().__init__(f"Circular dependency among tasks: {', '.join(self.task_ids)}")


class MissingReferenceError(ValidationError):
    """A dependency names a task that is absent or has no usable dates."""

    def __init__(self, task_id: str, dependency_id: str):
        self.task_id = task_id
        self.dependency_id = dependency_id
        super().__init__(f"Task '{task_id}' depends on unknown or undated task '{dependency_id}'")


class ParseError(SiteschedError):
    """A schedule file could not be read or is not a YAML mapping."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)
