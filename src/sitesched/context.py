"""Process-wide CLI state: config location and the as-of date."""

from __future__ import annotations

from datetime import date
from pathlib import Path


class _Context:
    """Holds options set once by the CLI callback and read by commands."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.as_of: date | None = None


_context = _Context()


def get_config_path() -> Path | None:
    """Get the config path given with ``--config``, if any."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    _context.config_path = path


def get_as_of_date() -> date:
    """Date the schedule is evaluated against; today unless overridden."""
    return _context.as_of or date.today()  # noqa: DTZ011


def set_as_of_date(value: date | None) -> None:
    _context.as_of = value


def reset() -> None:
    """Clear all context state (used between CLI invocations in tests)."""
    _context.config_path = None
    _context.as_of = None
