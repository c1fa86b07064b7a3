"""Configuration for the warning engine."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class WarningSettings(BaseModel):
    """Toggles for the optional warning checks.

    There are no defaults: every caller states all four. Overdue tasks and
    structural diagnostics are always reported regardless of these toggles.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    unusual_sequence: bool  # Phase ordering checks and missing-dependency suggestions
    date_overlap: bool  # Task starts before its dependencies finish
    change_order_timing: bool  # Change order starts before base work of its category
    resource_conflicts: bool  # Same payee booked on overlapping tasks

    @classmethod
    def all_enabled(cls) -> WarningSettings:
        return cls(
            unusual_sequence=True,
            date_overlap=True,
            change_order_timing=True,
            resource_conflicts=True,
        )
