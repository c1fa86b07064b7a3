"""Pydantic schemas for schedule YAML data."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class DependencySchema(BaseModel):
    """A dependency entry; YAML may give just the task ID as a string."""

    task_id: str
    task_name: str | None = None


class LineItemSchema(BaseModel):
    """Schema for an estimate or change order line item with schedule fields."""

    description: str
    category: str = "other"
    # Kept loose so an unparseable date reaches validation instead of failing the load
    scheduled_start_date: date | str | None = None
    scheduled_end_date: date | str | None = None
    dependencies: list[DependencySchema] = Field(default_factory=list)
    progress: int | None = None
    total_cost: float = 0.0
    actual_cost: float = 0.0
    payee_id: str | None = None
    payee_name: str | None = None
    schedule_notes: str | None = None

    @field_validator("dependencies", mode="before")
    @classmethod
    def normalize_dependencies(cls, v: Any) -> list[Any]:
        """Accept None, a single ID, a list of IDs, or a list of mappings."""
        if v is None:
            return []
        if not isinstance(v, list):
            v = [v]
        return [item if isinstance(item, dict) else {"task_id": str(item)} for item in v]

    @field_validator("scheduled_start_date", "scheduled_end_date", mode="before")
    @classmethod
    def keep_raw_date(cls, v: Any) -> Any:
        """Leave non-date scalars as strings for later parsing."""
        if isinstance(v, datetime):
            return v.date()
        if v is None or isinstance(v, date):
            return v
        return str(v)


class EstimateSchema(BaseModel):
    """The approved estimate's line items, keyed by line item ID."""

    line_items: dict[str, LineItemSchema] = Field(default_factory=dict)


class ChangeOrderSchema(BaseModel):
    """An approved change order and its line items."""

    number: str
    line_items: dict[str, LineItemSchema] = Field(default_factory=dict)

    @field_validator("number", mode="before")
    @classmethod
    def coerce_number_to_string(cls, v: Any) -> str:
        return str(v)


class ProjectSchema(BaseModel):
    """Project-level settings used when materializing tasks."""

    name: str = "Untitled Project"
    start_date: date | None = None


class ScheduleFileSchema(BaseModel):
    """Schema for an entire schedule YAML file."""

    project: ProjectSchema = Field(default_factory=ProjectSchema)
    estimate: EstimateSchema = Field(default_factory=EstimateSchema)
    change_orders: list[ChangeOrderSchema] = Field(default_factory=list)
