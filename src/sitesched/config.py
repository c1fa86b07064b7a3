"""Configuration file loading (sitesched_config.yaml).

A single YAML file holds the warning toggles, task materialization defaults
and CSV export options. Every section is optional.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from . import context
from .schedule.config import WarningSettings

CONFIG_FILENAME = "sitesched_config.yaml"


class ExportSortOrder(str, Enum):
    """Row order for task-list CSV exports."""

    START_DATE = "start_date"
    CATEGORY = "category"
    NAME = "name"


class ScheduleExportOptions(BaseModel):
    """Which column groups a task-list CSV export includes."""

    include_progress: bool = True
    include_costs: bool = False
    include_dependencies: bool = True
    include_notes: bool = False
    sort_by: ExportSortOrder = ExportSortOrder.START_DATE


class MaterializeConfig(BaseModel):
    """Defaults applied when turning line items into tasks."""

    default_duration_days: int = Field(default=7, ge=1)


class SiteschedConfig(BaseModel):
    """Top-level configuration."""

    warnings: WarningSettings | None = None  # None = every optional check enabled
    materialize: MaterializeConfig = Field(default_factory=MaterializeConfig)
    export: ScheduleExportOptions = Field(default_factory=ScheduleExportOptions)

    def warning_settings(self) -> WarningSettings:
        """Settings to hand to the warning engine."""
        return self.warnings or WarningSettings.all_enabled()


def load_config(config_path: Path | str) -> SiteschedConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to sitesched_config.yaml

    Returns:
        Parsed SiteschedConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValueError("Empty configuration file")
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping at the root level")

    try:
        return SiteschedConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e


def discover_config(
    schedule_path: Path | None = None,
    config_path: Path | None = None,
) -> SiteschedConfig:
    """Find and load configuration, falling back to defaults.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Schedule file directory / sitesched_config.yaml
    4. Current directory / sitesched_config.yaml

    A path given explicitly (1 or 2) must exist; the implicit locations are
    skipped when absent.
    """
    explicit = config_path or context.get_config_path()
    if explicit is not None:
        return load_config(explicit)

    candidates: list[Path] = []
    if schedule_path is not None:
        candidates.append(Path(schedule_path).parent / CONFIG_FILENAME)
    candidates.append(Path(CONFIG_FILENAME))

    for candidate in candidates:
        if candidate.exists():
            return load_config(candidate)
    return SiteschedConfig()
