"""Schedule engine package - date math, phase sequencing and warnings.

This package provides:
- Date and dependency arithmetic over task lists (calculations)
- Critical path analysis (critical_path)
- The construction phase rule table and classifier (sequences)
- Warning generation and task validation (checks, validator)

Main entry points:
- generate_schedule_warnings: Advisory warnings for a task list
- validate_task: Structural checks before saving an edit
- CriticalPathAnalyzer: Forward/backward pass with full timing detail
"""

from .calculations import (
    calculate_duration,
    calculate_earliest_start,
    calculate_end_date,
    calculate_progress_from_cost,
    calculate_project_duration,
    calculate_schedule_variance,
    format_duration,
    get_ready_to_start_tasks,
    is_task_overdue,
    parse_date,
    task_duration,
    tasks_overlap,
)
from .checks import generate_schedule_warnings
from .config import WarningSettings
from .critical_path import (
    CriticalPathAnalyzer,
    CriticalPathResult,
    TaskTiming,
    calculate_critical_path,
)
from .sequences import (
    CONSTRUCTION_SEQUENCES,
    ConstructionPhase,
    PhaseRule,
    get_suggested_dependencies,
    get_typical_duration,
    identify_construction_phase,
    is_sequence_violation,
    requires_inspection,
)
from .validator import detect_circular_dependency, validate_schedule, validate_task

__all__ = [
    # Calculations
    "calculate_duration",
    "calculate_earliest_start",
    "calculate_end_date",
    "calculate_progress_from_cost",
    "calculate_project_duration",
    "calculate_schedule_variance",
    "format_duration",
    "get_ready_to_start_tasks",
    "is_task_overdue",
    "parse_date",
    "task_duration",
    "tasks_overlap",
    # Critical path
    "CriticalPathAnalyzer",
    "CriticalPathResult",
    "TaskTiming",
    "calculate_critical_path",
    # Phase rules
    "CONSTRUCTION_SEQUENCES",
    "ConstructionPhase",
    "PhaseRule",
    "get_suggested_dependencies",
    "get_typical_duration",
    "identify_construction_phase",
    "is_sequence_violation",
    "requires_inspection",
    # Warnings and validation
    "WarningSettings",
    "generate_schedule_warnings",
    "detect_circular_dependency",
    "validate_schedule",
    "validate_task",
]
