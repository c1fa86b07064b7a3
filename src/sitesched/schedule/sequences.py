"""Construction phase rules and keyword-based phase classification.

The rule table follows typical residential/commercial build order. It is
read-only and built once at import time.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from sitesched.logger import checks_enabled, get_logger
from sitesched.models import DependencySuggestion, SequenceCheck

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sitesched.models import Task

logger = get_logger()


class ConstructionPhase(str, Enum):
    """Known construction phases, in rule-table order."""

    FOUNDATION = "foundation"
    FRAMING = "framing"
    ROOFING = "roofing"
    ROUGH_ELECTRICAL = "rough_electrical"
    ROUGH_PLUMBING = "rough_plumbing"
    HVAC_ROUGH = "hvac_rough"
    INSULATION = "insulation"
    DRYWALL = "drywall"
    PAINT = "paint"
    FLOORING = "flooring"
    CABINETS = "cabinets"
    COUNTERTOPS = "countertops"
    TRIM = "trim"
    FIXTURES = "fixtures"
    FINAL_ELECTRICAL = "final_electrical"
    FINAL_PLUMBING = "final_plumbing"


@dataclass(frozen=True)
class PhaseRule:
    """Ordering constraints and classification keywords for one phase."""

    keywords: tuple[str, ...]
    after: tuple[ConstructionPhase, ...] = ()  # Must be completed before this phase
    before: tuple[ConstructionPhase, ...] = ()  # Must wait for this phase
    typical_duration: int | None = None  # Days
    requires_inspection: bool = False


P = ConstructionPhase

CONSTRUCTION_SEQUENCES: Mapping[ConstructionPhase, PhaseRule] = MappingProxyType(
    {
        # Foundation
        P.FOUNDATION: PhaseRule(
            keywords=("foundation", "footing", "slab", "basement", "concrete pour"),
            before=(P.FRAMING, P.ROOFING, P.ROUGH_ELECTRICAL, P.ROUGH_PLUMBING, P.DRYWALL),
            typical_duration=7,
            requires_inspection=True,
        ),
        # Structure
        P.FRAMING: PhaseRule(
            keywords=("framing", "frame", "studs", "joists", "trusses", "structural"),
            after=(P.FOUNDATION,),
            before=(P.ROOFING, P.ROUGH_ELECTRICAL, P.ROUGH_PLUMBING, P.INSULATION, P.DRYWALL),
            typical_duration=14,
            requires_inspection=True,
        ),
        P.ROOFING: PhaseRule(
            keywords=("roof", "roofing", "shingles", "flashing"),
            after=(P.FRAMING,),
            before=(P.DRYWALL, P.INSULATION),
            typical_duration=5,
        ),
        # Rough-in
        P.ROUGH_ELECTRICAL: PhaseRule(
            keywords=("electrical rough", "rough electric", "wiring", "rough-in electric"),
            after=(P.FRAMING,),
            before=(P.DRYWALL, P.INSULATION),
            typical_duration=5,
            requires_inspection=True,
        ),
        P.ROUGH_PLUMBING: PhaseRule(
            keywords=("plumbing rough", "rough plumb", "pipes", "rough-in plumb"),
            after=(P.FRAMING,),
            before=(P.DRYWALL, P.INSULATION),
            typical_duration=5,
            requires_inspection=True,
        ),
        P.HVAC_ROUGH: PhaseRule(
            keywords=("hvac rough", "ductwork", "rough-in hvac", "heating"),
            after=(P.FRAMING,),
            before=(P.DRYWALL, P.INSULATION),
            typical_duration=5,
        ),
        # Insulation and drywall
        P.INSULATION: PhaseRule(
            keywords=("insulation", "insulate"),
            after=(P.FRAMING, P.ROUGH_ELECTRICAL, P.ROUGH_PLUMBING, P.HVAC_ROUGH, P.ROOFING),
            before=(P.DRYWALL,),
            typical_duration=3,
            requires_inspection=True,
        ),
        P.DRYWALL: PhaseRule(
            keywords=("drywall", "sheetrock", "wallboard"),
            after=(
                P.FRAMING,
                P.ROUGH_ELECTRICAL,
                P.ROUGH_PLUMBING,
                P.HVAC_ROUGH,
                P.INSULATION,
                P.ROOFING,
            ),
            before=(P.PAINT, P.FLOORING, P.TRIM, P.CABINETS),
            typical_duration=10,
        ),
        # Finishes
        P.PAINT: PhaseRule(
            keywords=("paint", "painting", "primer"),
            after=(P.DRYWALL,),
            before=(P.FLOORING, P.CABINETS, P.FIXTURES, P.TRIM),
            typical_duration=5,
        ),
        P.FLOORING: PhaseRule(
            keywords=("flooring", "floor", "hardwood", "tile", "carpet", "vinyl"),
            after=(P.DRYWALL, P.PAINT),
            typical_duration=5,
        ),
        P.CABINETS: PhaseRule(
            keywords=("cabinet", "cabinetry"),
            after=(P.DRYWALL, P.PAINT),
            before=(P.COUNTERTOPS, P.FIXTURES),
            typical_duration=3,
        ),
        P.COUNTERTOPS: PhaseRule(
            keywords=("countertop", "counter top", "granite", "quartz"),
            after=(P.CABINETS,),
            before=(P.FIXTURES,),
            typical_duration=2,
        ),
        P.TRIM: PhaseRule(
            keywords=("trim", "baseboard", "molding", "crown"),
            after=(P.DRYWALL, P.PAINT, P.FLOORING),
            typical_duration=5,
        ),
        # Final fixtures
        P.FIXTURES: PhaseRule(
            keywords=("fixture", "faucet", "light fixture", "appliance"),
            after=(P.PAINT, P.FLOORING, P.COUNTERTOPS),
            typical_duration=3,
        ),
        P.FINAL_ELECTRICAL: PhaseRule(
            keywords=("electrical final", "final electric", "switches", "outlets"),
            after=(P.PAINT, P.DRYWALL),
            typical_duration=2,
            requires_inspection=True,
        ),
        P.FINAL_PLUMBING: PhaseRule(
            keywords=("plumbing final", "final plumb"),
            after=(P.PAINT, P.DRYWALL, P.COUNTERTOPS),
            typical_duration=2,
            requires_inspection=True,
        ),
    }
)

del P


def identify_construction_phase(description: str) -> ConstructionPhase | None:
    """Classify a task description into a construction phase.

    The first phase in table order with a keyword contained in the lower-cased
    description wins; descriptions matching several phases are not scored.
    """
    lowered = description.lower()
    for phase, rule in CONSTRUCTION_SEQUENCES.items():
        if any(keyword in lowered for keyword in rule.keywords):
            return phase
    return None


def is_sequence_violation(task_a: Task, task_b: Task) -> SequenceCheck:
    """Check whether ``task_a`` is scheduled out of order relative to ``task_b``.

    Only start dates are compared. Unclassifiable tasks and tasks without a
    known start never violate.
    """
    phase_a = identify_construction_phase(task_a.name)
    phase_b = identify_construction_phase(task_b.name)
    if phase_a is None or phase_b is None:
        return SequenceCheck(violation=False)
    if task_a.start is None or task_b.start is None:
        return SequenceCheck(violation=False)

    rule_a = CONSTRUCTION_SEQUENCES[phase_a]
    if checks_enabled():
        logger.checks(f"    sequence {task_a.id}[{phase_a.value}] vs {task_b.id}[{phase_b.value}]")

    if phase_b in rule_a.before and task_a.start > task_b.start:
        return SequenceCheck(
            violation=True,
            reason=f"{phase_a.value} typically must be completed before {phase_b.value}",
        )

    if phase_b in rule_a.after and task_a.start < task_b.start:
        return SequenceCheck(
            violation=True,
            reason=f"{phase_a.value} typically requires {phase_b.value} to be completed first",
        )

    return SequenceCheck(violation=False)


def get_suggested_dependencies(task: Task, all_tasks: Sequence[Task]) -> list[DependencySuggestion]:
    """Suggest one existing task per phase that must precede ``task``'s phase.

    For each phase in the rule's ``after`` list, the first task in
    ``all_tasks`` classified into that phase is suggested unless it is
    already a dependency.
    """
    phase = identify_construction_phase(task.name)
    if phase is None:
        return []

    rule = CONSTRUCTION_SEQUENCES[phase]
    existing = set(task.dependency_ids)
    suggestions: list[DependencySuggestion] = []

    for required_phase in rule.after:
        required_task = next(
            (
                t
                for t in all_tasks
                if t.id != task.id and identify_construction_phase(t.name) == required_phase
            ),
            None,
        )
        if required_task is None or required_task.id in existing:
            continue
        suggestions.append(
            DependencySuggestion(
                task_id=required_task.id,
                reason=(
                    f"{phase.value} typically requires {required_phase.value} "
                    "to be completed first"
                ),
            )
        )

    return suggestions


def requires_inspection(description: str) -> bool:
    """True if the description's phase needs an inspection sign-off."""
    phase = identify_construction_phase(description)
    if phase is None:
        return False
    return CONSTRUCTION_SEQUENCES[phase].requires_inspection


def get_typical_duration(description: str) -> int | None:
    """Typical duration in days for the description's phase, if known."""
    phase = identify_construction_phase(description)
    if phase is None:
        return None
    return CONSTRUCTION_SEQUENCES[phase].typical_duration
