"""Tests for construction phase classification and sequencing rules."""

import pytest

from sitesched.schedule.sequences import (
    CONSTRUCTION_SEQUENCES,
    ConstructionPhase,
    get_suggested_dependencies,
    get_typical_duration,
    identify_construction_phase,
    is_sequence_violation,
    requires_inspection,
)
from tests.conftest import make_task


class TestIdentifyPhase:
    """Test keyword classification."""

    @pytest.mark.parametrize(
        ("description", "expected"),
        [
            ("Pour Foundation", ConstructionPhase.FOUNDATION),
            ("Drywall Install", ConstructionPhase.DRYWALL),
            ("Hang sheetrock", ConstructionPhase.DRYWALL),
            ("Install roof shingles", ConstructionPhase.ROOFING),
            ("Kitchen cabinetry", ConstructionPhase.CABINETS),
            ("Quartz countertops", ConstructionPhase.COUNTERTOPS),
            ("Final plumbing hookup", ConstructionPhase.FINAL_PLUMBING),
        ],
    )
    def test_known_phases(self, description: str, expected: ConstructionPhase) -> None:
        assert identify_construction_phase(description) == expected

    def test_case_insensitive(self) -> None:
        assert identify_construction_phase("FRAMING CREW") == ConstructionPhase.FRAMING

    def test_unknown_description(self) -> None:
        assert identify_construction_phase("Site cleanup") is None

    def test_first_match_in_table_order(self) -> None:
        """A description matching several phases goes to the earliest one in the table."""
        # "frame" (framing) and "floor" (flooring) both match; framing comes first
        assert identify_construction_phase("Frame the floor deck") == ConstructionPhase.FRAMING
        # "slab" (foundation) wins over "rough electric" (rough_electrical)
        assert (
            identify_construction_phase("Rough electric for slab outlets")
            == ConstructionPhase.FOUNDATION
        )


class TestRuleTable:
    """Test the phase rule table itself."""

    def test_every_phase_has_a_rule(self) -> None:
        assert set(CONSTRUCTION_SEQUENCES) == set(ConstructionPhase)

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            CONSTRUCTION_SEQUENCES[ConstructionPhase.PAINT] = None  # type: ignore[index]

    def test_references_only_known_phases(self) -> None:
        for rule in CONSTRUCTION_SEQUENCES.values():
            for phase in (*rule.after, *rule.before):
                assert phase in CONSTRUCTION_SEQUENCES

    def test_inspection_and_duration(self) -> None:
        assert requires_inspection("Footing pour")
        assert not requires_inspection("Paint bedrooms")
        assert not requires_inspection("Site cleanup")
        assert get_typical_duration("Drywall Install") == 10
        assert get_typical_duration("Site cleanup") is None


class TestSequenceViolation:
    """Test pairwise ordering checks."""

    def test_before_rule_violated(self) -> None:
        """Framing starting after drywall breaks framing's before-rule."""
        framing = make_task("f", "Framing", start="2025-03-10", end="2025-03-20")
        drywall = make_task("d", "Drywall Install", start="2025-03-01", end="2025-03-05")
        result = is_sequence_violation(framing, drywall)

        assert result.violation
        assert result.reason == "framing typically must be completed before drywall"

    def test_after_rule_violated(self) -> None:
        drywall = make_task("d", "Drywall Install", start="2025-03-01", end="2025-03-05")
        framing = make_task("f", "Framing", start="2025-03-10", end="2025-03-20")
        result = is_sequence_violation(drywall, framing)

        assert result.violation
        assert result.reason == "drywall typically requires framing to be completed first"

    def test_correct_order_is_fine(self) -> None:
        framing = make_task("f", "Framing", start="2025-03-01", end="2025-03-05")
        drywall = make_task("d", "Drywall Install", start="2025-03-10", end="2025-03-20")
        assert not is_sequence_violation(framing, drywall).violation
        assert not is_sequence_violation(drywall, framing).violation

    def test_same_start_is_fine(self) -> None:
        framing = make_task("f", "Framing", start="2025-03-01", end="2025-03-05")
        drywall = make_task("d", "Drywall Install", start="2025-03-01", end="2025-03-05")
        assert not is_sequence_violation(framing, drywall).violation

    def test_unclassified_never_violates(self) -> None:
        cleanup = make_task("c", "Site cleanup", start="2025-03-10", end="2025-03-12")
        drywall = make_task("d", "Drywall Install", start="2025-03-01", end="2025-03-05")
        assert is_sequence_violation(cleanup, drywall).violation is False
        assert is_sequence_violation(drywall, cleanup).reason is None

    def test_unknown_start_never_violates(self) -> None:
        framing = make_task("f", "Framing", start=None)
        drywall = make_task("d", "Drywall Install", start="2025-03-01", end="2025-03-05")
        assert not is_sequence_violation(framing, drywall).violation


class TestSuggestedDependencies:
    """Test predecessor suggestions."""

    def test_suggests_first_task_of_each_required_phase(self) -> None:
        framing = make_task("f1", "Framing walls")
        framing_2 = make_task("f2", "Frame garage")
        roof = make_task("r", "Roofing")
        drywall = make_task("d", "Drywall Install")
        suggestions = get_suggested_dependencies(drywall, [framing, framing_2, roof, drywall])

        assert [s.task_id for s in suggestions] == ["f1", "r"]
        assert suggestions[0].reason == "drywall typically requires framing to be completed first"

    def test_existing_dependency_not_suggested(self) -> None:
        framing = make_task("f", "Framing")
        roof = make_task("r", "Roofing")
        drywall = make_task("d", "Drywall Install", depends_on=("f",))
        suggestions = get_suggested_dependencies(drywall, [framing, roof, drywall])
        assert [s.task_id for s in suggestions] == ["r"]

    def test_unclassified_task_gets_nothing(self) -> None:
        cleanup = make_task("c", "Site cleanup")
        assert get_suggested_dependencies(cleanup, [cleanup, make_task("f", "Framing")]) == []

    def test_phase_with_no_predecessors(self) -> None:
        foundation = make_task("a", "Foundation")
        assert get_suggested_dependencies(foundation, [foundation]) == []
