"""Tests for task validation and cycle detection."""

from sitesched.models import index_tasks
from sitesched.schedule.validator import (
    detect_circular_dependency,
    validate_schedule,
    validate_task,
)
from tests.conftest import make_task


class TestValidateTask:
    """Test per-task validation errors."""

    def test_valid_task(self) -> None:
        task = make_task("a", progress=50)
        result = validate_task(task, [task])
        assert result.valid
        assert result.errors == []

    def test_start_after_end(self) -> None:
        task = make_task("a", start="2025-03-10", end="2025-03-01")
        result = validate_task(task, [task])
        assert not result.valid
        assert result.errors == ["Start date must be before end date"]

    def test_same_day_is_valid(self) -> None:
        task = make_task("a", start="2025-03-10", end="2025-03-10")
        assert validate_task(task, [task]).valid

    def test_invalid_dates(self) -> None:
        task = make_task("a", start=None, end=None)
        result = validate_task(task, [task])
        assert result.errors == ["Invalid start date", "Invalid end date"]

    def test_progress_out_of_range(self) -> None:
        for progress in (-1, 101):
            task = make_task("a", progress=progress)
            assert validate_task(task, [task]).errors == ["Progress must be between 0 and 100"]

    def test_two_task_cycle_rejected(self) -> None:
        a = make_task("a", depends_on=("b",))
        b = make_task("b", depends_on=("a",))
        result = validate_task(a, [a, b])
        assert not result.valid
        assert result.errors == ["Circular dependency detected"]

    def test_errors_collected_in_order(self) -> None:
        a = make_task("a", start="2025-03-10", end="2025-03-01", progress=150, depends_on=("a",))
        assert validate_task(a, [a]).errors == [
            "Start date must be before end date",
            "Circular dependency detected",
            "Progress must be between 0 and 100",
        ]


class TestDetectCircularDependency:
    """Test depth-first cycle detection."""

    def test_acyclic_chain(self) -> None:
        tasks = [
            make_task("a"),
            make_task("b", depends_on=("a",)),
            make_task("c", depends_on=("b",)),
        ]
        assert not detect_circular_dependency(tasks[2], index_tasks(tasks))

    def test_diamond_is_not_a_cycle(self) -> None:
        """Two branches reaching the same task must not look like a cycle."""
        tasks = [
            make_task("a"),
            make_task("b", depends_on=("a",)),
            make_task("c", depends_on=("a",)),
            make_task("d", depends_on=("b", "c")),
        ]
        assert not detect_circular_dependency(tasks[3], index_tasks(tasks))

    def test_self_dependency(self) -> None:
        a = make_task("a", depends_on=("a",))
        assert detect_circular_dependency(a, index_tasks([a]))

    def test_three_task_cycle(self) -> None:
        tasks = [
            make_task("a", depends_on=("c",)),
            make_task("b", depends_on=("a",)),
            make_task("c", depends_on=("b",)),
        ]
        index = index_tasks(tasks)
        assert all(detect_circular_dependency(t, index) for t in tasks)

    def test_task_depending_on_a_cycle(self) -> None:
        """A task whose dependency chain runs into a cycle is reported too."""
        tasks = [
            make_task("a", depends_on=("b",)),
            make_task("b", depends_on=("a",)),
            make_task("c", depends_on=("a",)),
        ]
        assert detect_circular_dependency(tasks[2], index_tasks(tasks))

    def test_missing_dependency_ignored(self) -> None:
        a = make_task("a", depends_on=("ghost",))
        assert not detect_circular_dependency(a, index_tasks([a]))


class TestValidateSchedule:
    """Test whole-schedule validation."""

    def test_keyed_by_task_id(self) -> None:
        tasks = [
            make_task("a"),
            make_task("b", start="2025-03-10", end="2025-03-01"),
        ]
        results = validate_schedule(tasks)

        assert list(results) == ["a", "b"]
        assert results["a"].valid
        assert not results["b"].valid
