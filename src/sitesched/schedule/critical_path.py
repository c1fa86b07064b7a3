"""Critical path computation via topological sort and forward/backward passes."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sitesched.exceptions import CircularDependencyError, MissingReferenceError
from sitesched.logger import debug_enabled, get_logger
from sitesched.models import index_tasks

from .calculations import task_duration

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sitesched.models import Task

logger = get_logger()

# Tasks whose slack is below this are critical
SLACK_TOLERANCE = 0.01


@dataclass(frozen=True)
class TaskTiming:
    """Forward/backward pass values for one task, in days from project start."""

    earliest_start: int
    earliest_finish: int
    latest_start: int
    latest_finish: int

    @property
    def slack(self) -> int:
        return self.latest_start - self.earliest_start


def _default_timings() -> dict[str, TaskTiming]:
    return {}


def _default_str_list() -> list[str]:
    return []


def _default_unresolved() -> dict[str, list[str]]:
    return {}


@dataclass
class CriticalPathResult:
    """Everything the critical path pass learned about a task set."""

    critical_task_ids: list[str] = field(default_factory=_default_str_list)
    timings: dict[str, TaskTiming] = field(default_factory=_default_timings)
    project_length: int = 0
    cyclic_task_ids: list[str] = field(default_factory=_default_str_list)
    unresolved_dependencies: dict[str, list[str]] = field(default_factory=_default_unresolved)
    undated_task_ids: list[str] = field(default_factory=_default_str_list)

    @property
    def is_complete(self) -> bool:
        """True when every dated task took part in both passes."""
        return not self.cyclic_task_ids


class CriticalPathAnalyzer:
    """Finds the zero-slack tasks of a schedule.

    The graph uses only dependency identity and each task's own inclusive
    duration; the tasks' calendar dates are otherwise ignored.

    Tasks with unknown dates and dependency references that do not resolve to
    a dated task are left out of the graph. Tasks on a dependency cycle, and
    tasks downstream of one, never reach in-degree zero; they are reported in
    ``cyclic_task_ids`` and never marked critical. With ``strict=True`` either
    problem raises instead.
    """

    def __init__(self, *, strict: bool = False):
        self.strict = strict

    def analyze(self, tasks: Sequence[Task]) -> CriticalPathResult:
        """Run both passes over ``tasks`` and classify each task."""
        result = CriticalPathResult()
        if not tasks:
            return result

        task_dict = index_tasks(tasks)
        durations: dict[str, int] = {}
        for task_id, task in task_dict.items():
            duration = task_duration(task)
            if duration is None:
                result.undated_task_ids.append(task_id)
            else:
                durations[task_id] = duration

        predecessors, successors = self._build_graph(task_dict, durations, result)

        # Phase 1: Topological sort
        topo_order = self._topological_sort(durations, predecessors, successors)
        ordered = set(topo_order)
        result.cyclic_task_ids = [task_id for task_id in durations if task_id not in ordered]
        if result.cyclic_task_ids:
            logger.warning(
                f"Dependency cycle: {', '.join(result.cyclic_task_ids)} excluded from critical path"
            )
            if self.strict:
                raise CircularDependencyError(result.cyclic_task_ids)
        logger.debug(f"Topological order: {topo_order}")

        # Phase 2: Forward pass
        earliest_start: dict[str, int] = {}
        earliest_finish: dict[str, int] = {}
        for task_id in topo_order:
            start = max((earliest_finish[p] for p in predecessors[task_id]), default=0)
            earliest_start[task_id] = start
            earliest_finish[task_id] = start + durations[task_id]

        project_end = max(earliest_finish.values(), default=0)
        result.project_length = project_end

        # Phase 3: Backward pass
        latest_start, latest_finish = self._backward_pass(
            topo_order, durations, successors, project_end
        )

        for task_id in topo_order:
            timing = TaskTiming(
                earliest_start=earliest_start[task_id],
                earliest_finish=earliest_finish[task_id],
                latest_start=latest_start[task_id],
                latest_finish=latest_finish[task_id],
            )
            result.timings[task_id] = timing
            if debug_enabled():
                logger.debug(
                    f"  {task_id}: ES={timing.earliest_start} EF={timing.earliest_finish} "
                    f"LS={timing.latest_start} LF={timing.latest_finish} slack={timing.slack}"
                )

        result.critical_task_ids = [
            task_id
            for task_id in durations
            if task_id in result.timings and abs(result.timings[task_id].slack) < SLACK_TOLERANCE
        ]
        logger.changes(f"Critical path: {' -> '.join(result.critical_task_ids) or '(none)'}")
        return result

    def _build_graph(
        self,
        task_dict: dict[str, Task],
        durations: dict[str, int],
        result: CriticalPathResult,
    ) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
        """Build predecessor (depends-on) and successor (dependents) edges between dated tasks."""
        predecessors: dict[str, list[str]] = {task_id: [] for task_id in durations}
        successors: dict[str, list[str]] = {task_id: [] for task_id in durations}

        for task_id in durations:
            for dep_id in task_dict[task_id].dependency_ids:
                if dep_id not in durations:
                    result.unresolved_dependencies.setdefault(task_id, []).append(dep_id)
                    continue
                predecessors[task_id].append(dep_id)
                successors[dep_id].append(task_id)

        for task_id, missing in result.unresolved_dependencies.items():
            logger.warning(
                f"Task {task_id} depends on unknown or undated task(s): {', '.join(missing)}"
            )
        if self.strict and result.unresolved_dependencies:
            task_id, missing = next(iter(result.unresolved_dependencies.items()))
            raise MissingReferenceError(task_id, missing[0])

        return predecessors, successors

    def _topological_sort(
        self,
        durations: dict[str, int],
        predecessors: dict[str, list[str]],
        successors: dict[str, list[str]],
    ) -> list[str]:
        """Kahn's algorithm. Tasks on or behind a cycle are left out of the result."""
        in_degree = {task_id: len(predecessors[task_id]) for task_id in durations}
        queue = deque(task_id for task_id, degree in in_degree.items() if degree == 0)
        order: list[str] = []

        while queue:
            task_id = queue.popleft()
            order.append(task_id)
            for successor in successors[task_id]:
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    queue.append(successor)

        return order

    def _backward_pass(
        self,
        topo_order: list[str],
        durations: dict[str, int],
        successors: dict[str, list[str]],
        project_end: int,
    ) -> tuple[dict[str, int], dict[str, int]]:
        """Latest start/finish for each sorted task, seeded from the project end.

        Tasks with no dependents finish at the project end. Any other task
        finishes by the earliest latest-start of its dependents; a dependent
        that was never sorted (cyclic) contributes nothing, so the bound falls
        back to the project end.
        """
        latest_start: dict[str, int] = {}
        latest_finish: dict[str, int] = {}

        for task_id in reversed(topo_order):
            finish = project_end
            for successor in successors[task_id]:
                if successor in latest_start:
                    finish = min(finish, latest_start[successor])
            latest_finish[task_id] = finish
            latest_start[task_id] = finish - durations[task_id]

        return latest_start, latest_finish


def calculate_critical_path(tasks: Sequence[Task]) -> list[str]:
    """IDs of tasks with zero slack, in input order."""
    return CriticalPathAnalyzer().analyze(tasks).critical_task_ids
