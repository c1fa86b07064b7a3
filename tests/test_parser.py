"""Tests for schedule YAML parsing and line item materialization."""

from datetime import date
from pathlib import Path
from typing import Any

import pytest

from sitesched.config import MaterializeConfig, SiteschedConfig
from sitesched.exceptions import ParseError, ValidationError
from sitesched.models import TaskDependency
from sitesched.parser import ScheduleParser, load_schedule
from tests.conftest import TODAY

SCHEDULE_YAML = """
project:
  name: Maple St Remodel
  start_date: 2025-03-01

estimate:
  line_items:
    li-frame:
      description: Framing
      category: labor
      scheduled_start_date: 2025-03-03
      scheduled_end_date: 2025-03-14
      total_cost: 12000
      actual_cost: 6000
    li-drywall:
      description: Drywall Install
      category: labor
      scheduled_start_date: 2025-03-17
      scheduled_end_date: 2025-03-26
      dependencies: li-frame
      progress: 20
      payee_id: sub-1
      payee_name: Wallboard Bros

change_orders:
  - number: 2
    line_items:
      co-outlets:
        description: Extra outlets
        category: electrical
        scheduled_start_date: 2025-03-20
        scheduled_end_date: 2025-03-21
        dependencies:
          - task_id: li-drywall
            task_name: Drywall Install
"""


def _parse(data: dict[str, Any], **kwargs: Any) -> list:
    return ScheduleParser(today=TODAY, **kwargs).parse_data(data).tasks


def _item(**fields: Any) -> dict[str, Any]:
    return {"description": "Task", **fields}


class TestParseFile:
    """Test loading schedule files from disk."""

    def test_full_schedule(self, tmp_path: Path) -> None:
        path = tmp_path / "schedule.yaml"
        path.write_text(SCHEDULE_YAML)
        schedule = load_schedule(path, today=TODAY)

        assert schedule.project_name == "Maple St Remodel"
        assert schedule.project_start == date(2025, 3, 1)
        assert [t.id for t in schedule.tasks] == ["li-frame", "li-drywall", "co-outlets"]

        frame = schedule.tasks[0]
        assert frame.start == date(2025, 3, 3)
        assert frame.end == date(2025, 3, 14)
        assert frame.progress == 50
        assert not frame.is_change_order

        drywall = schedule.get_task("li-drywall")
        assert drywall is not None
        assert drywall.dependency_ids == ["li-frame"]
        assert drywall.progress == 20
        assert drywall.payee_name == "Wallboard Bros"

    def test_change_order_tasks(self, tmp_path: Path) -> None:
        path = tmp_path / "schedule.yaml"
        path.write_text(SCHEDULE_YAML)
        outlets = load_schedule(path, today=TODAY).tasks[2]

        assert outlets.name == "CO-2: Extra outlets"
        assert outlets.is_change_order
        assert outlets.change_order_number == "2"
        assert outlets.dependencies == [
            TaskDependency(task_id="li-drywall", task_name="Drywall Install")
        ]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="File not found") as exc_info:
            load_schedule(tmp_path / "nope.yaml")
        assert exc_info.value.path == tmp_path / "nope.yaml"

    def test_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "schedule.yaml"
        path.write_text("estimate: [unclosed\n")
        with pytest.raises(ParseError, match="Failed to parse YAML"):
            load_schedule(path)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "schedule.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ParseError, match="dictionary"):
            load_schedule(path)

    def test_invalid_structure(self) -> None:
        with pytest.raises(ValidationError, match="Invalid schedule structure"):
            _parse({"estimate": {"line_items": {"a": {"category": "labor"}}}})


class TestMaterialization:
    """Test line item to task conversion rules."""

    def test_missing_start_uses_project_start(self) -> None:
        data = {
            "project": {"start_date": date(2025, 4, 1)},
            "estimate": {"line_items": {"a": _item()}},
        }
        task = _parse(data)[0]
        assert task.start == date(2025, 4, 1)
        assert task.end == date(2025, 4, 8)

    def test_missing_start_without_project_start_uses_today(self) -> None:
        task = _parse({"estimate": {"line_items": {"a": _item()}}})[0]
        assert task.start == TODAY

    def test_default_duration_from_config(self) -> None:
        config = SiteschedConfig(materialize=MaterializeConfig(default_duration_days=3))
        data = {"estimate": {"line_items": {"a": _item(scheduled_start_date="2025-03-03")}}}
        task = _parse(data, config=config)[0]
        assert task.end == date(2025, 3, 6)

    def test_missing_end_is_a_week_after_start(self) -> None:
        """With the default duration a Monday start ends the following Monday."""
        data = {"estimate": {"line_items": {"a": _item(scheduled_start_date="2025-03-03")}}}
        task = _parse(data)[0]
        assert task.end == date(2025, 3, 10)

    def test_unparseable_date_becomes_none(self, caplog: pytest.LogCaptureFixture) -> None:
        data = {
            "estimate": {
                "line_items": {
                    "a": _item(scheduled_start_date="TBD", scheduled_end_date="2025-03-10")
                }
            }
        }
        task = _parse(data)[0]

        assert task.start is None
        assert task.end == date(2025, 3, 10)
        assert "unparseable" in caplog.text

    def test_unparseable_start_leaves_end_unknown(self) -> None:
        data = {"estimate": {"line_items": {"a": _item(scheduled_start_date="soon")}}}
        task = _parse(data)[0]
        assert task.start is None
        assert task.end is None

    def test_timestamp_strings_accepted(self) -> None:
        data = {
            "estimate": {
                "line_items": {
                    "a": _item(
                        scheduled_start_date="2025-03-03T08:00:00Z",
                        scheduled_end_date="2025-03-04T17:00:00Z",
                    )
                }
            }
        }
        task = _parse(data)[0]
        assert (task.start, task.end) == (date(2025, 3, 3), date(2025, 3, 4))

    def test_dependency_forms(self) -> None:
        data = {
            "estimate": {
                "line_items": {
                    "a": _item(dependencies=None),
                    "b": _item(dependencies="a"),
                    "c": _item(dependencies=["a", "b"]),
                    "d": _item(dependencies=[{"task_id": "c", "task_name": "Task"}]),
                }
            }
        }
        tasks = _parse(data)
        assert [t.dependency_ids for t in tasks] == [[], ["a"], ["a", "b"], ["c"]]

    def test_progress_from_cost_when_absent(self) -> None:
        data = {
            "estimate": {
                "line_items": {
                    "a": _item(total_cost=1000, actual_cost=250),
                    "b": _item(total_cost=1000, actual_cost=250, progress=90),
                    "c": _item(),
                }
            }
        }
        assert [t.progress for t in _parse(data)] == [25, 90, 0]

    def test_empty_file_sections(self) -> None:
        schedule = ScheduleParser(today=TODAY).parse_data({})
        assert schedule.project_name == "Untitled Project"
        assert schedule.tasks == []
