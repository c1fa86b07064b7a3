"""Command-line interface for sitesched."""

from __future__ import annotations

import io
from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import ExportSortOrder, SiteschedConfig, discover_config
from .exceptions import SiteschedError
from .export import default_export_filename, export_schedule_by_day, export_schedule_csv
from .logger import VERBOSITY_DEBUG, VERBOSITY_SILENT, setup_logger
from .models import Severity
from .parser import Schedule, load_schedule
from .schedule import (
    CONSTRUCTION_SEQUENCES,
    CriticalPathAnalyzer,
    calculate_project_duration,
    calculate_schedule_variance,
    format_duration,
    generate_schedule_warnings,
    get_ready_to_start_tasks,
    identify_construction_phase,
    is_task_overdue,
    task_duration,
    validate_schedule,
)

app = typer.Typer(
    name="sitesched",
    help="Construction schedule checks - sequencing, critical path and schedule warnings",
    add_completion=False,
)

ScheduleFile = Annotated[Path, typer.Argument(help="Path to the schedule YAML file")]

_SEVERITY_LABELS = {
    Severity.ERROR: "ERROR",
    Severity.WARNING: "WARN ",
    Severity.INFO: "INFO ",
}


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a YYYY-MM-DD option value, exiting with an error if malformed."""
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid {option_name} '{date_str}'. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _load(file: Path) -> tuple[SiteschedConfig, Schedule]:
    """Load config and schedule, turning load errors into a clean exit."""
    try:
        config = discover_config(file)
        schedule = load_schedule(file, config, context.get_as_of_date())
    except (SiteschedError, FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    return config, schedule


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=problems only (default), 1=emitted warnings, "
            "2=every rule check, 3=debug",
            min=VERBOSITY_SILENT,
            max=VERBOSITY_DEBUG,
        ),
    ] = VERBOSITY_SILENT,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: sitesched_config.yaml)",
        ),
    ] = None,
    as_of: Annotated[
        str | None,
        typer.Option(
            "--as-of",
            help="Evaluate the schedule as of this date (YYYY-MM-DD). Defaults to today",
        ),
    ] = None,
) -> None:
    """Global options for sitesched commands."""
    setup_logger(verbose)
    context.reset()
    context.set_config_path(config)
    context.set_as_of_date(_parse_date_option(as_of, "--as-of date"))


@app.command()
def check(
    file: ScheduleFile,
    *,
    fail_on_error: Annotated[
        bool,
        typer.Option("--fail-on-error", help="Exit with status 1 if any error-level warning"),
    ] = False,
) -> None:
    """Report sequencing, overlap, change order, resource and overdue warnings."""
    config, schedule = _load(file)
    today = context.get_as_of_date()
    warnings = generate_schedule_warnings(schedule.tasks, config.warning_settings(), today)

    typer.echo(f"Schedule Warnings: {schedule.project_name} (as of {today.isoformat()})")
    typer.echo("=" * 80)

    if not warnings:
        typer.echo("No schedule warnings.")
        return

    for warning in warnings:
        typer.echo(f"[{_SEVERITY_LABELS[warning.severity]}] {warning.message}")
        if warning.suggestion:
            typer.echo(f"        -> {warning.suggestion}")

    counts = {severity: 0 for severity in Severity}
    for warning in warnings:
        counts[warning.severity] += 1
    typer.echo("")
    typer.echo(
        f"{len(warnings)} warning(s): {counts[Severity.ERROR]} error, "
        f"{counts[Severity.WARNING]} warning, {counts[Severity.INFO]} info"
    )

    if fail_on_error and counts[Severity.ERROR]:
        raise typer.Exit(1)


@app.command()
def validate(file: ScheduleFile) -> None:
    """Check every task's dates, progress and dependency chain."""
    _, schedule = _load(file)
    results = validate_schedule(schedule.tasks)

    invalid = {task_id: result for task_id, result in results.items() if not result.valid}
    if not invalid:
        typer.echo(f"All {len(results)} tasks valid.")
        return

    for task_id, result in invalid.items():
        task = schedule.get_task(task_id)
        label = f"{task.name} ({task_id})" if task else task_id
        typer.echo(f"{label}: {'; '.join(result.errors)}")
    typer.echo(f"\n{len(invalid)} of {len(results)} tasks invalid.", err=True)
    raise typer.Exit(1)


@app.command("critical-path")
def critical_path(file: ScheduleFile) -> None:
    """Show the zero-slack tasks that determine the project length."""
    _, schedule = _load(file)
    result = CriticalPathAnalyzer().analyze(schedule.tasks)

    typer.echo("Critical Path")
    typer.echo("=" * 80)
    for task_id in result.critical_task_ids:
        task = schedule.get_task(task_id)
        timing = result.timings[task_id]
        name = task.name if task else task_id
        typer.echo(
            f"{name} ({task_id})  day {timing.earliest_start + 1}-{timing.earliest_finish}"
        )

    typer.echo("")
    typer.echo(f"Critical path length: {format_duration(result.project_length)}")
    typer.echo(f"Scheduled span: {format_duration(calculate_project_duration(schedule.tasks))}")

    if result.cyclic_task_ids:
        typer.echo(
            f"Warning: tasks on or after a dependency cycle were skipped: "
            f"{', '.join(result.cyclic_task_ids)}",
            err=True,
        )
    if result.undated_task_ids:
        typer.echo(
            f"Warning: tasks without valid dates were skipped: "
            f"{', '.join(result.undated_task_ids)}",
            err=True,
        )


@app.command()
def status(file: ScheduleFile) -> None:
    """Show duration, progress and schedule variance for each task."""
    _, schedule = _load(file)
    today = context.get_as_of_date()

    typer.echo(f"Schedule Status: {schedule.project_name} (as of {today.isoformat()})")
    typer.echo("=" * 80)
    for task in schedule.tasks:
        duration = task_duration(task)
        variance = calculate_schedule_variance(task, today)
        typer.echo(f"{task.name} ({task.id})")
        typer.echo(f"  Dates:    {task.start or '?'} to {task.end or '?'}")
        typer.echo(f"  Duration: {format_duration(duration) if duration else 'unknown'}")
        typer.echo(f"  Progress: {task.progress}%")
        if variance is None:
            typer.echo("  Variance: unknown")
        elif variance > 0:
            typer.echo(f"  Variance: {variance} day(s) behind")
        else:
            typer.echo(f"  Variance: {-variance} day(s) ahead")
        if is_task_overdue(task, today):
            typer.echo("  OVERDUE")

    ready = get_ready_to_start_tasks(schedule.tasks, today)
    typer.echo("")
    typer.echo("Ready to start:")
    for task in ready:
        typer.echo(f"  - {task.name} ({task.id})")
    if not ready:
        typer.echo("  (none)")


@app.command()
def phase(
    description: Annotated[str, typer.Argument(help="Task description to classify")],
) -> None:
    """Classify a task description into a construction phase and show its rules."""
    found = identify_construction_phase(description)
    if found is None:
        typer.echo(f"No known construction phase for '{description}'.")
        return

    rule = CONSTRUCTION_SEQUENCES[found]
    typer.echo(f"Phase: {found.value}")
    if rule.typical_duration is not None:
        typer.echo(f"Typical duration: {format_duration(rule.typical_duration)}")
    typer.echo(f"Requires inspection: {'yes' if rule.requires_inspection else 'no'}")
    if rule.after:
        typer.echo(f"Comes after: {', '.join(p.value for p in rule.after)}")
    if rule.before:
        typer.echo(f"Comes before: {', '.join(p.value for p in rule.before)}")


@app.command()
def export(
    file: ScheduleFile,
    *,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output", "-o", help="Output CSV path (default: <project>_schedule_<date>.csv)"
        ),
    ] = None,
    by_day: Annotated[
        bool,
        typer.Option("--by-day", help="Export one row per day with the tasks active on it"),
    ] = False,
    sort_by: Annotated[
        ExportSortOrder | None,
        typer.Option("--sort-by", help="Row order for the task list. Overrides config"),
    ] = None,
) -> None:
    """Export the schedule to CSV."""
    config, schedule = _load(file)
    options = config.export
    if sort_by is not None:
        options = options.model_copy(update={"sort_by": sort_by})

    buffer = io.StringIO()
    if by_day:
        written = export_schedule_by_day(schedule.tasks, schedule.project_name, buffer)
    else:
        written = export_schedule_csv(schedule.tasks, schedule.project_name, options, buffer)

    if not written:
        typer.echo("No tasks to export.", err=True)
        return

    target = output or Path(
        default_export_filename(schedule.project_name, context.get_as_of_date(), by_day=by_day)
    )
    target.write_text(buffer.getvalue(), encoding="utf-8")
    typer.echo(f"Schedule exported to {target}")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
