"""CLI entry point for the sprint scheduler."""

import logging
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import SchedulerConfig, load_scheduling_input, load_sprint_date_overrides
from .exceptions import SchedulingError
from .exporters import export_slot_updates_json, get_exporter
from .models import SchedulingInput
from .scheduler import (
    ScheduleResult,
    SprintScheduler,
    build_daily_capacity_map,
    build_slot_updates,
    validate_ticket_sizes,
)

app = typer.Typer(
    name="sprint-scheduler",
    help="Schedule epics and tickets onto capacity-bound sprints",
    add_completion=False,
)
console = Console()


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    csv = "csv"
    excel = "excel"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_input(input_file: Path, max_developers: int | None = None) -> SchedulingInput:
    data = load_scheduling_input(input_file, SchedulerConfig.from_env().default_max_developers)
    if max_developers is not None:
        data = replace(data, max_developers=max_developers)
    return data


def _build_scheduler(overrides: Path | None, auto_adjust: bool) -> SprintScheduler:
    config = SchedulerConfig(
        timezone=SchedulerConfig.from_env().timezone, auto_adjust_dates=auto_adjust
    )
    date_overrides = load_sprint_date_overrides(overrides) if overrides else []
    return SprintScheduler(config=config, date_overrides=date_overrides)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def schedule(
    input_file: Annotated[
        Path,
        typer.Argument(help="Scheduling input JSON file", exists=True, readable=True),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output file or directory path"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.json,
    overrides: Annotated[
        Optional[Path],
        typer.Option("--overrides", help="Sprint date overrides JSON file", exists=True),
    ] = None,
    max_developers: Annotated[
        Optional[int],
        typer.Option("--max-developers", min=1, help="Default daily capacity"),
    ] = None,
    auto_adjust: Annotated[
        bool,
        typer.Option(
            "--auto-adjust/--no-auto-adjust",
            help="Shift late sprint starts and early sprint ends",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Generate a timeline for the epics in an input file."""
    _configure_logging(verbose)

    try:
        data = _load_input(input_file, max_developers)
        scheduler = _build_scheduler(overrides, auto_adjust)
        with console.status("[bold green]Scheduling tickets..."):
            result = scheduler.schedule(data)
    except SchedulingError as e:
        _fail(e)

    console.print(f"\n[bold]Schedule Results for:[/bold] {input_file.name}")
    console.print(f"  Sprints used: {len(result.sprints)}")
    console.print(f"  Scheduled tickets: {len(result.scheduled_tickets)}")
    console.print(f"  Total dev days: {result.total_dev_days}")
    console.print(
        f"  Timeline: {result.project_start_date} -> {result.project_end_date} "
        f"({result.total_days} work days)"
    )

    _show_epics(result)

    if result.unscheduled_tickets:
        console.print(
            f"\n[bold yellow]Unscheduled tickets ({len(result.unscheduled_tickets)}):[/bold yellow]"
        )
        for item in result.unscheduled_tickets[:10]:
            console.print(f"  [yellow]- {item.ticket_key}: {item.details}[/yellow]")
        if len(result.unscheduled_tickets) > 10:
            console.print(
                f"  [yellow]... and {len(result.unscheduled_tickets) - 10} more[/yellow]"
            )

    if result.overbooked_days:
        console.print(
            f"\n[bold yellow]Warning:[/bold yellow] capacity overbooked on "
            f"{len(result.overbooked_days)} day(s)"
        )

    if output:
        exporter = get_exporter(format.value)

        if format == OutputFormat.csv:
            # CSV exports to directory
            output_path = output if not output.suffix else output.parent / output.stem
        else:
            suffix = ".xlsx" if format == OutputFormat.excel else ".json"
            output_path = output if output.suffix else output.with_suffix(suffix)

        with console.status(f"[bold green]Exporting to {format.value}..."):
            exporter.export(result, output_path)

        console.print(f"\n[bold green]✓[/bold green] Exported to: {output_path}")


@app.command()
def validate(
    input_file: Annotated[
        Path,
        typer.Argument(help="Scheduling input JSON file"),
    ],
) -> None:
    """Check an input file for problems that would stop scheduling."""
    if not input_file.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {input_file}")
        raise typer.Exit(1)

    try:
        data = _load_input(input_file)
    except SchedulingError as e:
        _fail(e)

    errors = []
    warnings = []

    config = SchedulerConfig.from_env()
    try:
        validate_ticket_sizes(data.tickets, config.max_ticket_dev_days)
    except SchedulingError as e:
        errors.append(str(e))

    try:
        sprints = SprintScheduler(config).prepare_sprints(data)
    except SchedulingError as e:
        errors.append(str(e))
        sprints = []

    epic_keys = {e.key for e in data.epics}
    ticket_epics = {t.key: t.epic_key for t in data.tickets}
    for ticket in data.tickets:
        if ticket.epic_key not in epic_keys:
            warnings.append(f"{ticket.key}: epic {ticket.epic_key} is not in the input")
        if ticket.is_missing_estimate:
            warnings.append(f"{ticket.key}: estimate is missing (defaulted to {ticket.dev_days}d)")
        for blocker in sorted(ticket.blocked_by):
            if ticket_epics.get(blocker) != ticket.epic_key:
                warnings.append(f"{ticket.key}: blocker {blocker} is outside its epic and is ignored")

    console.print(f"\n[bold]Validation Results for:[/bold] {input_file.name}")

    if errors:
        console.print("[bold red]✗ Input has issues[/bold red]")
    else:
        console.print("[bold green]✓ Input is valid[/bold green]")

    console.print(f"\n  Epics: {len(data.epics)}")
    console.print(f"  Tickets: {len(data.tickets)}")
    console.print(f"  Sprints with capacity: {len(sprints)} of {len(data.sprints)}")

    if errors:
        console.print(f"\n[bold red]Errors ({len(errors)}):[/bold red]")
        for error in errors:
            console.print(f"  [red]• {error}[/red]")

    if warnings:
        console.print(f"\n[bold yellow]Warnings ({len(warnings)}):[/bold yellow]")
        for warning in warnings:
            console.print(f"  [yellow]• {warning}[/yellow]")

    if errors:
        raise typer.Exit(1)


@app.command()
def capacity(
    input_file: Annotated[
        Path,
        typer.Argument(help="Scheduling input JSON file", exists=True, readable=True),
    ],
    overrides: Annotated[
        Optional[Path],
        typer.Option("--overrides", help="Sprint date overrides JSON file", exists=True),
    ] = None,
    max_developers: Annotated[
        Optional[int],
        typer.Option("--max-developers", min=1, help="Default daily capacity"),
    ] = None,
) -> None:
    """Show the per-day capacity available before any ticket is placed."""
    try:
        data = _load_input(input_file, max_developers)
        sprints = _build_scheduler(overrides, auto_adjust=False).prepare_sprints(data)
    except SchedulingError as e:
        _fail(e)

    capacity_map = build_daily_capacity_map(sprints, data.max_developers, data.sprint_capacities)
    sprint_names = {s.id: s.name for s in sprints}

    table = Table(title=f"Capacity ({len(capacity_map)} work days)")
    table.add_column("Day", style="cyan")
    table.add_column("Date", style="blue")
    table.add_column("Sprint", style="magenta")
    table.add_column("Capacity", style="green")

    for index, day in enumerate(capacity_map):
        table.add_row(
            str(index),
            day.date.isoformat(),
            sprint_names.get(day.sprint_id, str(day.sprint_id)),
            str(day.original_capacity),
        )

    console.print(table)
    total = sum(day.original_capacity for day in capacity_map)
    console.print(f"\n  Total capacity: {total} dev days")


@app.command("slot-plan")
def slot_plan(
    input_file: Annotated[
        Path,
        typer.Argument(help="Scheduling input JSON file", exists=True, readable=True),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output JSON file path"),
    ] = None,
    all_sprints: Annotated[
        bool,
        typer.Option("--all-sprints", help="Include tickets placed in active or closed sprints"),
    ] = False,
    overrides: Annotated[
        Optional[Path],
        typer.Option("--overrides", help="Sprint date overrides JSON file", exists=True),
    ] = None,
) -> None:
    """Show which sprint and planned dates each ticket should be given."""
    try:
        data = _load_input(input_file)
        result = _build_scheduler(overrides, auto_adjust=False).schedule(data)
    except SchedulingError as e:
        _fail(e)

    updates = build_slot_updates(result, future_only=not all_sprints)

    table = Table(title=f"Slot plan ({len(updates)} tickets)")
    table.add_column("Ticket", style="cyan")
    table.add_column("Epic", style="blue")
    table.add_column("Sprint", style="magenta")
    table.add_column("Start", style="green")
    table.add_column("End", style="green")
    table.add_column("Moves", style="yellow")

    for update in updates:
        table.add_row(
            update.ticket_key,
            update.epic_key,
            update.new_sprint_name,
            update.planned_start_date.isoformat(),
            update.planned_end_date.isoformat(),
            "yes" if update.has_sprint_change else "",
        )

    console.print(table)

    if output:
        output_path = output if output.suffix == ".json" else output.with_suffix(".json")
        export_slot_updates_json(updates, output_path)
        console.print(f"\n[bold green]✓[/bold green] Slot plan exported to: {output_path}")


def _show_epics(result: ScheduleResult) -> None:
    """Show scheduled epics in a table."""
    if not result.epics:
        return

    table = Table(title="Epics")
    table.add_column("Epic", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Tickets", style="green")
    table.add_column("Dev Days", style="green")
    table.add_column("Days", style="blue")
    table.add_column("Critical Path", style="yellow", max_width=50)

    for epic in result.epics:
        table.add_row(
            epic.key,
            epic.epic.commit_type.value,
            str(len(epic.tickets)),
            str(epic.total_dev_days),
            f"{epic.start_day}-{epic.end_day}",
            " -> ".join(epic.critical_path),
        )

    console.print(table)


if __name__ == "__main__":
    app()
