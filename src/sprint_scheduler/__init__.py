"""Sprint Scheduler - capacity-aware timeline planning for epics and tickets.

This module schedules the tickets of a set of epics onto sprints. Each work
day has a developer capacity; tickets are ordered by their blockers within an
epic and placed tier by tier (commit, stretch, none), producing planned
dates, per-epic critical paths and a write-back plan for the issue tracker.

Example usage:
    from sprint_scheduler import load_scheduling_input, schedule_tickets

    data = load_scheduling_input("input.json")
    result = schedule_tickets(data)

    print(f"Project end: {result.project_end_date}")
    for epic in result.epics:
        print(f"{epic.key} | days {epic.start_day}-{epic.end_day} | {epic.critical_path}")

    # Export to Excel
    from sprint_scheduler.exporters import ExcelExporter
    exporter = ExcelExporter()
    exporter.export(result, "schedule.xlsx")
"""

from .config import ConfigLoader, SchedulerConfig, load_scheduling_input
from .exceptions import (
    InvalidDateError,
    InvalidInputError,
    NoValidSprintsError,
    OversizedTicketError,
    SchedulingError,
)
from .exporters import CSVExporter, ExcelExporter, JSONExporter, get_exporter
from .models import (
    CommitType,
    DailyCapacityOverride,
    Epic,
    SchedulingInput,
    Sprint,
    SprintCapacity,
    SprintDateOverride,
    SprintState,
    Ticket,
)
from .scheduler import ScheduleResult, SprintScheduler, build_slot_updates, schedule_tickets

__version__ = "0.1.0"

__all__ = [
    # Main scheduler
    "SprintScheduler",
    "schedule_tickets",
    "build_slot_updates",
    # Configuration
    "ConfigLoader",
    "SchedulerConfig",
    "load_scheduling_input",
    # Models
    "CommitType",
    "DailyCapacityOverride",
    "Epic",
    "ScheduleResult",
    "SchedulingInput",
    "Sprint",
    "SprintCapacity",
    "SprintDateOverride",
    "SprintState",
    "Ticket",
    # Exporters
    "JSONExporter",
    "CSVExporter",
    "ExcelExporter",
    "get_exporter",
    # Exceptions
    "SchedulingError",
    "OversizedTicketError",
    "NoValidSprintsError",
    "InvalidInputError",
    "InvalidDateError",
]
