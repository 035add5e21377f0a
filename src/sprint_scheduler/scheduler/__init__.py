"""Sprint scheduling engine.

This package turns epics, tickets and sprints into a timeline. Tickets are
leveled by their blockers, placed greedily onto a per-day capacity map built
from the sprints, and each epic's heaviest dependency chain is marked as its
critical path.

Main classes:
- SprintScheduler: Runs one scheduling pass over a SchedulingInput
- CapacityMap: Ordered work days with remaining capacity
- GreedyPlacer: Linear (commit) and fill (stretch/none) placement

Usage:
    from sprint_scheduler.scheduler import SprintScheduler

    scheduler = SprintScheduler()
    result = scheduler.schedule(data)
"""

from .algorithm import SprintScheduler, create_scheduler, schedule_tickets
from .capacity import CapacityMap, build_daily_capacity_map, select_sprints_with_capacity
from .critical_path import build_scheduled_epics, find_critical_path
from .dependencies import LeveledTicket, level_epic_tickets, uncertainty_flags
from .models import (
    DayCapacity,
    DayCapacityInfo,
    ScheduledEpic,
    ScheduledTicket,
    ScheduleResult,
    SlotUpdate,
    SprintWithCapacity,
    UnscheduledReason,
    UnscheduledTicket,
)
from .placement import GreedyPlacer, sort_epics, validate_ticket_sizes
from .writeback import build_slot_updates, group_by_sprint

__all__ = [
    # Main scheduler
    "SprintScheduler",
    "create_scheduler",
    "schedule_tickets",
    # Engine stages
    "CapacityMap",
    "GreedyPlacer",
    "LeveledTicket",
    "build_daily_capacity_map",
    "build_scheduled_epics",
    "find_critical_path",
    "level_epic_tickets",
    "select_sprints_with_capacity",
    "sort_epics",
    "uncertainty_flags",
    "validate_ticket_sizes",
    # Models
    "DayCapacity",
    "DayCapacityInfo",
    "ScheduledEpic",
    "ScheduledTicket",
    "ScheduleResult",
    "SlotUpdate",
    "SprintWithCapacity",
    "UnscheduledReason",
    "UnscheduledTicket",
    # Write-back
    "build_slot_updates",
    "group_by_sprint",
]
