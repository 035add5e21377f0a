"""Data models produced by the scheduling engine."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from ..models import Epic, Sprint, SprintState, Ticket


class UnscheduledReason(str, Enum):
    """Reasons why a ticket was left off the timeline."""

    NO_CAPACITY = "no_capacity"
    AFTER_UNPLACED_TICKET = "after_unplaced_ticket"
    OUT_OF_CALENDAR = "out_of_calendar"


@dataclass
class DayCapacity:
    """One work day in the capacity map.

    The only mutable record in a run: ``remaining_capacity`` is decremented
    as tickets are placed.
    """

    date: date
    sprint_id: int
    original_capacity: int
    remaining_capacity: int
    sprint_day_index: int

    @property
    def used_capacity(self) -> int:
        return self.original_capacity - self.remaining_capacity


@dataclass(frozen=True)
class DayCapacityInfo:
    """Snapshot of a day's capacity for display."""

    date: date
    day_index: int
    sprint_id: int
    total_capacity: int
    remaining_capacity: int
    used_capacity: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "dayIndex": self.day_index,
            "sprintId": self.sprint_id,
            "totalCapacity": self.total_capacity,
            "remainingCapacity": self.remaining_capacity,
            "usedCapacity": self.used_capacity,
        }


@dataclass(frozen=True)
class SprintWithCapacity:
    """A selected sprint with its capacity configuration and resolved dates."""

    sprint: Sprint
    dev_days_capacity: int
    start: date
    end: date

    @property
    def id(self) -> int:
        return self.sprint.id

    @property
    def name(self) -> str:
        return self.sprint.name

    @property
    def state(self) -> SprintState:
        return self.sprint.state

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.sprint.to_dict(),
            "devDaysCapacity": self.dev_days_capacity,
        }


@dataclass(frozen=True)
class ScheduledTicket:
    """A ticket placed on the timeline.

    Attributes:
        ticket: The source ticket
        start_day: First global day index (inclusive)
        end_day: Global day index after the last day (exclusive)
        sprint_id: Sprint holding the whole span
        start_date: Calendar date of start_day
        end_date: Calendar date of the last occupied day
        parallel_group: Topological level within the epic
        critical_path_weight: Ticket effort plus the weight of its dependents
        is_on_critical_path: Part of the epic's heaviest dependency chain
        is_uncertain: Processed after a ticket with a missing estimate
    """

    ticket: Ticket
    start_day: int
    end_day: int
    sprint_id: int
    start_date: date
    end_date: date
    parallel_group: int = 0
    critical_path_weight: int = 0
    is_on_critical_path: bool = False
    is_uncertain: bool = False

    @property
    def key(self) -> str:
        return self.ticket.key

    @property
    def epic_key(self) -> str:
        return self.ticket.epic_key

    @property
    def dev_days(self) -> int:
        return self.ticket.dev_days

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            **self.ticket.to_dict(),
            "startDay": self.start_day,
            "endDay": self.end_day,
            "sprintId": self.sprint_id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "parallelGroup": self.parallel_group,
            "criticalPathWeight": self.critical_path_weight,
            "isOnCriticalPath": self.is_on_critical_path,
            "isUncertain": self.is_uncertain,
        }


@dataclass(frozen=True)
class ScheduledEpic:
    """An epic with its placed tickets and overall span."""

    epic: Epic
    tickets: list[ScheduledTicket] = field(default_factory=list)
    total_dev_days: int = 0
    start_day: int = 0
    end_day: int = 0

    @property
    def key(self) -> str:
        return self.epic.key

    @property
    def critical_path(self) -> list[str]:
        """Keys of tickets on the critical path, in timeline order."""
        on_path = [t for t in self.tickets if t.is_on_critical_path]
        return [t.key for t in sorted(on_path, key=lambda t: t.start_day)]

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.epic.to_dict(),
            "tickets": [t.to_dict() for t in self.tickets],
            "totalDevDays": self.total_dev_days,
            "startDay": self.start_day,
            "endDay": self.end_day,
        }


@dataclass(frozen=True)
class UnscheduledTicket:
    """A ticket that could not be placed."""

    ticket_key: str
    epic_key: str
    dev_days: int
    reason: UnscheduledReason
    details: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticketKey": self.ticket_key,
            "epicKey": self.epic_key,
            "devDays": self.dev_days,
            "reason": self.reason.value,
            "details": self.details,
        }


@dataclass(frozen=True)
class ScheduleResult:
    """Result of one scheduling run."""

    epics: list[ScheduledEpic]
    sprints: list[SprintWithCapacity]
    daily_capacities: list[DayCapacityInfo]
    project_start_date: date
    project_end_date: date
    total_dev_days: int
    total_days: int
    unscheduled_tickets: list[UnscheduledTicket] = field(default_factory=list)

    @property
    def scheduled_tickets(self) -> list[ScheduledTicket]:
        """All placed tickets across epics."""
        return [t for epic in self.epics for t in epic.tickets]

    @property
    def overbooked_days(self) -> list[int]:
        """Day indexes whose remaining capacity went negative."""
        return [d.day_index for d in self.daily_capacities if d.remaining_capacity < 0]

    def get_ticket(self, key: str) -> ScheduledTicket | None:
        """Find a placed ticket by key."""
        for ticket in self.scheduled_tickets:
            if ticket.key == key:
                return ticket
        return None

    def get_epic(self, key: str) -> ScheduledEpic | None:
        """Find a scheduled epic by key."""
        for epic in self.epics:
            if epic.key == key:
                return epic
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "epics": [e.to_dict() for e in self.epics],
            "sprints": [s.to_dict() for s in self.sprints],
            "dailyCapacities": [d.to_dict() for d in self.daily_capacities],
            "projectStartDate": self.project_start_date.isoformat(),
            "projectEndDate": self.project_end_date.isoformat(),
            "totalDevDays": self.total_dev_days,
            "totalDays": self.total_days,
            "unscheduledTickets": [u.to_dict() for u in self.unscheduled_tickets],
            "overbookedDays": self.overbooked_days,
        }


@dataclass(frozen=True)
class SlotUpdate:
    """A planned sprint/date change to push back to the tracker."""

    ticket_key: str
    epic_key: str
    current_sprint_id: int | None
    new_sprint_id: int
    new_sprint_name: str
    planned_start_date: date
    planned_end_date: date

    @property
    def has_sprint_change(self) -> bool:
        return self.current_sprint_id != self.new_sprint_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticketKey": self.ticket_key,
            "epicKey": self.epic_key,
            "currentSprintId": self.current_sprint_id,
            "sprintId": self.new_sprint_id,
            "sprintName": self.new_sprint_name,
            "plannedStartDate": self.planned_start_date.isoformat(),
            "plannedEndDate": self.planned_end_date.isoformat(),
            "hasSprintChange": self.has_sprint_change,
        }
