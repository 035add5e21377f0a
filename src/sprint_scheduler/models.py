"""Data models for scheduling input.

These mirror the records delivered by the issue tracker once field mapping
and defaulting are done. Keys in ``from_dict``/``to_dict`` follow the
camelCase engine contract (``epicKey``, ``devDays``, ``blockedBy``...).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

from .constants import DEFAULT_MAX_DEVELOPERS
from .exceptions import InvalidInputError


class CommitType(str, Enum):
    """Scheduling priority tier of an epic."""

    COMMIT = "commit"
    STRETCH = "stretch"
    NONE = "none"


# Tiers are processed strictly in this order
TIER_ORDER = [CommitType.COMMIT, CommitType.STRETCH, CommitType.NONE]


class SprintState(str, Enum):
    """Sprint lifecycle state."""

    ACTIVE = "active"
    CLOSED = "closed"
    FUTURE = "future"


def _require(data: dict[str, Any], name: str, item: str | None = None) -> Any:
    """Get a required key or raise InvalidInputError."""
    if name not in data or data[name] is None:
        raise InvalidInputError("missing required value", field=name, item=item)
    return data[name]


def _as_int(value: Any, name: str, item: str | None = None) -> int:
    """Coerce integral values (including 3.0) to int."""
    if isinstance(value, bool):
        raise InvalidInputError(f"expected an integer, got {value!r}", field=name, item=item)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(
            f"expected an integer, got {value!r}", field=name, item=item
        ) from None
    if not number.is_integer():
        raise InvalidInputError(f"expected an integer, got {value!r}", field=name, item=item)
    return int(number)


@dataclass(frozen=True)
class Epic:
    """A grouping of tickets representing one initiative.

    Attributes:
        key: Issue key, e.g. "PROJ-1"
        summary: Epic title
        status: Tracker status name
        commit_type: Scheduling tier (commit/stretch/none)
        priority_override: Lower is scheduled earlier; wins over size ordering
    """

    key: str
    summary: str = ""
    status: str = ""
    commit_type: CommitType = CommitType.COMMIT
    priority_override: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create an Epic from a contract dictionary."""
        key = str(_require(data, "key"))
        raw_type = data.get("commitType") or CommitType.COMMIT.value
        try:
            commit_type = CommitType(raw_type)
        except ValueError:
            raise InvalidInputError(
                f"unknown commit type {raw_type!r}", field="commitType", item=key
            ) from None
        override = data.get("priorityOverride")
        return cls(
            key=key,
            summary=data.get("summary", ""),
            status=data.get("status", ""),
            commit_type=commit_type,
            priority_override=(
                None if override is None else _as_int(override, "priorityOverride", key)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "key": self.key,
            "summary": self.summary,
            "status": self.status,
            "commitType": self.commit_type.value,
        }
        if self.priority_override is not None:
            data["priorityOverride"] = self.priority_override
        return data


@dataclass(frozen=True)
class Ticket:
    """An individual unit of work.

    Attributes:
        key: Issue key
        summary: Ticket title
        status: Tracker status name
        epic_key: Owning epic
        dev_days: Effort in work days
        blocked_by: Keys of blocking tickets (any epic)
        is_missing_estimate: True if dev_days was defaulted
        assignee: Optional assignee display name
        sprint_ids: Sprints the tracker currently has the ticket in
    """

    key: str
    epic_key: str
    dev_days: int
    summary: str = ""
    status: str = ""
    blocked_by: frozenset[str] = field(default_factory=frozenset)
    is_missing_estimate: bool = False
    assignee: str | None = None
    sprint_ids: tuple[int, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a Ticket from a contract dictionary."""
        key = str(_require(data, "key"))
        dev_days = _as_int(_require(data, "devDays", key), "devDays", key)
        if dev_days < 1:
            raise InvalidInputError(
                f"expected at least 1 dev day, got {dev_days}", field="devDays", item=key
            )
        blocked_by = data.get("blockedBy") or []
        if not isinstance(blocked_by, list):
            raise InvalidInputError(
                f"expected a list of ticket keys, got {blocked_by!r}", field="blockedBy", item=key
            )
        return cls(
            key=key,
            epic_key=str(_require(data, "epicKey", key)),
            dev_days=dev_days,
            summary=data.get("summary", ""),
            status=data.get("status", ""),
            blocked_by=frozenset(blocked_by),
            is_missing_estimate=bool(data.get("isMissingEstimate", False)),
            assignee=data.get("assignee"),
            sprint_ids=tuple(data.get("sprintIds") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "summary": self.summary,
            "status": self.status,
            "epicKey": self.epic_key,
            "devDays": self.dev_days,
            "blockedBy": sorted(self.blocked_by),
            "isMissingEstimate": self.is_missing_estimate,
            "assignee": self.assignee,
            "sprintIds": list(self.sprint_ids),
        }


@dataclass(frozen=True)
class Sprint:
    """A fixed calendar time box.

    Dates are kept as delivered (ISO strings); an empty string means the
    tracker has no date for the sprint yet.
    """

    id: int
    name: str
    state: SprintState
    start_date: str
    end_date: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a Sprint from a contract dictionary."""
        sprint_id = _as_int(_require(data, "id"), "id")
        name = data.get("name", f"Sprint {sprint_id}")
        raw_state = data.get("state") or SprintState.FUTURE.value
        try:
            state = SprintState(raw_state)
        except ValueError:
            raise InvalidInputError(
                f"unknown sprint state {raw_state!r}", field="state", item=name
            ) from None
        return cls(
            id=sprint_id,
            name=name,
            state=state,
            start_date=data.get("startDate") or "",
            end_date=data.get("endDate") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state.value,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


@dataclass(frozen=True)
class DailyCapacityOverride:
    """Capacity for one specific day (e.g. reduced staffing for PTO)."""

    date: str
    capacity: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            date=str(_require(data, "date")),
            capacity=_as_int(_require(data, "capacity"), "capacity"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "capacity": self.capacity}


@dataclass(frozen=True)
class SprintCapacity:
    """Capacity configuration for a sprint."""

    sprint_id: int
    dev_days_capacity: int
    daily_capacities: tuple[DailyCapacityOverride, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        sprint_id = _as_int(_require(data, "sprintId"), "sprintId")
        return cls(
            sprint_id=sprint_id,
            dev_days_capacity=_as_int(
                _require(data, "devDaysCapacity", f"sprint {sprint_id}"),
                "devDaysCapacity",
                f"sprint {sprint_id}",
            ),
            daily_capacities=tuple(
                DailyCapacityOverride.from_dict(item)
                for item in data.get("dailyCapacities") or []
            ),
        )

    def override_for(self, iso_date: str) -> int | None:
        """Capacity override for a date, if one was configured."""
        for override in self.daily_capacities:
            if override.date == iso_date:
                return override.capacity
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sprintId": self.sprint_id,
            "devDaysCapacity": self.dev_days_capacity,
            "dailyCapacities": [o.to_dict() for o in self.daily_capacities],
        }


@dataclass(frozen=True)
class SprintDateOverride:
    """Planner-supplied replacement dates for a sprint."""

    sprint_id: int
    start_date: str
    end_date: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            sprint_id=_as_int(_require(data, "sprintId"), "sprintId"),
            start_date=str(_require(data, "startDate")),
            end_date=str(_require(data, "endDate")),
        )


@dataclass(frozen=True)
class SchedulingInput:
    """Everything the engine needs for one run."""

    epics: list[Epic]
    tickets: list[Ticket]
    sprints: list[Sprint]
    sprint_capacities: list[SprintCapacity]
    max_developers: int = DEFAULT_MAX_DEVELOPERS

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], default_max_developers: int = DEFAULT_MAX_DEVELOPERS
    ) -> Self:
        """Create a SchedulingInput from the engine input contract."""
        return cls(
            epics=[Epic.from_dict(e) for e in data.get("epics", [])],
            tickets=[Ticket.from_dict(t) for t in data.get("tickets", [])],
            sprints=[Sprint.from_dict(s) for s in data.get("sprints", [])],
            sprint_capacities=[
                SprintCapacity.from_dict(c) for c in data.get("sprintCapacities", [])
            ],
            max_developers=_as_int(
                data.get("maxDevelopers", default_max_developers), "maxDevelopers"
            ),
        )

    def tickets_for_epic(self, epic_key: str) -> list[Ticket]:
        """Tickets owned by an epic, in input order."""
        return [t for t in self.tickets if t.epic_key == epic_key]

    def to_dict(self) -> dict[str, Any]:
        return {
            "epics": [e.to_dict() for e in self.epics],
            "tickets": [t.to_dict() for t in self.tickets],
            "sprints": [s.to_dict() for s in self.sprints],
            "sprintCapacities": [c.to_dict() for c in self.sprint_capacities],
            "maxDevelopers": self.max_developers,
        }
