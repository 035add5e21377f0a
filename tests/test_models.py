"""Tests for data models."""

import pytest

from sprint_scheduler.exceptions import InvalidInputError
from sprint_scheduler.models import (
    CommitType,
    Epic,
    SchedulingInput,
    Sprint,
    SprintCapacity,
    SprintDateOverride,
    SprintState,
    Ticket,
)
from sprint_scheduler.scheduler.algorithm import schedule_tickets


class TestEpic:
    """Tests for Epic model."""

    def test_from_dict_defaults(self):
        """Test a bare epic defaults to the commit tier."""
        epic = Epic.from_dict({"key": "E-1"})
        assert epic.commit_type == CommitType.COMMIT
        assert epic.priority_override is None

    def test_from_dict_full(self):
        """Test all contract fields are read."""
        epic = Epic.from_dict(
            {
                "key": "E-1",
                "summary": "Search",
                "status": "In Progress",
                "commitType": "stretch",
                "priorityOverride": 2,
            }
        )
        assert epic.commit_type == CommitType.STRETCH
        assert epic.priority_override == 2
        assert epic.to_dict()["commitType"] == "stretch"

    def test_unknown_commit_type(self):
        """Test an unknown tier is rejected with context."""
        with pytest.raises(InvalidInputError) as exc_info:
            Epic.from_dict({"key": "E-1", "commitType": "maybe"})
        assert exc_info.value.field == "commitType"
        assert "E-1" in str(exc_info.value)


class TestTicket:
    """Tests for Ticket model."""

    def test_from_dict(self):
        """Test camelCase fields map onto the ticket."""
        ticket = Ticket.from_dict(
            {
                "key": "T-1",
                "epicKey": "E-1",
                "devDays": 3,
                "blockedBy": ["T-0"],
                "isMissingEstimate": True,
                "sprintIds": [7],
            }
        )
        assert ticket.dev_days == 3
        assert ticket.blocked_by == frozenset({"T-0"})
        assert ticket.is_missing_estimate is True
        assert ticket.sprint_ids == (7,)

    def test_integral_float_accepted(self):
        """Test 3.0 dev days is read as 3."""
        ticket = Ticket.from_dict({"key": "T-1", "epicKey": "E-1", "devDays": 3.0})
        assert ticket.dev_days == 3

    def test_fractional_dev_days_rejected(self):
        """Test non-integral effort is rejected."""
        with pytest.raises(InvalidInputError) as exc_info:
            Ticket.from_dict({"key": "T-1", "epicKey": "E-1", "devDays": 2.5})
        assert exc_info.value.field == "devDays"

    @pytest.mark.parametrize("dev_days", [0, -2])
    def test_dev_days_below_one_rejected(self, dev_days):
        """Test a ticket needs at least one dev day."""
        with pytest.raises(InvalidInputError) as exc_info:
            Ticket.from_dict({"key": "T-1", "epicKey": "E-1", "devDays": dev_days})
        assert exc_info.value.field == "devDays"
        assert exc_info.value.item == "T-1"

    def test_blocked_by_must_be_list(self):
        """Test a bare string of blockers is rejected instead of split into characters."""
        with pytest.raises(InvalidInputError) as exc_info:
            Ticket.from_dict({"key": "T-2", "epicKey": "E-1", "devDays": 1, "blockedBy": "T-1"})
        assert exc_info.value.field == "blockedBy"

    def test_missing_epic_key(self):
        """Test a ticket without an epic is rejected."""
        with pytest.raises(InvalidInputError) as exc_info:
            Ticket.from_dict({"key": "T-1", "devDays": 1})
        assert exc_info.value.field == "epicKey"

    def test_to_dict_sorted_blockers(self):
        """Test blockers serialize in a stable order."""
        ticket = Ticket("T-1", "E-1", 1, blocked_by=frozenset({"B", "A"}))
        assert ticket.to_dict()["blockedBy"] == ["A", "B"]


class TestSprint:
    """Tests for Sprint and capacity models."""

    def test_missing_dates_become_empty(self):
        """Test absent dates are kept as empty strings."""
        sprint = Sprint.from_dict({"id": 4, "name": "Sprint 4", "state": "future"})
        assert sprint.start_date == ""
        assert sprint.end_date == ""

    def test_unknown_state(self):
        """Test an unknown sprint state is rejected."""
        with pytest.raises(InvalidInputError):
            Sprint.from_dict({"id": 4, "state": "paused"})

    def test_capacity_override_lookup(self):
        """Test per-day overrides are found by ISO date."""
        capacity = SprintCapacity.from_dict(
            {
                "sprintId": 1,
                "devDaysCapacity": 20,
                "dailyCapacities": [{"date": "2024-01-09", "capacity": 1}],
            }
        )
        assert capacity.override_for("2024-01-09") == 1
        assert capacity.override_for("2024-01-10") is None

    def test_sprint_date_override(self):
        """Test override records need both dates."""
        override = SprintDateOverride.from_dict(
            {"sprintId": 1, "startDate": "2024-01-09", "endDate": "2024-01-23"}
        )
        assert override.sprint_id == 1
        with pytest.raises(InvalidInputError):
            SprintDateOverride.from_dict({"sprintId": 1, "startDate": "2024-01-09"})


class TestSchedulingInput:
    """Tests for SchedulingInput."""

    def test_from_dict(self, input_dict):
        """Test the full contract parses."""
        data = SchedulingInput.from_dict(input_dict)
        assert [e.key for e in data.epics] == ["E-1", "E-2"]
        assert len(data.tickets) == 3
        assert data.sprints[0].state == SprintState.ACTIVE
        assert data.max_developers == 2
        assert [t.key for t in data.tickets_for_epic("E-1")] == ["T-1", "T-2"]

    def test_default_max_developers(self, input_dict):
        """Test a missing maxDevelopers falls back to the default."""
        del input_dict["maxDevelopers"]
        assert SchedulingInput.from_dict(input_dict).max_developers == 5
        assert SchedulingInput.from_dict(input_dict, 3).max_developers == 3

    def test_to_dict_round_trip(self, input_dict):
        """Test to_dict reproduces a parseable contract."""
        data = SchedulingInput.from_dict(input_dict)
        assert SchedulingInput.from_dict(data.to_dict()) == data


class TestScheduleResultSerialization:
    """Tests for result to_dict output."""

    def test_result_to_dict(self, chain_input):
        """Test the result serializes with camelCase keys and ISO dates."""
        data = schedule_tickets(chain_input).to_dict()

        assert data["projectStartDate"] == "2024-01-08"
        assert data["projectEndDate"] == "2024-01-16"
        assert data["totalDevDays"] == 6
        assert data["overbookedDays"] == []
        assert data["unscheduledTickets"] == []
        assert data["sprints"][0]["devDaysCapacity"] == 20

    def test_ticket_to_dict_includes_placement(self, chain_input):
        """Test a placed ticket carries its source fields and its placement."""
        ticket = schedule_tickets(chain_input).get_ticket("B").to_dict()

        assert ticket["key"] == "B"
        assert ticket["epicKey"] == "E-1"
        assert ticket["blockedBy"] == ["A"]
        assert ticket["startDay"] == 2
        assert ticket["endDay"] == 5
        assert ticket["startDate"] == "2024-01-10"
        assert ticket["endDate"] == "2024-01-12"
        assert ticket["parallelGroup"] == 1
        assert ticket["criticalPathWeight"] == 4
        assert ticket["isOnCriticalPath"] is True
        assert ticket["isUncertain"] is False
