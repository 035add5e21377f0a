"""Tests for SprintScheduler class."""

import json
from datetime import date

import pytest

from sprint_scheduler.config import SchedulerConfig
from sprint_scheduler.exceptions import NoValidSprintsError, OversizedTicketError
from sprint_scheduler.models import (
    CommitType,
    Epic,
    Sprint,
    SprintDateOverride,
    SprintState,
    Ticket,
)
from sprint_scheduler.scheduler.algorithm import (
    SprintScheduler,
    create_scheduler,
    schedule_tickets,
)
from sprint_scheduler.scheduler.models import UnscheduledReason


class TestSprintScheduler:
    """Tests for SprintScheduler."""

    def test_chain_result(self, chain_input):
        """Test totals and project dates for a simple chain."""
        result = SprintScheduler().schedule(chain_input)

        assert result.total_dev_days == 6
        assert result.total_days == 6
        assert result.project_start_date == date(2024, 1, 8)
        assert result.project_end_date == date(2024, 1, 16)
        assert [s.id for s in result.sprints] == [1, 2, 3]
        assert len(result.daily_capacities) == 30
        assert result.unscheduled_tickets == []

    def test_mixed_tiers(self, mixed_input):
        """Test all three tiers land on one timeline."""
        result = schedule_tickets(mixed_input)

        placed = {t.key: (t.start_day, t.end_day) for t in result.scheduled_tickets}
        assert placed == {
            "CORE-1": (0, 4),
            "CORE-2": (4, 7),
            "NICE-1": (0, 2),
            "NICE-2": (2, 4),
            "LATER-1": (4, 9),
        }
        assert result.total_dev_days == 16
        assert result.total_days == 9
        assert result.project_end_date == date(2024, 1, 19)
        assert result.overbooked_days == []

    def test_oversized_ticket_fails_whole_run(self, build_input):
        """Test a 12-day ticket stops scheduling and names the ticket."""
        data = build_input(
            [Epic("E")], [Ticket("OK-1", "E", 2), Ticket("HUGE-1", "E", 12)]
        )
        with pytest.raises(OversizedTicketError) as exc_info:
            schedule_tickets(data)
        assert "HUGE-1" in str(exc_info.value)

    def test_no_valid_sprints(self, build_input):
        """Test a run without usable sprints is rejected."""
        data = build_input([Epic("E")], [Ticket("A", "E", 1)], capacities=[])
        with pytest.raises(NoValidSprintsError):
            schedule_tickets(data)

    def test_idempotent(self, mixed_input):
        """Test identical input yields identical output."""
        scheduler = SprintScheduler()
        first = scheduler.schedule(mixed_input)
        second = scheduler.schedule(mixed_input)
        assert first.to_dict() == second.to_dict()

    def test_overbooked_days_reported(self, build_input):
        """Test commit overdraw shows up on the result."""
        data = build_input(
            [Epic("E")], [Ticket("A", "E", 2), Ticket("B", "E", 2)], max_developers=1
        )
        result = schedule_tickets(data)

        assert result.overbooked_days == [0, 1]
        assert result.daily_capacities[0].remaining_capacity == -1
        assert result.daily_capacities[0].used_capacity == 2

    def test_no_tickets(self, build_input):
        """Test an empty backlog yields an empty timeline."""
        result = schedule_tickets(build_input([Epic("E")], []))

        assert result.total_days == 0
        assert result.project_end_date == result.project_start_date
        assert result.get_epic("E").tickets == []

    def test_unscheduled_tickets_reported(self, build_input):
        """Test dropped stretch tickets are listed on the result."""
        data = build_input(
            [Epic("C"), Epic("S", commit_type=CommitType.STRETCH)],
            [Ticket("C-1", "C", 10), Ticket("S-1", "S", 1)],
            max_developers=1,
            sprints=[Sprint(1, "Sprint 1", SprintState.FUTURE, "2024-01-08", "2024-01-22")],
        )
        result = schedule_tickets(data)

        assert result.get_ticket("S-1") is None
        assert result.unscheduled_tickets[0].ticket_key == "S-1"
        assert result.unscheduled_tickets[0].reason == UnscheduledReason.NO_CAPACITY

    def test_date_overrides_applied(self, chain_input):
        """Test planner dates replace the tracker's sprint dates."""
        scheduler = SprintScheduler(
            date_overrides=[SprintDateOverride(1, "2024-01-10", "2024-01-22")]
        )
        result = scheduler.schedule(chain_input)

        assert result.project_start_date == date(2024, 1, 10)
        assert len(result.daily_capacities) == 28

    def test_auto_adjust_late_start(self, build_input):
        """Test a start after 5PM local time moves to the next day when enabled."""
        sprints = [
            Sprint(1, "Sprint 1", SprintState.FUTURE, "2024-01-08T23:30:00Z", "2024-01-22")
        ]
        data = build_input([Epic("E")], [Ticket("A", "E", 1)], sprints=sprints)

        plain = SprintScheduler(SchedulerConfig(timezone="America/Chicago")).schedule(data)
        adjusted = SprintScheduler(
            SchedulerConfig(timezone="America/Chicago", auto_adjust_dates=True)
        ).schedule(data)

        assert plain.project_start_date == date(2024, 1, 8)
        assert adjusted.project_start_date == date(2024, 1, 9)


class TestCreateScheduler:
    """Tests for create_scheduler factory."""

    def test_without_config_files(self, tmp_path):
        """Test defaults apply when the directory holds no config."""
        scheduler = create_scheduler(tmp_path)
        assert scheduler.config.max_ticket_dev_days == 10
        assert scheduler.date_overrides == []

    def test_reads_config_dir(self, tmp_path, build_input):
        """Test scheduler.json and sprint-date-overrides.json are picked up."""
        (tmp_path / "scheduler.json").write_text(
            json.dumps({"max_ticket_dev_days": 5}), encoding="utf-8"
        )
        (tmp_path / "sprint-date-overrides.json").write_text(
            json.dumps([{"sprintId": 1, "startDate": "2024-01-09", "endDate": "2024-01-22"}]),
            encoding="utf-8",
        )
        scheduler = create_scheduler(tmp_path)

        assert scheduler.config.max_ticket_dev_days == 5
        assert scheduler.date_overrides[0].start_date == "2024-01-09"
        with pytest.raises(OversizedTicketError):
            scheduler.schedule(build_input([Epic("E")], [Ticket("A", "E", 6)]))
