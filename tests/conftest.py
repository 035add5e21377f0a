"""Test fixtures for sprint scheduler tests."""

import json

import pytest

from sprint_scheduler.models import (
    CommitType,
    Epic,
    SchedulingInput,
    Sprint,
    SprintCapacity,
    SprintState,
    Ticket,
)


@pytest.fixture
def sample_sprints():
    """Three back-to-back two-week sprints (10 work days each)."""
    return [
        Sprint(1, "Sprint 1", SprintState.ACTIVE, "2024-01-08", "2024-01-22"),
        Sprint(2, "Sprint 2", SprintState.FUTURE, "2024-01-22", "2024-02-05"),
        Sprint(3, "Sprint 3", SprintState.FUTURE, "2024-02-05", "2024-02-19"),
    ]


@pytest.fixture
def sample_capacities():
    """Capacity configs for the sample sprints."""
    return [SprintCapacity(1, 20), SprintCapacity(2, 20), SprintCapacity(3, 20)]


@pytest.fixture
def build_input(sample_sprints, sample_capacities):
    """Factory for SchedulingInput over the sample sprints."""

    def _build(epics, tickets, max_developers=5, sprints=None, capacities=None):
        return SchedulingInput(
            epics=epics,
            tickets=tickets,
            sprints=sample_sprints if sprints is None else sprints,
            sprint_capacities=sample_capacities if capacities is None else capacities,
            max_developers=max_developers,
        )

    return _build


@pytest.fixture
def chain_input(build_input):
    """One commit epic with a linear chain A -> B -> C."""
    epics = [Epic("E-1", summary="Checkout")]
    tickets = [
        Ticket("A", "E-1", 2),
        Ticket("B", "E-1", 3, blocked_by=frozenset({"A"})),
        Ticket("C", "E-1", 1, blocked_by=frozenset({"B"})),
    ]
    return build_input(epics, tickets, max_developers=2)


@pytest.fixture
def mixed_input(build_input):
    """Commit, stretch and none epics sharing the sample sprints."""
    epics = [
        Epic("CORE", summary="Core platform", commit_type=CommitType.COMMIT),
        Epic("NICE", summary="Nice to have", commit_type=CommitType.STRETCH),
        Epic("LATER", summary="Backlog", commit_type=CommitType.NONE),
    ]
    tickets = [
        Ticket("CORE-1", "CORE", 4, summary="Schema"),
        Ticket("CORE-2", "CORE", 3, blocked_by=frozenset({"CORE-1"}), sprint_ids=(1,)),
        Ticket("NICE-1", "NICE", 2, is_missing_estimate=True),
        Ticket("NICE-2", "NICE", 2, blocked_by=frozenset({"NICE-1"})),
        Ticket("LATER-1", "LATER", 5, sprint_ids=(2,)),
    ]
    return build_input(epics, tickets, max_developers=2)


@pytest.fixture
def input_dict():
    """Engine input contract as delivered in a JSON file."""
    return {
        "epics": [
            {"key": "E-1", "summary": "Checkout", "status": "To Do", "commitType": "commit"},
            {
                "key": "E-2",
                "summary": "Search",
                "status": "To Do",
                "commitType": "stretch",
                "priorityOverride": 1,
            },
        ],
        "tickets": [
            {"key": "T-1", "epicKey": "E-1", "devDays": 3, "blockedBy": []},
            {"key": "T-2", "epicKey": "E-1", "devDays": 2, "blockedBy": ["T-1"], "sprintIds": [1]},
            {
                "key": "T-3",
                "epicKey": "E-2",
                "devDays": 1,
                "blockedBy": [],
                "isMissingEstimate": True,
            },
        ],
        "sprints": [
            {
                "id": 1,
                "name": "Sprint 1",
                "state": "active",
                "startDate": "2024-01-08",
                "endDate": "2024-01-22",
            },
            {
                "id": 2,
                "name": "Sprint 2",
                "state": "future",
                "startDate": "2024-01-22",
                "endDate": "2024-02-05",
            },
        ],
        "sprintCapacities": [
            {
                "sprintId": 1,
                "devDaysCapacity": 20,
                "dailyCapacities": [{"date": "2024-01-09", "capacity": 1}],
            },
            {"sprintId": 2, "devDaysCapacity": 20},
        ],
        "maxDevelopers": 2,
    }


@pytest.fixture
def input_file(tmp_path, input_dict):
    """Input contract written to a temporary JSON file."""
    path = tmp_path / "input.json"
    path.write_text(json.dumps(input_dict), encoding="utf-8")
    return path
