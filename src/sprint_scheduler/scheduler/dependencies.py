"""Dependency leveling within an epic.

Only blocker edges between tickets of the same epic count. Tickets are
leveled with Kahn's algorithm and weighted by the effort they hold up, which
yields the epic's processing order for placement.
"""

from collections import defaultdict
from dataclasses import dataclass

from ..constants import CYCLE_CRITICAL_PATH_WEIGHT, CYCLE_PARALLEL_GROUP
from ..models import Ticket


@dataclass(frozen=True)
class LeveledTicket:
    """A ticket with its topological level and downstream weight."""

    ticket: Ticket
    parallel_group: int
    critical_path_weight: int

    @property
    def key(self) -> str:
        return self.ticket.key


def build_dependents_map(tickets: list[Ticket]) -> dict[str, list[str]]:
    """Map each ticket key to the keys it directly blocks.

    Edges whose blocker is outside ``tickets`` are ignored. Dependents keep
    input order.
    """
    keys = {t.key for t in tickets}
    dependents: dict[str, list[str]] = {t.key: [] for t in tickets}
    for ticket in tickets:
        for blocker in sorted(ticket.blocked_by):
            if blocker in keys:
                dependents[blocker].append(ticket.key)
    return dependents


def _compute_levels(
    tickets: list[Ticket], dependents: dict[str, list[str]]
) -> list[list[str]]:
    """Kahn's algorithm, one list of keys per level. Cycle members are left out."""
    in_degree = {t.key: 0 for t in tickets}
    for blocked in dependents.values():
        for key in blocked:
            in_degree[key] += 1

    levels = []
    current = [t.key for t in tickets if in_degree[t.key] == 0]
    while current:
        levels.append(current)
        next_level = []
        for key in current:
            for dependent in dependents[key]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    next_level.append(dependent)
        current = next_level
    return levels


def _compute_weights(
    tickets: list[Ticket],
    dependents: dict[str, list[str]],
    levels: list[list[str]],
) -> dict[str, int]:
    """weight(t) = dev_days(t) + sum of weight(d) over direct dependents d.

    Evaluated in reverse level order, so every dependent is final before its
    blockers are summed. Cycle members weigh 0.
    """
    by_key = {t.key: t for t in tickets}
    weights: dict[str, int] = defaultdict(lambda: CYCLE_CRITICAL_PATH_WEIGHT)
    for level in reversed(levels):
        for key in level:
            weights[key] = by_key[key].dev_days + sum(weights[d] for d in dependents[key])
    return dict(weights)


def level_epic_tickets(tickets: list[Ticket]) -> list[LeveledTicket]:
    """Order an epic's tickets for placement.

    Level 0 holds tickets with no same-epic blockers. Within a level, heavier
    tickets come first (ties keep input order). Tickets caught in a cycle are
    appended last with level 999 and weight 0.

    Args:
        tickets: Tickets of a single epic, in input order

    Returns:
        Processing order with level and weight stamped on each ticket
    """
    dependents = build_dependents_map(tickets)
    levels = _compute_levels(tickets, dependents)
    weights = _compute_weights(tickets, dependents, levels)
    by_key = {t.key: t for t in tickets}
    input_position = {t.key: i for i, t in enumerate(tickets)}

    order: list[LeveledTicket] = []
    for level_index, level in enumerate(levels):
        ranked = sorted(level, key=lambda k: (-weights[k], input_position[k]))
        order.extend(
            LeveledTicket(by_key[key], level_index, weights[key]) for key in ranked
        )

    reached = {lt.key for lt in order}
    for ticket in tickets:
        if ticket.key not in reached:
            order.append(
                LeveledTicket(ticket, CYCLE_PARALLEL_GROUP, CYCLE_CRITICAL_PATH_WEIGHT)
            )
    return order


def uncertainty_flags(order: list[LeveledTicket]) -> dict[str, bool]:
    """Flag every ticket processed after one with a missing estimate.

    The flag is read before it is set, so the unestimated ticket itself is
    not flagged unless an earlier one was.
    """
    flags = {}
    seen_missing = False
    for leveled in order:
        flags[leveled.key] = seen_missing
        if leveled.ticket.is_missing_estimate:
            seen_missing = True
    return flags
