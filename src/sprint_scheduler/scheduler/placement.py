"""Greedy placement of ticket spans onto the capacity map.

Two policies share one capacity map:

- Linear placement (commit tier): a cursor shared across epics; spans are
  pushed to the next sprint when they do not fit, and capacity is consumed
  without being checked. A ticket with no sprint left ends its epic.
- Fill placement (stretch and none tiers): each epic searches from day 0
  for the first span with capacity left on every day; the first ticket that
  finds no slot abandons the rest of its epic.
"""

import logging

from ..exceptions import OversizedTicketError
from ..models import TIER_ORDER, CommitType, Epic, Ticket
from .capacity import CapacityMap
from .dependencies import LeveledTicket, level_epic_tickets, uncertainty_flags
from .models import ScheduledTicket, UnscheduledReason, UnscheduledTicket

logger = logging.getLogger(__name__)


def validate_ticket_sizes(tickets: list[Ticket], max_dev_days: int) -> None:
    """Reject the run if any ticket is larger than a sprint can hold.

    Raises:
        OversizedTicketError: Naming every offending ticket
    """
    oversized = [(t.key, t.dev_days) for t in tickets if t.dev_days > max_dev_days]
    if oversized:
        raise OversizedTicketError(oversized, max_dev_days)


def calculate_worst_case(epic: Epic, tickets: list[Ticket]) -> int:
    """Worst-case duration of an epic: the sum of its tickets' dev days."""
    return sum(t.dev_days for t in tickets if t.epic_key == epic.key)


def sort_epics(epics: list[Epic], worst_case: dict[str, int]) -> list[Epic]:
    """Order epics within a tier.

    Epics with a priority override come first, ascending. The rest follow by
    descending worst-case duration. Ties keep input order.
    """

    def sort_key(epic: Epic) -> tuple[int, int]:
        if epic.priority_override is not None:
            return (0, epic.priority_override)
        return (1, -worst_case.get(epic.key, 0))

    return sorted(epics, key=sort_key)


def split_tiers(epics: list[Epic]) -> dict[CommitType, list[Epic]]:
    """Group epics by commit type, in tier processing order."""
    tiers: dict[CommitType, list[Epic]] = {tier: [] for tier in TIER_ORDER}
    for epic in epics:
        tiers[epic.commit_type].append(epic)
    return tiers


class GreedyPlacer:
    """Places epics onto a capacity map, tier by tier.

    Attributes:
        capacity: The run's capacity map (mutated in place)
        scheduled: Placed tickets, in placement order
        unscheduled: Tickets left off the timeline
    """

    def __init__(self, capacity: CapacityMap, tickets: list[Ticket]) -> None:
        self.capacity = capacity
        self.tickets = tickets
        self.scheduled: list[ScheduledTicket] = []
        self.unscheduled: list[UnscheduledTicket] = []
        # epic key -> ticket key -> placed ticket
        self._placed_by_epic: dict[str, dict[str, ScheduledTicket]] = {}
        self._linear_cursor = 0

    def processing_order(self, epic: Epic) -> list[LeveledTicket]:
        """Dependency-leveled order of an epic's tickets."""
        return level_epic_tickets([t for t in self.tickets if t.epic_key == epic.key])

    def place_tiers(self, epics: list[Epic]) -> None:
        """Place every tier in order: commit, then stretch, then none."""
        worst_case = {epic.key: calculate_worst_case(epic, self.tickets) for epic in epics}
        for tier, tier_epics in split_tiers(epics).items():
            if not tier_epics:
                continue
            ordered = sort_epics(tier_epics, worst_case)
            logger.info(
                f"Placing {len(ordered)} {tier.value} epic(s): "
                f"{', '.join(e.key for e in ordered)}"
            )
            for epic in ordered:
                if tier == CommitType.COMMIT:
                    self.place_linear(epic)
                else:
                    self.place_fill(epic)

    def _blockers_end(self, ticket: Ticket) -> int:
        """Latest end day among already-placed same-epic blockers."""
        placed = self._placed_by_epic.get(ticket.epic_key, {})
        ends = [placed[key].end_day for key in ticket.blocked_by if key in placed]
        return max(ends, default=0)

    def _record(self, leveled: LeveledTicket, start_day: int, is_uncertain: bool) -> ScheduledTicket:
        ticket = leveled.ticket
        end_day = start_day + ticket.dev_days
        self.capacity.consume(start_day, ticket.dev_days)
        scheduled = ScheduledTicket(
            ticket=ticket,
            start_day=start_day,
            end_day=end_day,
            sprint_id=self.capacity.sprint_at(start_day),
            start_date=self.capacity.date_at(start_day),
            end_date=self.capacity.date_at(max(start_day, end_day - 1)),
            parallel_group=leveled.parallel_group,
            critical_path_weight=leveled.critical_path_weight,
            is_uncertain=is_uncertain,
        )
        self.scheduled.append(scheduled)
        self._placed_by_epic.setdefault(ticket.epic_key, {})[ticket.key] = scheduled
        logger.debug(
            f"  {ticket.key} ({ticket.dev_days}d) -> days {start_day}-{end_day - 1} "
            f"(sprint {scheduled.sprint_id})"
        )
        return scheduled

    def _drop(self, ticket: Ticket, reason: UnscheduledReason, details: str) -> None:
        self.unscheduled.append(
            UnscheduledTicket(
                ticket_key=ticket.key,
                epic_key=ticket.epic_key,
                dev_days=ticket.dev_days,
                reason=reason,
                details=details,
            )
        )

    def _drop_rest(self, remaining: list[LeveledTicket], unplaced: Ticket) -> None:
        for skipped in remaining:
            self._drop(
                skipped.ticket,
                UnscheduledReason.AFTER_UNPLACED_TICKET,
                f"Follows unplaced ticket {unplaced.key}",
            )

    def place_linear(self, epic: Epic) -> list[ScheduledTicket]:
        """Place a commit-tier epic from the shared cursor.

        Capacity is decremented without checking it, so days can be
        overbooked. When the calendar runs out, the ticket and every later
        ticket of the epic are dropped. The cursor moves to the epic's last
        end day afterwards.
        """
        order = self.processing_order(epic)
        flags = uncertainty_flags(order)
        placed = []
        logger.debug(f"Linear placement of {epic.key} from day {self._linear_cursor}")

        for position, leveled in enumerate(order):
            ticket = leveled.ticket
            earliest = max(self._linear_cursor, self._blockers_end(ticket))
            start_day = self.capacity.find_sprint_fit(earliest, ticket.dev_days)
            if start_day is None:
                remaining = order[position + 1 :]
                logger.warning(
                    f"Ran out of sprints: cannot place {ticket.key} "
                    f"({ticket.dev_days}d) at or after day {earliest}; "
                    f"abandoning {len(remaining) + 1} ticket(s) of {epic.key}"
                )
                self._drop(
                    ticket,
                    UnscheduledReason.OUT_OF_CALENDAR,
                    f"No sprint at or after day {earliest} holds {ticket.dev_days} days",
                )
                self._drop_rest(remaining, ticket)
                break
            placed.append(self._record(leveled, start_day, flags[ticket.key]))

        if placed:
            self._linear_cursor = max(t.end_day for t in placed)
        return placed

    def place_fill(self, epic: Epic) -> list[ScheduledTicket]:
        """Place a stretch/none epic into days that still have capacity.

        When a ticket finds no slot, it and every later ticket of the epic
        are abandoned. Tickets placed before it are kept.
        """
        order = self.processing_order(epic)
        flags = uncertainty_flags(order)
        placed = []

        for position, leveled in enumerate(order):
            ticket = leveled.ticket
            earliest = self._blockers_end(ticket)
            start_day = self.capacity.find_available_slot(earliest, ticket.dev_days)
            if start_day is None:
                remaining = order[position + 1 :]
                logger.warning(
                    f"No capacity left for {ticket.key} ({ticket.dev_days}d) in {epic.key}; "
                    f"abandoning {len(remaining) + 1} ticket(s)"
                )
                self._drop(
                    ticket,
                    UnscheduledReason.NO_CAPACITY,
                    f"No {ticket.dev_days}-day span with capacity at or after day {earliest}",
                )
                self._drop_rest(remaining, ticket)
                break
            placed.append(self._record(leveled, start_day, flags[ticket.key]))

        return placed
