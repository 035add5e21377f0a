"""Write-back plan: the sprint and planned dates each placed ticket should get."""

import logging
from collections import defaultdict

from ..models import SprintState
from .models import ScheduleResult, SlotUpdate

logger = logging.getLogger(__name__)


def build_slot_updates(result: ScheduleResult, future_only: bool = True) -> list[SlotUpdate]:
    """Build one update per placed ticket.

    Args:
        result: Output of a scheduling run
        future_only: Keep only tickets whose target sprint has not started

    Returns:
        Updates sorted by sprint start date, then by ticket start day
    """
    sprints = {s.id: s for s in result.sprints}
    updates = []
    for ticket in result.scheduled_tickets:
        sprint = sprints[ticket.sprint_id]
        if future_only and sprint.state != SprintState.FUTURE:
            continue
        current = ticket.ticket.sprint_ids[0] if ticket.ticket.sprint_ids else None
        updates.append(
            (
                sprint.start,
                ticket.start_day,
                SlotUpdate(
                    ticket_key=ticket.key,
                    epic_key=ticket.epic_key,
                    current_sprint_id=current,
                    new_sprint_id=sprint.id,
                    new_sprint_name=sprint.name,
                    planned_start_date=ticket.start_date,
                    planned_end_date=ticket.end_date,
                ),
            )
        )

    updates.sort(key=lambda item: (item[0], item[1]))
    slot_updates = [update for _, _, update in updates]
    moved = sum(1 for u in slot_updates if u.has_sprint_change)
    logger.info(f"Built {len(slot_updates)} slot updates ({moved} change sprint)")
    return slot_updates


def group_by_sprint(updates: list[SlotUpdate]) -> dict[int, list[SlotUpdate]]:
    """Group updates by target sprint, keeping their order."""
    grouped: dict[int, list[SlotUpdate]] = defaultdict(list)
    for update in updates:
        grouped[update.new_sprint_id].append(update)
    return dict(grouped)
