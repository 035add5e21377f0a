"""Critical-path marking and per-epic aggregation."""

from dataclasses import replace

from ..models import Epic
from .dependencies import build_dependents_map
from .models import ScheduledEpic, ScheduledTicket


def find_critical_path(tickets: list[ScheduledTicket]) -> list[str]:
    """Walk the heaviest dependency chain among an epic's placed tickets.

    Starts at the heaviest level-0 ticket and repeatedly steps to the
    heaviest direct dependent. Ties go to the earlier ticket in ``tickets``.
    Only this one chain is returned.

    Args:
        tickets: Placed tickets of a single epic, in processing order

    Returns:
        Ticket keys along the path, from the start of the chain
    """
    roots = [t for t in tickets if t.parallel_group == 0]
    if not roots:
        return []

    by_key = {t.key: t for t in tickets}
    position = {t.key: i for i, t in enumerate(tickets)}
    dependents = build_dependents_map([t.ticket for t in tickets])

    current = max(roots, key=lambda t: t.critical_path_weight)
    path = [current.key]
    visited = {current.key}
    while True:
        candidates = [by_key[k] for k in dependents[current.key] if k not in visited]
        if not candidates:
            break
        # dependents come in input order; rank them by processing order for ties
        candidates.sort(key=lambda t: position[t.key])
        current = max(candidates, key=lambda t: t.critical_path_weight)
        path.append(current.key)
        visited.add(current.key)
    return path


def mark_critical_path(tickets: list[ScheduledTicket]) -> list[ScheduledTicket]:
    """Return the epic's tickets with ``is_on_critical_path`` set along the path."""
    on_path = set(find_critical_path(tickets))
    return [
        replace(t, is_on_critical_path=True) if t.key in on_path else t for t in tickets
    ]


def build_scheduled_epic(epic: Epic, tickets: list[ScheduledTicket]) -> ScheduledEpic:
    """Roll an epic's placed tickets up into a ScheduledEpic."""
    marked = mark_critical_path(tickets)
    return ScheduledEpic(
        epic=epic,
        tickets=marked,
        total_dev_days=sum(t.dev_days for t in marked),
        start_day=min((t.start_day for t in marked), default=0),
        end_day=max((t.end_day for t in marked), default=0),
    )


def build_scheduled_epics(
    epics: list[Epic], scheduled: list[ScheduledTicket]
) -> list[ScheduledEpic]:
    """Aggregate placed tickets per epic, largest epics first."""
    by_epic: dict[str, list[ScheduledTicket]] = {epic.key: [] for epic in epics}
    for ticket in scheduled:
        if ticket.epic_key in by_epic:
            by_epic[ticket.epic_key].append(ticket)

    result = [build_scheduled_epic(epic, by_epic[epic.key]) for epic in epics]
    result.sort(key=lambda e: -e.total_dev_days)
    return result
