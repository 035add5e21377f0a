"""Calendar/capacity map: the ordered sequence of work days a run places onto."""

import logging
from collections.abc import Iterator
from datetime import date

from ..dates import parse_date, work_days_in_range
from ..exceptions import InvalidDateError, NoValidSprintsError
from ..models import Sprint, SprintCapacity
from .models import DayCapacity, DayCapacityInfo, SprintWithCapacity

logger = logging.getLogger(__name__)


def _resolve_dates(sprint: Sprint) -> tuple[date, date] | None:
    if not sprint.start_date or not sprint.end_date:
        return None
    try:
        return parse_date(sprint.start_date), parse_date(sprint.end_date)
    except InvalidDateError as e:
        logger.warning(f"Skipping sprint {sprint.id} ({sprint.name}): {e}")
        return None


def select_sprints_with_capacity(
    sprints: list[Sprint], sprint_capacities: list[SprintCapacity]
) -> list[SprintWithCapacity]:
    """Pick the sprints that can take work.

    A sprint qualifies when it has a capacity configuration and both of its
    dates resolve. The result is ordered by start date.

    Raises:
        NoValidSprintsError: If no sprint qualifies
    """
    capacity_by_sprint = {c.sprint_id: c for c in sprint_capacities}
    selected = []
    for sprint in sprints:
        capacity = capacity_by_sprint.get(sprint.id)
        if capacity is None:
            continue
        resolved = _resolve_dates(sprint)
        if resolved is None:
            continue
        start, end = resolved
        selected.append(
            SprintWithCapacity(
                sprint=sprint,
                dev_days_capacity=capacity.dev_days_capacity,
                start=start,
                end=end,
            )
        )

    if not selected:
        raise NoValidSprintsError([s.id for s in sprints])

    selected.sort(key=lambda s: s.start)
    return selected


class CapacityMap:
    """Index-addressed sequence of work days owned by a single scheduling run.

    The list position of a day is the global "day" coordinate. Placement
    mutates ``remaining_capacity`` in place, so a map must never be shared
    between runs.
    """

    def __init__(self, days: list[DayCapacity]) -> None:
        self.days = days
        # index -> last index of the same sprint
        self._sprint_end: list[int] = [0] * len(days)
        last = len(days) - 1
        for i in range(len(days) - 1, -1, -1):
            if i < len(days) - 1 and days[i + 1].sprint_id != days[i].sprint_id:
                last = i
            self._sprint_end[i] = last

    def __len__(self) -> int:
        return len(self.days)

    def __getitem__(self, index: int) -> DayCapacity:
        return self.days[index]

    def __iter__(self) -> Iterator[DayCapacity]:
        return iter(self.days)

    def sprint_end_index(self, index: int) -> int:
        """Last day index of the sprint containing ``index``."""
        if index >= len(self.days):
            return index
        return self._sprint_end[index]

    def next_sprint_start(self, index: int) -> int:
        """First day index of the sprint after the one containing ``index``.

        Returns ``len(self)`` when there is no later sprint.
        """
        if index >= len(self.days):
            return len(self.days)
        return self._sprint_end[index] + 1

    def fits_in_sprint(self, index: int, dev_days: int) -> bool:
        """Check if ``[index, index + dev_days)`` stays within one sprint."""
        if index >= len(self.days):
            return False
        return dev_days <= self._sprint_end[index] - index + 1

    def has_capacity(self, index: int, dev_days: int) -> bool:
        """Check if every day of the span has remaining capacity."""
        return all(
            self.days[d].remaining_capacity > 0
            for d in range(index, min(index + dev_days, len(self.days)))
        )

    def consume(self, index: int, dev_days: int) -> None:
        """Decrement capacity by one for each day of the span, unconditionally."""
        for d in range(index, min(index + dev_days, len(self.days))):
            self.days[d].remaining_capacity -= 1

    def find_sprint_fit(self, earliest: int, dev_days: int) -> int | None:
        """First start at or after ``earliest`` where the span fits in one sprint.

        Jumps to the next sprint's first day whenever the current sprint is
        too short. Capacity is not considered.
        """
        index = earliest
        while index < len(self.days):
            if self.fits_in_sprint(index, dev_days):
                return index
            index = self.next_sprint_start(index)
        return None

    def find_available_slot(self, earliest: int, dev_days: int) -> int | None:
        """First start at or after ``earliest`` with capacity on every day of the span."""
        for index in range(max(0, earliest), len(self.days)):
            if self.fits_in_sprint(index, dev_days) and self.has_capacity(index, dev_days):
                return index
        return None

    def date_at(self, index: int) -> date:
        return self.days[index].date

    def sprint_at(self, index: int) -> int:
        return self.days[index].sprint_id

    def to_info(self) -> list[DayCapacityInfo]:
        """Snapshot for display."""
        return [
            DayCapacityInfo(
                date=day.date,
                day_index=index,
                sprint_id=day.sprint_id,
                total_capacity=day.original_capacity,
                remaining_capacity=day.remaining_capacity,
                used_capacity=day.used_capacity,
            )
            for index, day in enumerate(self.days)
        ]


def build_daily_capacity_map(
    sprints: list[SprintWithCapacity],
    max_developers: int,
    sprint_capacities: list[SprintCapacity],
) -> CapacityMap:
    """Build the ordered work-day sequence across the selected sprints.

    Each sprint contributes its weekdays in ``[start, end)``. A date already
    claimed by an earlier sprint is skipped, so touching sprints do not
    double-count their shared boundary. A day's capacity is the sprint's
    per-day override for that date, else the global ``max_developers``.

    Args:
        sprints: Selected sprints, ordered by start date
        max_developers: Global default daily capacity
        sprint_capacities: Capacity configs holding per-day overrides

    Returns:
        A fresh CapacityMap
    """
    capacity_by_sprint = {c.sprint_id: c for c in sprint_capacities}
    days: list[DayCapacity] = []
    claimed: set[date] = set()

    for sprint in sprints:
        sprint_capacity = capacity_by_sprint.get(sprint.id)
        sprint_day_index = 0
        for day in work_days_in_range(sprint.start, sprint.end):
            if day in claimed:
                continue
            claimed.add(day)

            override = (
                sprint_capacity.override_for(day.isoformat()) if sprint_capacity else None
            )
            capacity = override if override is not None else max_developers
            days.append(
                DayCapacity(
                    date=day,
                    sprint_id=sprint.id,
                    original_capacity=capacity,
                    remaining_capacity=capacity,
                    sprint_day_index=sprint_day_index,
                )
            )
            sprint_day_index += 1

    logger.info(f"Built capacity map: {len(days)} work days across {len(sprints)} sprints")
    return CapacityMap(days)
