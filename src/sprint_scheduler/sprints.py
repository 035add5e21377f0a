"""Sprint date preparation applied before the capacity map is built."""

import logging
from dataclasses import replace
from datetime import timedelta

import pytz

from .constants import END_DATE_HOUR_THRESHOLD, START_DATE_HOUR_THRESHOLD
from .dates import get_timezone, has_time_component, parse_datetime, previous_workday
from .exceptions import InvalidDateError
from .models import Sprint, SprintDateOverride

logger = logging.getLogger(__name__)


def apply_sprint_date_overrides(
    sprints: list[Sprint], overrides: list[SprintDateOverride]
) -> list[Sprint]:
    """Replace start/end dates of sprints that have an override.

    Args:
        sprints: Sprints as delivered by the tracker
        overrides: Planner-supplied dates

    Returns:
        New list with overridden dates applied
    """
    if not overrides:
        return list(sprints)

    override_map = {o.sprint_id: o for o in overrides}
    result = []
    for sprint in sprints:
        override = override_map.get(sprint.id)
        if override:
            sprint = replace(sprint, start_date=override.start_date, end_date=override.end_date)
        result.append(sprint)
    return result


def _adjusted_start(value: str, tz: pytz.BaseTzInfo, threshold: int) -> str:
    if not value or not has_time_component(value):
        return value
    try:
        local = parse_datetime(value, tz)
    except InvalidDateError:
        # Left for sprint selection to reject
        return value
    if local.hour >= threshold:
        return (local + timedelta(days=1)).date().isoformat()
    return value


def _adjusted_end(value: str, tz: pytz.BaseTzInfo, threshold: int) -> str:
    if not value or not has_time_component(value):
        return value
    try:
        local = parse_datetime(value, tz)
    except InvalidDateError:
        return value
    if local.hour < threshold:
        return previous_workday(local.date()).isoformat()
    return value


def auto_adjust_sprint_dates(
    sprints: list[Sprint],
    timezone: str | None = None,
    start_hour_threshold: int = START_DATE_HOUR_THRESHOLD,
    end_hour_threshold: int = END_DATE_HOUR_THRESHOLD,
) -> list[Sprint]:
    """Auto-adjust sprint dates based on time of day in the configured zone.

    - Start times at or after 5PM move to the next day
    - End times before 8AM move to the previous workday

    Only values carrying a time of day are inspected; plain dates are kept.

    Args:
        sprints: Sprints to adjust
        timezone: IANA zone name (defaults to the configured default)
        start_hour_threshold: Local hour for the start rule
        end_hour_threshold: Local hour for the end rule

    Returns:
        New list of sprints
    """
    tz = get_timezone(timezone) if timezone else get_timezone()
    result = []
    for sprint in sprints:
        start = _adjusted_start(sprint.start_date, tz, start_hour_threshold)
        end = _adjusted_end(sprint.end_date, tz, end_hour_threshold)
        if start != sprint.start_date or end != sprint.end_date:
            logger.debug(
                f"Adjusted sprint {sprint.id} dates: "
                f"{sprint.start_date}..{sprint.end_date} -> {start}..{end}"
            )
            sprint = replace(sprint, start_date=start, end_date=end)
        result.append(sprint)
    return result
