"""Calendar primitives: date parsing in a fixed zone and work-day arithmetic.

All scheduling happens on calendar dates. Timestamps coming from the tracker
are reduced to a date once, here, so the rest of the engine never handles
times or zones.
"""

from datetime import date, datetime, timedelta

import pytz

from .constants import DEFAULT_TIMEZONE, WEEKEND_DAYS
from .exceptions import InvalidDateError, InvalidInputError


def get_timezone(name: str = DEFAULT_TIMEZONE) -> pytz.BaseTzInfo:
    """Resolve an IANA zone name."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise InvalidInputError(f"unknown time zone {name!r}", field="timezone") from None


def has_time_component(value: str) -> bool:
    """Check if an ISO string carries a time of day."""
    return "T" in value or " " in value.strip()


def parse_datetime(value: str, tz: pytz.BaseTzInfo | None = None) -> datetime:
    """Parse an ISO date/time into an aware datetime in ``tz``.

    Naive timestamps are treated as UTC. Date-only strings become local
    midnight.
    """
    tz = tz or get_timezone()
    text = (value or "").strip()
    if not text:
        raise InvalidDateError(value)
    try:
        if not has_time_component(text):
            return tz.localize(datetime.combine(date.fromisoformat(text), datetime.min.time()))
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDateError(value) from None
    if parsed.tzinfo is None:
        parsed = pytz.UTC.localize(parsed)
    return parsed.astimezone(tz)


def parse_date(value: str) -> date:
    """Resolve an ISO date or date-time to a calendar date.

    Date-times resolve to their UTC calendar date (the tracker stores sprint
    boundaries at midnight UTC); date-only strings are taken as they are.

    Raises:
        InvalidDateError: If value is empty or not ISO 8601
    """
    text = (value or "").strip()
    if not text:
        raise InvalidDateError(value)
    if not has_time_component(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(value) from None
    return parse_datetime(text, pytz.UTC).date()


def is_weekend(day: date) -> bool:
    """Check if a date is Saturday or Sunday."""
    return day.weekday() in WEEKEND_DAYS


def add_work_days(start: date, work_days: int) -> date:
    """Advance ``work_days`` non-weekend days from ``start``.

    ``add_work_days(d, 0)`` returns ``d`` even when ``d`` is a weekend.
    """
    result = start
    remaining = work_days
    while remaining > 0:
        result += timedelta(days=1)
        if not is_weekend(result):
            remaining -= 1
    return result


def work_days_in_range(start: date, end: date) -> list[date]:
    """Non-weekend dates in ``[start, end)``."""
    days = []
    current = start
    while current < end:
        if not is_weekend(current):
            days.append(current)
        current += timedelta(days=1)
    return days


def work_days_between(start: date, end: date) -> int:
    """Count of non-weekend days in ``[start, end)``."""
    return len(work_days_in_range(start, end))


def previous_workday(day: date) -> date:
    """The closest work day strictly before ``day``."""
    result = day - timedelta(days=1)
    while is_weekend(result):
        result -= timedelta(days=1)
    return result
