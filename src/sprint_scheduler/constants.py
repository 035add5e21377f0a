"""Constants for the sprint scheduler."""

# Largest ticket a single sprint can hold (work days)
MAX_TICKET_DEV_DAYS = 10

# Default daily capacity (tickets in progress per work day)
DEFAULT_MAX_DEVELOPERS = 5

# Calendar
DEFAULT_TIMEZONE = "America/Chicago"
TIMEZONE_ENV_VAR = "SPRINT_SCHEDULER_TIMEZONE"
WEEKEND_DAYS = {5, 6}  # date.weekday(): Saturday, Sunday

# Sprint date auto-adjustment (local hour in the configured zone)
START_DATE_HOUR_THRESHOLD = 17  # starts at/after 5PM move to the next day
END_DATE_HOUR_THRESHOLD = 8  # ends before 8AM move to the previous workday

# Dependency leveling
CYCLE_PARALLEL_GROUP = 999
CYCLE_CRITICAL_PATH_WEIGHT = 0

# Config file names
SCHEDULER_CONFIG_FILE = "scheduler.json"
SPRINT_DATE_OVERRIDES_FILE = "sprint-date-overrides.json"
