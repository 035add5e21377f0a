"""Scheduler configuration and input loading."""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Self

from .constants import (
    DEFAULT_MAX_DEVELOPERS,
    DEFAULT_TIMEZONE,
    END_DATE_HOUR_THRESHOLD,
    MAX_TICKET_DEV_DAYS,
    SCHEDULER_CONFIG_FILE,
    SPRINT_DATE_OVERRIDES_FILE,
    START_DATE_HOUR_THRESHOLD,
    TIMEZONE_ENV_VAR,
)
from .exceptions import InvalidInputError
from .models import SchedulingInput, SprintDateOverride


@dataclass(frozen=True)
class SchedulerConfig:
    """Settings for a scheduling run.

    Attributes:
        timezone: IANA zone used to resolve sprint timestamps to calendar dates
        max_ticket_dev_days: Largest ticket accepted before placement
        default_max_developers: Daily capacity used when the input omits it
        auto_adjust_dates: Shift late sprint starts / early sprint ends
        start_hour_threshold: Local hour at/after which a start moves a day later
        end_hour_threshold: Local hour before which an end moves to the previous workday
    """

    timezone: str = DEFAULT_TIMEZONE
    max_ticket_dev_days: int = MAX_TICKET_DEV_DAYS
    default_max_developers: int = DEFAULT_MAX_DEVELOPERS
    auto_adjust_dates: bool = False
    start_hour_threshold: int = START_DATE_HOUR_THRESHOLD
    end_hour_threshold: int = END_DATE_HOUR_THRESHOLD

    @classmethod
    def from_env(cls) -> Self:
        """Build config from environment variables."""
        return cls(timezone=os.getenv(TIMEZONE_ENV_VAR, DEFAULT_TIMEZONE))

    def with_overrides(self, overrides: dict[str, Any]) -> Self:
        """Return a copy with known keys replaced; unknown keys are rejected."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise InvalidInputError(
                f"unknown setting(s): {', '.join(unknown)}", item=SCHEDULER_CONFIG_FILE
            )
        return replace(self, **overrides)


class ConfigLoader:
    """Loader for optional configuration files in a directory."""

    def __init__(self, config_dir: Path | None = None):
        """
        Initialize configuration loader.

        Args:
            config_dir: Directory containing configuration files.
                       Expected (optional) files:
                       - scheduler.json
                       - sprint-date-overrides.json
        """
        if config_dir is None:
            config_dir = Path("config")

        self.config_dir = Path(config_dir)

    def _get_path(self, filename: str) -> Path | None:
        """Get path to config file if it exists."""
        path = self.config_dir / filename
        return path if path.exists() else None

    def load_config(self, base: SchedulerConfig | None = None) -> SchedulerConfig:
        """Load scheduler.json on top of the environment-derived config."""
        config = base or SchedulerConfig.from_env()
        path = self._get_path(SCHEDULER_CONFIG_FILE)
        if path is None:
            return config
        return config.with_overrides(_read_json(path))

    def load_sprint_date_overrides(self) -> list[SprintDateOverride]:
        """Load sprint-date-overrides.json, or an empty list if absent."""
        path = self._get_path(SPRINT_DATE_OVERRIDES_FILE)
        if path is None:
            return []
        return load_sprint_date_overrides(path)


def _read_json(path: Path | str) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"not valid JSON ({e.msg} at line {e.lineno})", item=str(path)) from e


def load_scheduling_input(
    input_path: Path | str, default_max_developers: int = DEFAULT_MAX_DEVELOPERS
) -> SchedulingInput:
    """Load the engine input contract from a JSON file.

    Args:
        input_path: Path to JSON with epics, tickets, sprints,
            sprintCapacities and maxDevelopers
        default_max_developers: Daily capacity used when maxDevelopers is absent

    Returns:
        SchedulingInput instance
    """
    data = _read_json(input_path)
    if not isinstance(data, dict):
        raise InvalidInputError("expected a JSON object at the top level", item=str(input_path))
    return SchedulingInput.from_dict(data, default_max_developers)


def load_sprint_date_overrides(input_path: Path | str) -> list[SprintDateOverride]:
    """Load a JSON list of sprint date overrides."""
    data = _read_json(input_path)
    if isinstance(data, dict):
        data = data.get("overrides", [])
    return [SprintDateOverride.from_dict(item) for item in data]
