"""Sprint scheduling algorithm: epics and tickets onto capacity-bound sprints."""

import logging
from pathlib import Path

from ..config import ConfigLoader, SchedulerConfig
from ..dates import add_work_days
from ..models import SchedulingInput, SprintDateOverride
from ..sprints import apply_sprint_date_overrides, auto_adjust_sprint_dates
from .capacity import build_daily_capacity_map, select_sprints_with_capacity
from .critical_path import build_scheduled_epics
from .models import ScheduleResult, SprintWithCapacity
from .placement import GreedyPlacer, validate_ticket_sizes

logger = logging.getLogger(__name__)


class SprintScheduler:
    """Greedy scheduler for epics over a sequence of sprints.

    Steps:
    1. Validate: reject tickets larger than a sprint can hold
    2. Sprints: apply date overrides, keep sprints with capacity and dates
    3. Capacity map: one record per distinct work day
    4. Place commit epics linearly, then stretch/none epics into free capacity
    5. Mark each epic's critical path and roll up totals

    A run is a pure function of its input: every call builds and discards
    its own capacity map.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        date_overrides: list[SprintDateOverride] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config: Scheduler settings (defaults from the environment)
            date_overrides: Planner-supplied sprint dates
        """
        self.config = config or SchedulerConfig.from_env()
        self.date_overrides = date_overrides or []

    def prepare_sprints(self, data: SchedulingInput) -> list[SprintWithCapacity]:
        """Apply overrides/adjustments and select the sprints that take work."""
        sprints = apply_sprint_date_overrides(data.sprints, self.date_overrides)
        if self.config.auto_adjust_dates:
            sprints = auto_adjust_sprint_dates(
                sprints,
                self.config.timezone,
                self.config.start_hour_threshold,
                self.config.end_hour_threshold,
            )
        return select_sprints_with_capacity(sprints, data.sprint_capacities)

    def schedule(self, data: SchedulingInput) -> ScheduleResult:
        """Generate the timeline.

        Args:
            data: Epics, tickets, sprints, capacities and daily capacity

        Returns:
            ScheduleResult with placed epics, capacity snapshot and totals

        Raises:
            OversizedTicketError: A ticket exceeds the per-sprint maximum
            NoValidSprintsError: No sprint has capacity and valid dates
        """
        validate_ticket_sizes(data.tickets, self.config.max_ticket_dev_days)

        sprints = self.prepare_sprints(data)
        logger.info(
            f"Scheduling {len(data.tickets)} tickets in {len(data.epics)} epics "
            f"over {len(sprints)} sprints"
        )

        capacity = build_daily_capacity_map(sprints, data.max_developers, data.sprint_capacities)

        placer = GreedyPlacer(capacity, data.tickets)
        placer.place_tiers(data.epics)

        epics = build_scheduled_epics(data.epics, placer.scheduled)

        total_dev_days = sum(t.dev_days for t in placer.scheduled)
        total_days = max((t.end_day for t in placer.scheduled), default=0)
        project_start = sprints[0].start

        result = ScheduleResult(
            epics=epics,
            sprints=sprints,
            daily_capacities=capacity.to_info(),
            project_start_date=project_start,
            project_end_date=add_work_days(project_start, total_days),
            total_dev_days=total_dev_days,
            total_days=total_days,
            unscheduled_tickets=placer.unscheduled,
        )

        logger.info(
            f"Placed {len(placer.scheduled)} tickets ({total_dev_days} dev days) "
            f"over {total_days} work days; {len(placer.unscheduled)} left unscheduled"
        )
        if result.overbooked_days:
            logger.warning(
                f"Capacity overbooked on {len(result.overbooked_days)} day(s): "
                f"{result.overbooked_days}"
            )
        return result


def schedule_tickets(
    data: SchedulingInput, config: SchedulerConfig | None = None
) -> ScheduleResult:
    """Run the scheduler once with default settings."""
    return SprintScheduler(config).schedule(data)


def create_scheduler(
    config_dir: Path | None = None,
    config: SchedulerConfig | None = None,
) -> SprintScheduler:
    """Factory function to create a scheduler from a configuration directory.

    Args:
        config_dir: Directory with optional scheduler.json and
            sprint-date-overrides.json
        config: Base settings to layer scheduler.json on

    Returns:
        Configured SprintScheduler instance
    """
    loader = ConfigLoader(config_dir)
    return SprintScheduler(
        config=loader.load_config(config),
        date_overrides=loader.load_sprint_date_overrides(),
    )
