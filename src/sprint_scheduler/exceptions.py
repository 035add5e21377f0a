"""Custom exceptions for the sprint scheduler."""


class SchedulingError(Exception):
    """Base exception for scheduling errors."""

    pass


class OversizedTicketError(SchedulingError):
    """One or more tickets exceed the effort a single sprint can hold."""

    def __init__(self, tickets: list[tuple[str, int]], max_dev_days: int = 10):
        self.tickets = tickets
        self.max_dev_days = max_dev_days
        details = ", ".join(f"{key} ({dev_days}pts)" for key, dev_days in tickets)
        super().__init__(
            f"Stories exceed {max_dev_days} points (max for a sprint): {details}"
        )

    @property
    def ticket_keys(self) -> list[str]:
        """Keys of the offending tickets."""
        return [key for key, _ in self.tickets]


class NoValidSprintsError(SchedulingError):
    """No sprint has both a capacity configuration and valid dates."""

    def __init__(self, sprint_ids: list[int] | None = None):
        self.sprint_ids = sprint_ids or []
        message = "No valid sprints with capacity found"
        if self.sprint_ids:
            message += f". Sprints considered: {', '.join(map(str, self.sprint_ids))}"
        super().__init__(message)


class InvalidInputError(SchedulingError):
    """Input data validation failed."""

    def __init__(self, message: str, field: str | None = None, item: str | None = None):
        self.field = field
        self.item = item
        location = ""
        if item:
            location += f" in '{item}'"
        if field:
            location += f" (field '{field}')"
        super().__init__(f"Invalid input{location}: {message}")


class InvalidDateError(SchedulingError):
    """A date string could not be parsed."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date: {value!r}. Expected an ISO 8601 date or date-time")
