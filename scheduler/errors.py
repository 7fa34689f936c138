"""Exceptions raised by the rescheduling engine."""


class ScheduleError(Exception):
    """Base class for scheduling errors."""


class ConfigurationError(ScheduleError):
    """Invalid invocation parameters, raised before scheduling starts."""


class UnresolvedConstraintError(ScheduleError):
    """A relative constraint references an event that was not scheduled yet."""

    def __init__(self, event_summary: str, reference: str) -> None:
        self.event_summary = event_summary
        self.reference = reference
        super().__init__(
            f"Event '{event_summary}' is scheduled relative to '{reference}', "
            f"but no earlier event matching '{reference}' has been scheduled"
        )


class NoAvailableSlotError(ScheduleError):
    """No working day in the target range can take the event."""


class RecurrenceParseError(ScheduleError):
    """A recurrence rule could not be expanded."""
