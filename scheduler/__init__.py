"""Rescheduling engine: recurrence expansion, availability, packing and fillers."""

from .errors import (
    ConfigurationError,
    NoAvailableSlotError,
    RecurrenceParseError,
    ScheduleError,
    UnresolvedConstraintError,
)
from .pipeline import reschedule
from .types import AvailabilityDay, DroppedEvent, EventKind, ScheduledEvent, SchedulerConfig, SchedulingResult

__all__ = [
    "AvailabilityDay",
    "ConfigurationError",
    "DroppedEvent",
    "EventKind",
    "NoAvailableSlotError",
    "RecurrenceParseError",
    "ScheduleError",
    "ScheduledEvent",
    "SchedulerConfig",
    "SchedulingResult",
    "UnresolvedConstraintError",
    "reschedule",
]
