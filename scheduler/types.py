"""
Type definitions for the rescheduling engine.

This module contains the shared records passed between the availability
builder, the constraint resolver, the packer and the filler generator.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Optional

from reader.models import CalendarEvent


class EventKind(Enum):
    SCHEDULED = "scheduled"
    FILLER = "filler"
    HOLIDAY = "holiday"


@dataclass(frozen=True)
class SchedulerConfig:
    """Configuration parameters for the scheduler."""

    slot_minutes: int = 30
    day_start: time = time(9, 0)
    day_end: time = time(18, 0)
    filler_label: Optional[str] = "Filler"
    holiday_label: str = "Holiday"
    holiday_start: time = time(9, 0)
    holiday_end: time = time(18, 0)
    skip_invalid_recurrence: bool = True

    def __post_init__(self) -> None:
        if self.slot_minutes <= 0:
            raise ValueError("Slot width must be positive")
        if self.day_start >= self.day_end:
            raise ValueError("Working day must start before it ends")
        if self.holiday_start >= self.holiday_end:
            raise ValueError("Holiday events must start before they end")

    @property
    def slot_width(self) -> timedelta:
        return timedelta(minutes=self.slot_minutes)


@dataclass
class AvailabilityDay:
    """Availability of one calendar day in the target range.

    ``open_slots`` is consumed by the packer; weekend and holiday days start
    with no open slots and are never touched.
    """

    date: date
    start: datetime
    is_weekend_or_holiday: bool
    week_number: int
    open_slots: list[time] = field(default_factory=list)

    def has_slots(self, slots: list[time]) -> bool:
        open_slots = set(self.open_slots)
        return all(slot in open_slots for slot in slots)

    def consume(self, slots: list[time]) -> None:
        taken = set(slots)
        self.open_slots = [slot for slot in self.open_slots if slot not in taken]


@dataclass(frozen=True)
class ScheduledEvent:
    """An event placed in the target range."""

    start: datetime
    end: datetime
    summary: str
    kind: EventKind = EventKind.SCHEDULED
    source: Optional[CalendarEvent] = None
    description: str = ""
    location: str = ""
    url: str = ""
    all_day: bool = False

    @classmethod
    def from_event(cls, event: CalendarEvent, start: datetime, end: datetime) -> "ScheduledEvent":
        return cls(
            start=start,
            end=end,
            summary=event.summary,
            source=event,
            description=event.description,
            location=event.location,
            url=event.url,
            all_day=event.all_day,
        )

    @property
    def optional(self) -> bool:
        return self.source is not None and self.source.optional


@dataclass(frozen=True)
class DroppedEvent:
    """An event that could not be placed in the target range."""

    event: CalendarEvent
    reason: str


@dataclass(frozen=True)
class SchedulingResult:
    """Complete rescheduling result."""

    events: list[ScheduledEvent]
    dropped: list[DroppedEvent]
    days: list[AvailabilityDay]
    timezone: tzinfo

    @property
    def scheduled(self) -> list[ScheduledEvent]:
        return [event for event in self.events if event.kind is EventKind.SCHEDULED]

    @property
    def fillers(self) -> list[ScheduledEvent]:
        return [event for event in self.events if event.kind is EventKind.FILLER]

    @property
    def holidays(self) -> list[ScheduledEvent]:
        return [event for event in self.events if event.kind is EventKind.HOLIDAY]
