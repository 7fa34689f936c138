"""Reader module for loading calendar events and holiday feeds."""

from .holidays import HolidayFeedError, HolidayFetcher
from .models import (
    CalendarEvent,
    Constraint,
    ExpandedEvent,
    FixedConstraint,
    NoConstraint,
    RelativeConstraint,
)
from .reader import CalendarReader, ParsedCalendar

__all__ = [
    "CalendarEvent",
    "CalendarReader",
    "Constraint",
    "ExpandedEvent",
    "FixedConstraint",
    "HolidayFeedError",
    "HolidayFetcher",
    "NoConstraint",
    "ParsedCalendar",
    "RelativeConstraint",
]
