"""Data models for calendar events and their scheduling constraints."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal, Optional, Union


BUSINESS_DURATION_PATTERN = re.compile(r"\((\d+) days?\)\s*$")


@dataclass(frozen=True)
class NoConstraint:
    """Event is scheduled in arrival order."""

    optional: bool = False


@dataclass(frozen=True)
class RelativeConstraint:
    """Event is placed relative to the new start or end of another event."""

    summary: str
    anchor: Literal["start", "end"] = "start"
    offset_days: int = 0
    optional: bool = False

    def __post_init__(self) -> None:
        if not self.summary:
            raise ValueError("Relative constraint needs a summary to match")
        if self.anchor not in ("start", "end"):
            raise ValueError(f"Anchor must be 'start' or 'end', got {self.anchor!r}")


@dataclass(frozen=True)
class FixedConstraint:
    """Event is placed on a working day of a given week of the target range.

    ``day`` is the 1-based ordinal of the working day within the week, or a
    negative index counted from the end of the week (-1 = last working day).
    """

    week: int
    day: int
    optional: bool = False

    def __post_init__(self) -> None:
        if self.week < 1:
            raise ValueError(f"Week must be at least 1, got {self.week}")
        if self.day == 0:
            raise ValueError("Day ordinal must be non-zero")


Constraint = Union[NoConstraint, RelativeConstraint, FixedConstraint]


@dataclass(frozen=True)
class CalendarEvent:
    """Represents a single event read from a calendar file."""

    start: datetime
    end: datetime
    summary: str
    description: str = ""
    location: str = ""
    url: str = ""
    rrule: Optional[str] = None
    uid: str = ""
    all_day: bool = False
    exdates: frozenset[datetime] = field(default_factory=frozenset)
    constraint: Constraint = field(default_factory=NoConstraint)

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError(f"Event '{self.summary}' must have timezone-aware times")
        if self.end < self.start:
            raise ValueError(f"Event '{self.summary}' ends before it starts")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def optional(self) -> bool:
        return self.constraint.optional

    @property
    def business_days(self) -> int:
        return business_duration(self.summary)


@dataclass(frozen=True)
class ExpandedEvent(CalendarEvent):
    """One occurrence of a recurring event."""

    origin_uid: str = ""
    occurrence_index: int = 0


def business_duration(summary: str) -> int:
    """Parse the trailing "(N days)" suffix of a summary, default 1."""
    match = BUSINESS_DURATION_PATTERN.search(summary)
    if match:
        return max(int(match.group(1)), 1)
    return 1
