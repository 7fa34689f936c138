"""Constraint resolution.

Turns an event's constraint into an anchor date: the earliest date the
packer may place the event on. Unconstrained events have no anchor.
"""

import logging
from collections.abc import Iterable
from datetime import date, time, timedelta, tzinfo
from typing import Optional

from reader.models import CalendarEvent, FixedConstraint, NoConstraint, RelativeConstraint
from .errors import NoAvailableSlotError, UnresolvedConstraintError
from .types import AvailabilityDay, DroppedEvent, ScheduledEvent


logger = logging.getLogger(__name__)


def original_day(event: CalendarEvent, tz: tzinfo) -> date:
    return event.start.astimezone(tz).date()


def find_reference(
    summary: str,
    scheduled: list[ScheduledEvent],
    tz: Optional[tzinfo] = None,
    before: Optional[date] = None,
) -> Optional[ScheduledEvent]:
    """Find the first scheduled event whose summary contains ``summary``.

    With ``before`` set, only events originally starting on an earlier day match.
    """
    for candidate in scheduled:
        if summary not in candidate.summary:
            continue
        if before is not None and candidate.source is not None:
            if original_day(candidate.source, tz) >= before:
                continue
        return candidate
    return None


def resolve_relative(
    event: CalendarEvent,
    constraint: RelativeConstraint,
    scheduled: list[ScheduledEvent],
    tz: tzinfo,
    dropped: Iterable[DroppedEvent] = (),
) -> date:
    """Anchor date of an event placed relative to an already scheduled one.

    The referenced event must originally start on an earlier day than the
    dependent event.

    Raises:
        NoAvailableSlotError: If the referenced event was dropped.
        UnresolvedConstraintError: If no earlier event matches.
    """
    day = original_day(event, tz)
    reference = find_reference(constraint.summary, scheduled, tz, before=day)
    if reference is None:
        for skipped in dropped:
            if constraint.summary in skipped.event.summary and original_day(skipped.event, tz) < day:
                raise NoAvailableSlotError(f"referenced event '{skipped.event.summary}' was dropped")
        raise UnresolvedConstraintError(event.summary, constraint.summary)

    if constraint.anchor == "end":
        local_end = reference.end.astimezone(tz)
        anchor = local_end.date()
        # An end at midnight belongs to the previous day
        if local_end.time() == time(0, 0) and reference.end > reference.start:
            anchor -= timedelta(days=1)
    else:
        anchor = reference.start.astimezone(tz).date()

    return anchor + timedelta(days=constraint.offset_days)


def resolve_fixed(constraint: FixedConstraint, days: list[AvailabilityDay]) -> date:
    """Anchor date of an event fixed to a working day of a given week.

    Raises:
        NoAvailableSlotError: If the week has no such working day.
    """
    working_days = [
        day for day in days
        if day.week_number == constraint.week and not day.is_weekend_or_holiday
    ]

    index = constraint.day - 1 if constraint.day > 0 else constraint.day
    try:
        return working_days[index].date
    except IndexError:
        raise NoAvailableSlotError(
            f"week {constraint.week} has no working day {constraint.day} "
            f"({len(working_days)} working days)"
        )


def resolve_anchor(
    event: CalendarEvent,
    scheduled: list[ScheduledEvent],
    days: list[AvailabilityDay],
    tz: tzinfo,
    dropped: Iterable[DroppedEvent] = (),
) -> Optional[date]:
    """Resolve an event's constraint into an anchor date, or None."""
    constraint = event.constraint

    if isinstance(constraint, RelativeConstraint):
        anchor = resolve_relative(event, constraint, scheduled, tz, dropped)
    elif isinstance(constraint, FixedConstraint):
        anchor = resolve_fixed(constraint, days)
    elif isinstance(constraint, NoConstraint):
        return None
    else:
        raise TypeError(f"Unknown constraint type: {type(constraint).__name__}")

    logger.debug("Anchored '%s' to %s", event.summary, anchor)
    return anchor
