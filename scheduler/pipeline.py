"""Rescheduling pipeline: expansion, availability, packing, fillers, holidays."""

import logging
from collections.abc import Iterable
from datetime import date, tzinfo
from typing import Optional

from reader.models import CalendarEvent
from .availability import build_availability, build_slot_catalogue, holiday_predicate
from .errors import ConfigurationError
from .filler import generate_fillers, materialize_holidays
from .packing import SlotPacker
from .recurrence import expand_events
from .types import SchedulerConfig, SchedulingResult


logger = logging.getLogger(__name__)


def reschedule(
    events: list[CalendarEvent],
    range_start: date,
    range_end: date,
    tz: tzinfo,
    holidays: Iterable[CalendarEvent] = (),
    config: Optional[SchedulerConfig] = None,
) -> SchedulingResult:
    """Move calendar events onto the working days of a new date range.

    Args:
        events: Events read from the source calendar.
        range_start: First day of the target range.
        range_end: Last day of the target range (inclusive).
        tz: Calendar timezone.
        holidays: Full-day holiday events; an empty collection disables holidays.
        config: Scheduler configuration.

    Returns:
        Scheduled events followed by fillers and holidays, plus dropped events.

    Raises:
        ConfigurationError: If the range is empty.
        UnresolvedConstraintError: If a relative constraint has no referent.
        RecurrenceParseError: If a rule is invalid and skipping is disabled.
    """
    if range_end < range_start:
        raise ConfigurationError(
            f"End date {range_end.isoformat()} is before start date {range_start.isoformat()}"
        )
    config = config or SchedulerConfig()

    holiday_set = sorted(
        (h for h in holidays if range_start <= h.start.astimezone(tz).date() <= range_end),
        key=lambda h: h.start,
    )

    occurrences = expand_events(events, tz, range_end, skip_invalid=config.skip_invalid_recurrence)
    slots = build_slot_catalogue(config)
    days = build_availability(range_start, range_end, tz, holiday_predicate(holiday_set, tz), slots)

    packer = SlotPacker(days, slots, tz, config)
    scheduled = packer.pack(occurrences)

    fillers = generate_fillers(days, config.filler_label, config) if config.filler_label else []
    holiday_events = materialize_holidays(holiday_set, tz, config)

    logger.info(
        "Scheduled %d events, dropped %d, added %d fillers and %d holidays",
        len(scheduled), len(packer.dropped), len(fillers), len(holiday_events),
    )

    return SchedulingResult(
        events=scheduled + fillers + holiday_events,
        dropped=packer.dropped,
        days=days,
        timezone=tz,
    )
