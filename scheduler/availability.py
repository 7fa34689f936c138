"""Availability calendar construction."""

from collections.abc import Callable, Iterable
from typing import Optional
from datetime import date, datetime, time, timedelta, tzinfo

from reader.models import CalendarEvent
from .errors import ConfigurationError
from .types import AvailabilityDay, SchedulerConfig


WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


def build_slot_catalogue(config: SchedulerConfig) -> list[time]:
    """List the start times of all slots in a working day.

    The default configuration gives 09:00, 09:30, ..., 17:30.
    """
    anchor = date(2000, 1, 1)
    current = datetime.combine(anchor, config.day_start)
    end = datetime.combine(anchor, config.day_end)

    slots: list[time] = []
    while current + config.slot_width <= end:
        slots.append(current.time())
        current += config.slot_width
    return slots


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time(), tzinfo=tz)


def holiday_predicate(holidays: Iterable[CalendarEvent], tz: tzinfo) -> Callable[[datetime], bool]:
    """Build a predicate telling whether a day start is a holiday.

    Days are compared as instants: a holiday matches a day if it starts at
    exactly the instant the day starts.
    """
    holiday_starts = {holiday.start for holiday in holidays}

    def is_holiday(day_start: datetime) -> bool:
        return day_start in holiday_starts

    return is_holiday


def build_availability(
    range_start: date,
    range_end: date,
    tz: tzinfo,
    is_holiday: Callable[[datetime], bool],
    slots: list[time],
) -> list[AvailabilityDay]:
    """Build one availability record per day of the target range.

    Args:
        range_start: First day of the target range.
        range_end: Last day of the target range (inclusive).
        tz: Timezone the days are anchored in.
        is_holiday: Predicate on a day's start-of-day instant.
        slots: Slot catalogue of a working day.

    Returns:
        Availability days indexed by day offset from range_start.

    Raises:
        ConfigurationError: If range_end is before range_start.
    """
    if range_end < range_start:
        raise ConfigurationError(
            f"End date {range_end.isoformat()} is before start date {range_start.isoformat()}"
        )

    days: list[AvailabilityDay] = []
    for offset in range((range_end - range_start).days + 1):
        day = range_start + timedelta(days=offset)
        day_start = start_of_day(day, tz)
        closed = day.weekday() in WEEKEND_DAYS or is_holiday(day_start)

        days.append(AvailabilityDay(
            date=day,
            start=day_start,
            is_weekend_or_holiday=closed,
            week_number=offset // 7 + 1,
            open_slots=[] if closed else list(slots),
        ))

    return days


def day_index(days: list[AvailabilityDay], day: date) -> int:
    """Offset of a date from the first availability day (may be out of range)."""
    if not days:
        return 0
    return (day - days[0].date).days


def first_working_index(days: list[AvailabilityDay], start: int = 0) -> Optional[int]:
    """Index of the first working day at or after ``start``."""
    for index in range(max(start, 0), len(days)):
        if not days[index].is_weekend_or_holiday:
            return index
    return None
