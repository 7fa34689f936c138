"""Filler and holiday event generation."""

from datetime import datetime, time, timedelta, tzinfo

from reader.models import CalendarEvent
from .types import AvailabilityDay, EventKind, ScheduledEvent, SchedulerConfig


def contiguous_runs(slots: list[time], width: timedelta) -> list[list[time]]:
    """Split ordered slots into runs where each slot follows the previous one."""
    runs: list[list[time]] = []
    anchor = datetime(2000, 1, 1)

    for slot in slots:
        if runs:
            previous = datetime.combine(anchor.date(), runs[-1][-1])
            if datetime.combine(anchor.date(), slot) == previous + width:
                runs[-1].append(slot)
                continue
        runs.append([slot])
    return runs


def generate_fillers(days: list[AvailabilityDay], label: str, config: SchedulerConfig) -> list[ScheduledEvent]:
    """Emit one filler event per run of open slots on each working day."""
    fillers: list[ScheduledEvent] = []
    width = config.slot_width

    for day in days:
        if day.is_weekend_or_holiday:
            continue
        tz = day.start.tzinfo
        for run in contiguous_runs(day.open_slots, width):
            start = datetime.combine(day.date, run[0], tzinfo=tz)
            end = datetime.combine(day.date, run[-1], tzinfo=tz) + width
            fillers.append(ScheduledEvent(start=start, end=end, summary=label, kind=EventKind.FILLER))

    return fillers


def materialize_holidays(holidays: list[CalendarEvent], tz: tzinfo, config: SchedulerConfig) -> list[ScheduledEvent]:
    """Emit a full-day event for each holiday."""
    events: list[ScheduledEvent] = []

    for holiday in holidays:
        day = holiday.start.astimezone(tz).date()
        events.append(ScheduledEvent(
            start=datetime.combine(day, config.holiday_start, tzinfo=tz),
            end=datetime.combine(day, config.holiday_end, tzinfo=tz),
            summary=config.holiday_label,
            kind=EventKind.HOLIDAY,
            description=holiday.summary,
            source=holiday,
        ))

    return events
