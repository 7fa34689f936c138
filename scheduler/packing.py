"""
Slot packing.

Events are visited grouped by their original day, in chronological order,
and each one is moved to the earliest working day that still has the time
slots it needs. Time of day is preserved; only the date changes.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from reader.models import CalendarEvent, RelativeConstraint
from .availability import day_index, first_working_index
from .constraints import resolve_anchor
from .errors import NoAvailableSlotError
from .types import AvailabilityDay, DroppedEvent, ScheduledEvent, SchedulerConfig


logger = logging.getLogger(__name__)

FULL_DAY = timedelta(hours=24)


def group_by_original_day(events: list[CalendarEvent], tz: tzinfo) -> list[tuple[date, list[CalendarEvent]]]:
    """Group events by the local day they originally start on.

    Groups are ordered by day, events within a group by start time.
    """
    groups: dict[date, list[CalendarEvent]] = defaultdict(list)
    for event in events:
        groups[event.start.astimezone(tz).date()].append(event)

    return [
        (day, sorted(groups[day], key=lambda event: event.start))
        for day in sorted(groups)
    ]


def shift_days(moment: datetime, days: int, tz: tzinfo) -> datetime:
    """Move an instant by whole days, keeping its local wall-clock time."""
    local = moment.astimezone(tz).replace(tzinfo=None)
    return (local + timedelta(days=days)).replace(tzinfo=tz)


class SlotPacker:
    """Greedy packer that assigns events to days of an availability calendar.

    The packer owns the ``open_slots`` of the availability days and consumes
    them as events are placed.
    """

    def __init__(
        self,
        days: list[AvailabilityDay],
        slots: list[time],
        tz: tzinfo,
        config: Optional[SchedulerConfig] = None,
    ) -> None:
        """Initialize the packer.

        Args:
            days: Availability calendar, one entry per day of the range.
            slots: Slot catalogue of a working day.
            tz: Timezone the days are anchored in.
            config: Scheduler configuration (slot width).
        """
        self._days = days
        self._slots = slots
        self._tz = tz
        self._config = config or SchedulerConfig()
        self._scheduled: list[ScheduledEvent] = []
        self._dropped: list[DroppedEvent] = []

    @property
    def scheduled(self) -> list[ScheduledEvent]:
        return list(self._scheduled)

    @property
    def dropped(self) -> list[DroppedEvent]:
        return list(self._dropped)

    def required_slots(self, event: CalendarEvent) -> Optional[list[time]]:
        """Catalogue slots an event occupies on its day.

        Returns:
            The slots overlapping the event's time range, or None for events
            lasting a full day or longer (no slot matching).
        """
        if event.duration >= FULL_DAY:
            return None

        local_start = event.start.astimezone(self._tz).replace(tzinfo=None)
        local_end = event.end.astimezone(self._tz).replace(tzinfo=None)
        width = self._config.slot_width

        required: list[time] = []
        for slot in self._slots:
            slot_start = datetime.combine(local_start.date(), slot)
            if slot_start < local_end and slot_start + width > local_start:
                required.append(slot)
        return required

    def _select_day(self, start_index: int, slots: Optional[list[time]]) -> Optional[int]:
        """First working day at or after start_index with the slots free."""
        for index in range(max(start_index, 0), len(self._days)):
            day = self._days[index]
            if day.is_weekend_or_holiday:
                continue
            if slots is None or day.has_slots(slots):
                return index
        return None

    def _business_end(self, index: int, event: CalendarEvent, duration: int) -> datetime:
        """End of a multi-day event spanning ``duration`` working days.

        The window starts at the selected day and is grown by the number of
        weekend and holiday days inside it until that number stops changing.
        The event ends ``window`` days after its start, at its original end time.
        """
        window = duration
        while True:
            last = min(index + window, len(self._days))
            closed = sum(1 for day in self._days[index:last] if day.is_weekend_or_holiday)
            if duration + closed == window:
                break
            window = duration + closed

        end_time = event.end.astimezone(self._tz).time()
        end_date = self._days[index].date + timedelta(days=window)
        return datetime.combine(end_date, end_time, tzinfo=self._tz)

    def _search_start(self, event: CalendarEvent) -> int:
        """Day index the search for a free day starts at."""
        first_working = first_working_index(self._days)
        if first_working is None:
            first_working = len(self._days)

        anchor = resolve_anchor(event, self._scheduled, self._days, self._tz, self._dropped)
        if anchor is None:
            return first_working

        anchor_index = day_index(self._days, anchor)
        if isinstance(event.constraint, RelativeConstraint):
            return max(anchor_index, first_working)
        return anchor_index

    def place(self, event: CalendarEvent) -> ScheduledEvent:
        """Place a single event.

        Raises:
            NoAvailableSlotError: If no day in the range can take the event.
            UnresolvedConstraintError: If a relative constraint has no referent.
        """
        start_index = self._search_start(event)
        if start_index >= len(self._days):
            raise NoAvailableSlotError("no working day left in the range")

        slots = self.required_slots(event)
        index = self._select_day(start_index, slots)
        if index is None:
            raise NoAvailableSlotError("no working day with free slots left in the range")

        day = self._days[index]
        offset = (day.date - event.start.astimezone(self._tz).date()).days
        new_start = shift_days(event.start, offset, self._tz)
        new_end = shift_days(event.end, offset, self._tz)

        duration = event.business_days
        if duration > 1:
            new_end = self._business_end(index, event, duration)
        elif slots and not event.optional:
            day.consume(slots)

        logger.debug("Placed '%s' on %s (moved %d days)", event.summary, day.date, offset)
        return ScheduledEvent.from_event(event, new_start, new_end)

    def pack(self, events: list[CalendarEvent]) -> list[ScheduledEvent]:
        """Place all events, dropping those that do not fit.

        Returns:
            The scheduled events in placement order.

        Raises:
            UnresolvedConstraintError: If a relative constraint has no referent.
        """
        for original_day, group in group_by_original_day(events, self._tz):
            for event in group:
                try:
                    scheduled = self.place(event)
                except NoAvailableSlotError as e:
                    logger.warning(
                        "Dropping '%s' (originally %s): %s",
                        event.summary, original_day.isoformat(), e,
                    )
                    self._dropped.append(DroppedEvent(event=event, reason=str(e)))
                    continue

                self._scheduled.append(scheduled)

        return self.scheduled
