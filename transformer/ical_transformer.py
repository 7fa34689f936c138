"""iCalendar transformer for rescheduled events."""

import hashlib
from datetime import datetime, timezone, tzinfo
from typing import Optional

from icalendar import Calendar, Event

from scheduler.types import EventKind, ScheduledEvent
from .base import BaseTransformer


class ICalTransformer(BaseTransformer):
    """Transformer that converts scheduled events to iCalendar format."""
    
    PRODID = "-//iCal Move Events//ical-move-events//EN"
    UID_DOMAIN = "ical-move-events"
    
    def __init__(self, calendar_name: str = "Moved events") -> None:
        """Initialize the iCalendar transformer.
        
        Args:
            calendar_name: Value of the X-WR-CALNAME property.
        """
        self._calendar: Optional[Calendar] = None
        self._calendar_name = calendar_name
    
    def _generate_uid(self, event: ScheduledEvent, index: int) -> str:
        """Generate a stable unique identifier for an event.
        
        Args:
            event: The scheduled event.
            index: Position of the event in the output.
            
        Returns:
            Unique identifier string.
        """
        source_uid = event.source.uid if event.source is not None else ""
        unique_string = (
            f"{event.kind.value}-{event.summary}-{event.start.isoformat()}-"
            f"{source_uid}-{index}"
        )
        return hashlib.md5(unique_string.encode()).hexdigest() + "@" + self.UID_DOMAIN
    
    def _timezone_name(self, tz: tzinfo) -> Optional[str]:
        name = getattr(tz, "key", None) or getattr(tz, "zone", None)
        if name:
            return name
        if tz is timezone.utc:
            return "UTC"
        return None
    
    def transform(self, events: list[ScheduledEvent], tz: tzinfo) -> Calendar:
        """Transform scheduled events into iCalendar format.
        
        Args:
            events: Rescheduled events, fillers and holidays.
            tz: Calendar timezone.
            
        Returns:
            iCalendar Calendar object.
        """
        self._calendar = Calendar()
        self._calendar.add("prodid", self.PRODID)
        self._calendar.add("version", "2.0")
        self._calendar.add("calscale", "GREGORIAN")
        self._calendar.add("method", "PUBLISH")
        self._calendar.add("x-wr-calname", self._calendar_name)
        
        tz_name = self._timezone_name(tz)
        if tz_name:
            self._calendar.add("x-wr-timezone", tz_name)
        
        stamp = datetime.now(timezone.utc)
        
        for index, scheduled_event in enumerate(events):
            ical_event = Event()
            
            ical_event.add("uid", self._generate_uid(scheduled_event, index))
            
            start = scheduled_event.start.astimezone(tz)
            end = scheduled_event.end.astimezone(tz)
            
            # All-day events keep DATE values
            if scheduled_event.all_day:
                ical_event.add("dtstart", start.date())
                ical_event.add("dtend", end.date())
            else:
                ical_event.add("dtstart", start)
                ical_event.add("dtend", end)
            ical_event.add("dtstamp", stamp)
            ical_event.add("summary", scheduled_event.summary)
            
            if scheduled_event.description:
                ical_event.add("description", scheduled_event.description)
            
            if scheduled_event.location:
                ical_event.add("location", scheduled_event.location)
            
            if scheduled_event.url:
                ical_event.add("url", scheduled_event.url)
            
            if scheduled_event.kind is not EventKind.SCHEDULED:
                ical_event.add("transp", "TRANSPARENT")
                ical_event.add("categories", scheduled_event.kind.value.upper())
            
            self._calendar.add_component(ical_event)
        
        return self._calendar
    
    def save(self, output_path: str) -> None:
        """Save the calendar to a new .ics file.
        
        Args:
            output_path: Path to the output file.
            
        Raises:
            RuntimeError: If transform() hasn't been called yet.
            FileExistsError: If the output file already exists.
        """
        if self._calendar is None:
            raise RuntimeError("No calendar data. Call transform() first.")
        
        with open(output_path, "xb") as f:
            f.write(self._calendar.to_ical())
