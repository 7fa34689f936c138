"""Calendar file reader built on the icalendar library."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from icalendar import Calendar

from .front_matter import decode_constraint, has_front_matter
from .models import CalendarEvent, NoConstraint


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedCalendar:
    """Events of a calendar together with its declared timezone."""

    events: list[CalendarEvent]
    timezone: tzinfo
    timezone_name: Optional[str] = None


def resolve_timezone(name: Optional[str]) -> Optional[ZoneInfo]:
    """Look up an IANA timezone name, returning None if unknown."""
    if not name:
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return None


class CalendarReader:
    """Reader that converts iCalendar data into CalendarEvent records.

    Handles timezone detection, all-day events, recurrence rules and
    front-matter constraints in event descriptions.
    """

    DEFAULT_TIMEZONE = timezone.utc

    def __init__(self, timezone_override: Optional[tzinfo] = None) -> None:
        """Initialize the reader.

        Args:
            timezone_override: Use this zone instead of the one the calendar
                declares.
        """
        self._timezone_override = timezone_override

    def read_file(self, path: Union[str, Path]) -> ParsedCalendar:
        """Read and parse an .ics file.

        Args:
            path: Path to the calendar file.

        Returns:
            Parsed events and the calendar timezone.
        """
        with open(path, "rb") as f:
            return self.parse(f.read())

    def parse(self, data: Union[bytes, str]) -> ParsedCalendar:
        """Parse iCalendar data.

        Raises:
            ValueError: If the data is not a valid calendar.
        """
        calendar = Calendar.from_ical(data)
        components = calendar.walk("VEVENT")

        tz, tz_name = self._detect_timezone(calendar, components)

        events: list[CalendarEvent] = []
        for index, component in enumerate(components):
            try:
                events.append(self._parse_event(component, tz, index))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping invalid event: %s", e)

        return ParsedCalendar(events=events, timezone=tz, timezone_name=tz_name)

    def _detect_timezone(self, calendar: Calendar, components: list[Any]) -> tuple[tzinfo, Optional[str]]:
        """Find the calendar timezone.

        Order: override, X-WR-TIMEZONE, first VTIMEZONE, first event's zone, UTC.
        """
        if self._timezone_override is not None:
            return self._timezone_override, str(self._timezone_override)

        candidates = [calendar.get("x-wr-timezone")]
        candidates.extend(vtz.get("tzid") for vtz in calendar.walk("VTIMEZONE"))

        for candidate in candidates:
            if candidate is None:
                continue
            zone = resolve_timezone(str(candidate))
            if zone is not None:
                return zone, str(candidate)
            logger.warning("Unknown timezone '%s' in calendar", candidate)

        for component in components:
            dtstart = component.get("dtstart")
            if dtstart is None:
                continue
            value = dtstart.dt
            if isinstance(value, datetime) and value.tzinfo is not None:
                name = getattr(value.tzinfo, "key", None) or getattr(value.tzinfo, "zone", None)
                zone = resolve_timezone(name)
                if zone is not None:
                    return zone, name
                return value.tzinfo, value.tzname()

        return self.DEFAULT_TIMEZONE, None

    def _to_datetime(self, value: Union[date, datetime], tz: tzinfo) -> datetime:
        """Convert an iCalendar date or datetime into an aware datetime."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=tz)
            return value
        return datetime.combine(value, time(), tzinfo=tz)

    def _parse_exdates(self, component: Any, tz: tzinfo) -> frozenset[datetime]:
        raw = component.get("exdate")
        if raw is None:
            return frozenset()
        if not isinstance(raw, list):
            raw = [raw]

        exdates: set[datetime] = set()
        for exdate_list in raw:
            for item in exdate_list.dts:
                exdates.add(self._to_datetime(item.dt, tz))
        return frozenset(exdates)

    def _parse_event(self, component: Any, tz: tzinfo, index: int) -> CalendarEvent:
        """Convert a VEVENT component into a CalendarEvent.

        Args:
            component: icalendar VEVENT component.
            tz: Calendar timezone for floating and date values.
            index: Position in the calendar, used for a fallback UID.

        Returns:
            The parsed event.
        """
        raw_start = component.decoded("dtstart")
        all_day = not isinstance(raw_start, datetime)
        start = self._to_datetime(raw_start, tz)

        if component.get("dtend") is not None:
            end = self._to_datetime(component.decoded("dtend"), tz)
        elif component.get("duration") is not None:
            end = start + component.decoded("duration")
        elif all_day:
            end = self._to_datetime(raw_start + timedelta(days=1), tz)
        else:
            end = start

        rrule = component.get("rrule")
        description = str(component.get("description", ""))
        summary = str(component.get("summary", ""))

        event = CalendarEvent(
            start=start,
            end=end,
            summary=summary,
            description=description,
            location=str(component.get("location", "")),
            url=str(component.get("url", "")),
            rrule=rrule.to_ical().decode() if rrule is not None else None,
            uid=str(component.get("uid", f"event-{index}")),
            all_day=all_day,
            exdates=self._parse_exdates(component, tz),
        )

        if has_front_matter(description):
            try:
                event = replace(event, constraint=decode_constraint(description))
            except ValueError as e:
                logger.warning("Ignoring constraint of '%s': %s", summary, e)
                event = replace(event, constraint=NoConstraint())

        return event
