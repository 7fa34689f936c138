"""
Recurrence expansion.

Recurring events are expanded into one-off occurrences before packing.
Rules are evaluated in UTC, so an occurrence on the other side of a DST
transition would drift by the offset change; each occurrence is re-anchored
so that it keeps the wall-clock time of the original event.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from dateutil.rrule import rrulestr

from reader.models import CalendarEvent, ExpandedEvent
from .errors import RecurrenceParseError


logger = logging.getLogger(__name__)

UNTIL_PATTERN = re.compile(r"UNTIL=(\d{8})(?:T(\d{6})(Z?))?", re.IGNORECASE)


def _normalize_until(rule: str, tz: tzinfo) -> str:
    """Rewrite a floating or date-only UNTIL as a UTC timestamp.

    dateutil refuses to mix a timezone-aware DTSTART with a non-UTC UNTIL.
    """
    def to_utc(match: re.Match) -> str:
        day, clock, utc = match.groups()
        if utc:
            return match.group(0)
        until_date = datetime.strptime(day, "%Y%m%d").date()
        if clock:
            local = datetime.combine(until_date, datetime.strptime(clock, "%H%M%S").time(), tzinfo=tz)
        else:
            local = datetime.combine(until_date, time.max.replace(microsecond=0), tzinfo=tz)
        return "UNTIL=" + local.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

    return UNTIL_PATTERN.sub(to_utc, rule)


def expand_recurrence(event: CalendarEvent, tz: tzinfo, range_end: date) -> list[ExpandedEvent]:
    """Expand a recurring event into its occurrences.

    Args:
        event: Event with a recurrence rule.
        tz: Declared calendar timezone.
        range_end: Last day of the target range, bounds open-ended rules.

    Returns:
        Occurrences in chronological order, excluding EXDATEs.

    Raises:
        RecurrenceParseError: If the rule cannot be parsed.
    """
    if not event.rrule:
        raise RecurrenceParseError(f"Event '{event.summary}' has no recurrence rule")

    utc_start = event.start.astimezone(timezone.utc)
    try:
        rule = rrulestr(_normalize_until(event.rrule, tz), dtstart=utc_start)
    except (ValueError, TypeError, KeyError) as e:
        raise RecurrenceParseError(
            f"Invalid recurrence rule '{event.rrule}' on '{event.summary}': {e}"
        ) from e

    bound = datetime.combine(range_end + timedelta(days=1), time(), tzinfo=tz)
    base_offset = event.start.astimezone(tz).utcoffset()
    duration = event.duration
    origin_uid = event.uid or event.summary

    occurrences: list[ExpandedEvent] = []
    try:
        for index, occurrence in enumerate(rule):
            if occurrence >= bound:
                break

            drift = base_offset - occurrence.astimezone(tz).utcoffset()
            start = (occurrence + drift).astimezone(tz)
            if start in event.exdates:
                continue

            occurrences.append(ExpandedEvent(
                start=start,
                end=start + duration,
                summary=event.summary,
                description=event.description,
                location=event.location,
                url=event.url,
                rrule=None,
                uid=f"{origin_uid}-{index}",
                all_day=event.all_day,
                constraint=event.constraint,
                origin_uid=origin_uid,
                occurrence_index=index,
            ))
    except (ValueError, TypeError) as e:
        raise RecurrenceParseError(
            f"Cannot expand recurrence rule '{event.rrule}' on '{event.summary}': {e}"
        ) from e

    return occurrences


def expand_events(
    events: list[CalendarEvent],
    tz: tzinfo,
    range_end: date,
    skip_invalid: bool = True,
) -> list[CalendarEvent]:
    """Replace every recurring event by its occurrences.

    Args:
        events: Parsed calendar events.
        tz: Declared calendar timezone.
        range_end: Last day of the target range.
        skip_invalid: Skip events with a broken rule instead of raising.

    Returns:
        One-off events, recurring ones expanded in place.
    """
    expanded: list[CalendarEvent] = []

    for event in events:
        if not event.rrule:
            expanded.append(event)
            continue

        try:
            occurrences = expand_recurrence(event, tz, range_end)
        except RecurrenceParseError as e:
            if not skip_invalid:
                raise
            logger.warning("Skipping recurring event: %s", e)
            continue

        logger.debug("Expanded '%s' into %d occurrences", event.summary, len(occurrences))
        expanded.extend(occurrences)

    return expanded
