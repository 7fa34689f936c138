"""Tests for scheduler/recurrence.py."""

from datetime import date, datetime, time, timedelta

import pytest

from reader.models import ExpandedEvent, RelativeConstraint
from scheduler.errors import RecurrenceParseError
from scheduler.recurrence import _normalize_until, expand_events, expand_recurrence


RANGE_END = date(2021, 12, 31)


class TestExpandRecurrence:

    def test_count_limited_rule(self, tz, make_event):
        event = make_event("Standup", date(2021, 8, 2), rrule="FREQ=DAILY;COUNT=3", uid="standup")
        occurrences = expand_recurrence(event, tz, RANGE_END)
        assert [o.start.date() for o in occurrences] == [
            date(2021, 8, 2), date(2021, 8, 3), date(2021, 8, 4)
        ]
        assert all(isinstance(o, ExpandedEvent) for o in occurrences)
        assert all(o.rrule is None for o in occurrences)

    def test_keeps_duration_and_fields(self, tz, make_event):
        constraint = RelativeConstraint(summary="Kickoff")
        event = make_event(
            "Standup", date(2021, 8, 2), start="09:00", end="09:15",
            rrule="FREQ=WEEKLY;COUNT=2", uid="standup", location="Room 1", constraint=constraint,
        )
        occurrences = expand_recurrence(event, tz, RANGE_END)
        for index, occurrence in enumerate(occurrences):
            assert occurrence.duration == timedelta(minutes=15)
            assert occurrence.location == "Room 1"
            assert occurrence.constraint == constraint
            assert occurrence.origin_uid == "standup"
            assert occurrence.occurrence_index == index

    def test_preserves_wall_clock_across_dst(self, tz, make_event):
        # DST ends in Vienna on 2021-10-31
        event = make_event("Lecture", date(2021, 10, 21), start="09:00", end="10:30",
                           rrule="FREQ=WEEKLY;COUNT=3")
        occurrences = expand_recurrence(event, tz, RANGE_END)
        local_starts = [o.start.astimezone(tz) for o in occurrences]
        assert [s.date() for s in local_starts] == [
            date(2021, 10, 21), date(2021, 10, 28), date(2021, 11, 4)
        ]
        assert all(s.time() == time(9, 0) for s in local_starts)
        assert all(o.end.astimezone(tz).time() == time(10, 30) for o in occurrences)

    def test_open_rule_is_bounded_by_range_end(self, tz, make_event):
        event = make_event("Standup", date(2021, 8, 2), rrule="FREQ=DAILY")
        occurrences = expand_recurrence(event, tz, date(2021, 8, 5))
        assert len(occurrences) == 4
        assert occurrences[-1].start.date() == date(2021, 8, 5)

    def test_date_only_until(self, tz, make_event):
        event = make_event("Standup", date(2021, 8, 2), rrule="FREQ=DAILY;UNTIL=20210804")
        assert len(expand_recurrence(event, tz, RANGE_END)) == 3

    def test_utc_until(self, tz, make_event):
        event = make_event("Standup", date(2021, 8, 2), rrule="FREQ=DAILY;UNTIL=20210803T070000Z")
        assert len(expand_recurrence(event, tz, RANGE_END)) == 2

    def test_exdates_are_skipped(self, tz, make_event):
        excluded = datetime(2021, 8, 3, 9, 0, tzinfo=tz)
        event = make_event("Standup", date(2021, 8, 2), rrule="FREQ=DAILY;COUNT=3",
                           exdates=frozenset({excluded}))
        occurrences = expand_recurrence(event, tz, RANGE_END)
        assert [o.start.date() for o in occurrences] == [date(2021, 8, 2), date(2021, 8, 4)]

    def test_expansion_is_repeatable(self, tz, make_event):
        event = make_event("Standup", date(2021, 8, 2), rrule="FREQ=WEEKLY;BYDAY=MO,WE;COUNT=6")
        assert expand_recurrence(event, tz, RANGE_END) == expand_recurrence(event, tz, RANGE_END)

    def test_malformed_rule(self, tz, make_event):
        event = make_event("Broken", date(2021, 8, 2), rrule="FREQ=SOMETIMES")
        with pytest.raises(RecurrenceParseError):
            expand_recurrence(event, tz, RANGE_END)


def test_normalize_until(tz):
    assert _normalize_until("FREQ=DAILY;UNTIL=20210804T120000", tz) == "FREQ=DAILY;UNTIL=20210804T100000Z"
    assert _normalize_until("FREQ=DAILY;UNTIL=20210804T120000Z", tz) == "FREQ=DAILY;UNTIL=20210804T120000Z"
    assert _normalize_until("FREQ=DAILY;COUNT=2", tz) == "FREQ=DAILY;COUNT=2"


class TestExpandEvents:

    def test_one_off_events_pass_through(self, tz, make_event):
        single = make_event("Intro", date(2021, 8, 2))
        recurring = make_event("Standup", date(2021, 8, 3), rrule="FREQ=DAILY;COUNT=2")
        expanded = expand_events([single, recurring], tz, RANGE_END)
        assert expanded[0] is single
        assert len(expanded) == 3

    def test_invalid_rule_is_skipped(self, tz, make_event):
        single = make_event("Intro", date(2021, 8, 2))
        broken = make_event("Broken", date(2021, 8, 3), rrule="FREQ=SOMETIMES")
        assert expand_events([single, broken], tz, RANGE_END) == [single]

    def test_invalid_rule_aborts_in_strict_mode(self, tz, make_event):
        broken = make_event("Broken", date(2021, 8, 3), rrule="FREQ=SOMETIMES")
        with pytest.raises(RecurrenceParseError):
            expand_events([broken], tz, RANGE_END, skip_invalid=False)
