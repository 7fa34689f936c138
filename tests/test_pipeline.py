"""Tests for scheduler/pipeline.py."""

from datetime import date, datetime, time

import pytest

from reader.models import RelativeConstraint
from reader.reader import CalendarReader
from scheduler import ConfigurationError, EventKind, SchedulerConfig, reschedule


@pytest.fixture
def parsed(sample_ics):
    return CalendarReader().read_file(sample_ics)


def test_reschedules_sample_calendar(parsed, tz):
    result = reschedule(parsed.events, date(2021, 8, 23), date(2021, 9, 3), parsed.timezone)

    scheduled = result.scheduled
    assert [event.summary for event in scheduled] == [
        "Intro", "Workshop", "Project (3 days)", "Standup", "Standup"
    ]
    assert result.dropped == []

    intro, workshop, project, first_standup, second_standup = scheduled
    assert intro.start == datetime(2021, 8, 23, 9, 30, tzinfo=tz)
    assert workshop.start == datetime(2021, 8, 23, 10, 30, tzinfo=tz)
    assert project.start == datetime(2021, 8, 23, 0, 0, tzinfo=tz)
    assert project.end == datetime(2021, 8, 26, 0, 0, tzinfo=tz)
    assert first_standup.start == datetime(2021, 8, 23, 9, 0, tzinfo=tz)
    assert second_standup.start == datetime(2021, 8, 24, 9, 0, tzinfo=tz)


def test_fillers_cover_unused_slots(parsed):
    result = reschedule(parsed.events, date(2021, 8, 23), date(2021, 9, 3), parsed.timezone)

    fillers = result.fillers
    assert len(fillers) == 10
    assert fillers[0].start.time() == time(10, 30)
    assert fillers[1].start.time() == time(9, 30)
    assert all(filler.end.time() == time(18, 0) for filler in fillers)


def test_output_order(parsed, make_event):
    holiday = make_event("Day off", date(2021, 8, 30), start="00:00", end="24:00", all_day=True)
    result = reschedule(
        parsed.events, date(2021, 8, 23), date(2021, 9, 3), parsed.timezone, holidays=[holiday]
    )

    kinds = [event.kind for event in result.events]
    assert kinds == sorted(kinds, key=[EventKind.SCHEDULED, EventKind.FILLER, EventKind.HOLIDAY].index)
    assert len(result.holidays) == 1
    assert all(filler.start.date() != date(2021, 8, 30) for filler in result.fillers)


def test_holidays_outside_range_are_ignored(parsed, make_event):
    holiday = make_event("Day off", date(2021, 9, 6), start="00:00", end="24:00", all_day=True)
    result = reschedule(
        parsed.events, date(2021, 8, 23), date(2021, 9, 3), parsed.timezone, holidays=[holiday]
    )
    assert result.holidays == []


def test_fillers_can_be_disabled(parsed):
    config = SchedulerConfig(filler_label=None)
    result = reschedule(parsed.events, date(2021, 8, 23), date(2021, 9, 3), parsed.timezone, config=config)
    assert result.fillers == []


def test_weekend_only_range(parsed, make_event):
    holiday = make_event("Day off", date(2021, 8, 28), start="00:00", end="24:00", all_day=True)
    result = reschedule(
        parsed.events, date(2021, 8, 28), date(2021, 8, 29), parsed.timezone, holidays=[holiday]
    )

    assert result.scheduled == []
    assert len(result.dropped) == 5
    assert result.fillers == []
    assert len(result.holidays) == 1


def test_end_before_start(parsed):
    with pytest.raises(ConfigurationError):
        reschedule(parsed.events, date(2021, 9, 3), date(2021, 8, 23), parsed.timezone)


def test_dependent_of_dropped_event_is_dropped(make_event, tz):
    kickoff = make_event("Kickoff", date(2021, 8, 4))
    retro = make_event("Retro", date(2021, 8, 5), constraint=RelativeConstraint(summary="Kickoff"))

    result = reschedule([kickoff, retro], date(2021, 8, 28), date(2021, 8, 29), tz)

    assert result.scheduled == []
    assert [dropped.event.summary for dropped in result.dropped] == ["Kickoff", "Retro"]
    assert result.dropped[1].reason == "referenced event 'Kickoff' was dropped"
