"""Shared fixtures for the event mover tests."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from reader.models import CalendarEvent


VIENNA = ZoneInfo("Europe/Vienna")

SAMPLE_CALENDAR = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Test//Test//EN
X-WR-TIMEZONE:Europe/Vienna
BEGIN:VEVENT
UID:intro@test
DTSTART;TZID=Europe/Vienna:20210804T093000
DTEND;TZID=Europe/Vienna:20210804T103000
SUMMARY:Intro
LOCATION:Room 1
URL:https://example.com/intro
END:VEVENT
BEGIN:VEVENT
UID:workshop@test
DTSTART;TZID=Europe/Vienna:20210805T103000
DTEND;TZID=Europe/Vienna:20210805T160000
SUMMARY:Workshop
DESCRIPTION:---\\noptional: true\\n---\\nBring laptop
END:VEVENT
BEGIN:VEVENT
UID:project@test
DTSTART;VALUE=DATE:20210806
DTEND;VALUE=DATE:20210807
SUMMARY:Project (3 days)
END:VEVENT
BEGIN:VEVENT
UID:standup@test
DTSTART;TZID=Europe/Vienna:20210809T090000
DTEND;TZID=Europe/Vienna:20210809T091500
RRULE:FREQ=DAILY;COUNT=3
EXDATE;TZID=Europe/Vienna:20210810T090000
SUMMARY:Standup
END:VEVENT
END:VCALENDAR
"""


def local(day: date, clock: time) -> datetime:
    return datetime.combine(day, clock, tzinfo=VIENNA)


@pytest.fixture
def tz():
    return VIENNA


@pytest.fixture
def make_event():
    """Factory for events on a given day with HH:MM start and end."""
    def factory(summary, day, start="09:00", end="10:00", **kwargs):
        start_dt = local(day, time.fromisoformat(start))
        if end == "24:00":
            end_dt = local(day + timedelta(days=1), time())
        else:
            end_dt = local(day, time.fromisoformat(end))
        return CalendarEvent(start=start_dt, end=end_dt, summary=summary, **kwargs)
    return factory


@pytest.fixture
def sample_ics(tmp_path):
    path = tmp_path / "calendar.ics"
    path.write_text(SAMPLE_CALENDAR.replace("\n", "\r\n"), encoding="utf-8")
    return path
