"""Holiday feed fetcher."""

import logging
from datetime import date, tzinfo
from typing import Optional

import requests

from .models import CalendarEvent
from .reader import CalendarReader


logger = logging.getLogger(__name__)


class HolidayFeedError(Exception):
    """Raised when the holiday feed cannot be fetched or parsed."""


class HolidayFetcher:
    """Downloads a public holiday calendar and extracts full-day holidays."""

    REQUEST_TIMEOUT = 15

    def __init__(self, url: str, session: Optional[requests.Session] = None) -> None:
        """Initialize the fetcher.

        Args:
            url: URL of an .ics holiday feed.
            session: Optional requests session to reuse.
        """
        self._url = url
        self._session = session or requests.Session()

    def _download(self) -> bytes:
        try:
            response = self._session.get(self._url, timeout=self.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise HolidayFeedError(f"Could not fetch holidays from {self._url}: {e}") from e
        return response.content

    def fetch(self, start_date: date, end_date: date, tz: tzinfo) -> list[CalendarEvent]:
        """Fetch holidays that fall within a date window.

        Args:
            start_date: First day of the window.
            end_date: Last day of the window (inclusive).
            tz: Timezone the holiday days are anchored in.

        Returns:
            Full-day holiday events ordered by date.
        """
        data = self._download()

        try:
            parsed = CalendarReader(timezone_override=tz).parse(data)
        except ValueError as e:
            raise HolidayFeedError(f"Invalid holiday calendar at {self._url}: {e}") from e

        holidays = [
            event for event in parsed.events
            if event.all_day and start_date <= event.start.astimezone(tz).date() <= end_date
        ]
        holidays.sort(key=lambda event: event.start)

        logger.info("Loaded %d holidays between %s and %s", len(holidays), start_date, end_date)
        return holidays
