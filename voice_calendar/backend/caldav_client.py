"""CalDAV calendar backend."""

import asyncio
import logging
import threading
from datetime import datetime
from typing import List, Optional

import caldav
from caldav.lib.error import DAVError

from ..errors import CalendarBackendError

logger = logging.getLogger(__name__)


class CalDavCalendar:
    """Stores and retrieves raw iCalendar records on a CalDAV server.

    The caldav client is blocking, so every call runs in a worker thread.
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        calendar_url: Optional[str] = None,
    ):
        """
        Initialize CalDAV backend.

        Args:
            url: CalDAV server URL
            username: Account username
            password: Account password
            calendar_url: Calendar collection URL (defaults to the first calendar)
        """
        self.url = url
        self.username = username
        self.password = password
        self.calendar_url = calendar_url
        self._calendar = None
        self._calendar_lock = threading.Lock()

    def _get_calendar(self):
        """Get or resolve the calendar collection. Called from worker threads."""
        with self._calendar_lock:
            if self._calendar is None:
                self._calendar = self._resolve_calendar()
            return self._calendar

    def _resolve_calendar(self):
        client = caldav.DAVClient(url=self.url, username=self.username, password=self.password)
        if self.calendar_url:
            calendar = client.calendar(url=self.calendar_url)
        else:
            calendars = client.principal().calendars()
            if not calendars:
                raise CalendarBackendError(f"No calendars found at {self.url}")
            calendar = calendars[0]

        logger.info(f"Using calendar {calendar.url}")
        return calendar

    async def _run(self, description: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except CalendarBackendError:
            raise
        except DAVError as e:
            raise CalendarBackendError(f"CalDAV error while {description}: {e}") from e
        except Exception as e:
            raise CalendarBackendError(f"Failed while {description}: {e}") from e

    def _create(self, ical: str) -> str:
        event = self._get_calendar().save_event(ical)
        return str(event.url)

    def _get(self, url: str) -> str:
        event = self._get_calendar().event_by_url(url)
        event.load()
        return event.data

    def _list(self) -> List[str]:
        return [event.data for event in self._get_calendar().events()]

    def _list_range(self, start: datetime, end: datetime) -> List[str]:
        results = self._get_calendar().search(start=start, end=end, event=True, expand=False)
        return [event.data for event in results]

    async def create_event(self, ical: str) -> str:
        """
        Store a new event record.

        Returns:
            URL of the created event resource
        """
        url = await self._run("creating event", self._create, ical)
        logger.info(f"Created event at {url}")
        return url

    async def get_event(self, url: str) -> str:
        """Fetch the raw record stored at a URL."""
        return await self._run("fetching event", self._get, url)

    async def list_events(self) -> List[str]:
        """Fetch every event record in the calendar."""
        return await self._run("listing events", self._list)

    async def list_events_by_range(self, start: datetime, end: datetime) -> List[str]:
        """Fetch event records overlapping [start, end)."""
        return await self._run("listing events by date range", self._list_range, start, end)
