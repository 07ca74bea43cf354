"""Calendar record codec.

Events are always written and read in one fixed civil timezone. The
generated record embeds that zone's VTIMEZONE rules so readers never need
their own timezone database.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union
from zoneinfo import ZoneInfo

from icalendar import Calendar

from ..errors import EventValidationError

logger = logging.getLogger(__name__)

CALENDAR_TIMEZONE = "Europe/Helsinki"
CALENDAR_TZ = ZoneInfo(CALENDAR_TIMEZONE)

DEFAULT_UID_DOMAIN = "example-domain.com"
DEFAULT_DURATION = timedelta(hours=1)

PRODID = "-//Voice Calendar Assistant//EN"
ICAL_TIME_FORMAT = "%Y%m%dT%H%M%S"
LOCAL_INPUT_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")
CRLF = "\r\n"

# EET/EEST: last Sunday of October back to +0200, last Sunday of March to +0300
VTIMEZONE_LINES = (
    "BEGIN:VTIMEZONE",
    f"TZID:{CALENDAR_TIMEZONE}",
    "BEGIN:STANDARD",
    "DTSTART:20241027T030000",
    "RRULE:FREQ=YEARLY;BYMONTH=10;BYDAY=-1SU",
    "TZOFFSETFROM:+0300",
    "TZOFFSETTO:+0200",
    "TZNAME:EET",
    "END:STANDARD",
    "BEGIN:DAYLIGHT",
    "DTSTART:20240331T020000",
    "RRULE:FREQ=YEARLY;BYMONTH=3;BYDAY=-1SU",
    "TZOFFSETFROM:+0200",
    "TZOFFSETTO:+0300",
    "TZNAME:EEST",
    "END:DAYLIGHT",
    "END:VTIMEZONE",
)

_SPECIAL_CHARS = re.compile(r"([\\,;])")


def to_calendar_zone(value: datetime) -> datetime:
    """Express a datetime in the calendar timezone. Naive values are taken as local to it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=CALENDAR_TZ)
    return value.astimezone(CALENDAR_TZ)


def parse_local_datetime(value: str) -> datetime:
    """
    Parse a ``YYYY-MM-DDTHH:MM:SS`` string as calendar-timezone local time.

    Raises:
        EventValidationError: If the string is not in that exact format
    """
    if not LOCAL_INPUT_PATTERN.match(value or ""):
        raise EventValidationError(
            f"Invalid datetime '{value}', expected YYYY-MM-DDTHH:MM:SS"
        )
    return datetime.fromisoformat(value).replace(tzinfo=CALENDAR_TZ)


def default_end(start: datetime) -> datetime:
    """One hour after start in elapsed time, so DST changes do not shift it."""
    start_utc = to_calendar_zone(start).astimezone(timezone.utc)
    return (start_utc + DEFAULT_DURATION).astimezone(CALENDAR_TZ)


def escape_text(value: str) -> str:
    """Escape a TEXT value: backslash, comma and semicolon get a backslash, line breaks become \\n."""
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    return _SPECIAL_CHARS.sub(r"\\\1", value).replace("\n", "\\n")


def format_calendar_time(value: datetime) -> str:
    return to_calendar_zone(value).strftime(ICAL_TIME_FORMAT)


@dataclass
class CalendarEvent:
    """A calendar event in structured form."""

    title: str
    start: datetime
    end: Optional[datetime] = None
    description: Optional[str] = None
    location: Optional[str] = None
    uid: Optional[str] = None
    created: datetime = field(default_factory=lambda: datetime.now(CALENDAR_TZ))

    @property
    def resolved_end(self) -> datetime:
        """The end instant, defaulting to one hour after start."""
        if self.end is not None:
            return to_calendar_zone(self.end)
        return default_end(self.start)


def generate_ical(event: CalendarEvent, domain: str = DEFAULT_UID_DOMAIN) -> str:
    """
    Generate a complete VCALENDAR record for one event.

    Args:
        event: Event to serialize
        domain: Domain suffix for generated UIDs

    Returns:
        iCalendar text with CRLF line endings

    Raises:
        EventValidationError: If the event has no title or no start
    """
    if not event.title or not event.title.strip():
        raise EventValidationError("Event title is required")
    if not isinstance(event.start, datetime):
        raise EventValidationError("Event start is required")

    uid = event.uid or f"{uuid.uuid4()}@{domain}"

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        *VTIMEZONE_LINES,
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{format_calendar_time(event.created)}",
        f"DTSTART;TZID={CALENDAR_TIMEZONE}:{format_calendar_time(event.start)}",
        f"DTEND;TZID={CALENDAR_TIMEZONE}:{format_calendar_time(event.resolved_end)}",
        f"SUMMARY:{escape_text(event.title)}",
    ]

    if event.description:
        lines.append(f"DESCRIPTION:{escape_text(event.description)}")
    if event.location:
        lines.append(f"LOCATION:{escape_text(event.location)}")

    lines.append("END:VEVENT")
    lines.append("END:VCALENDAR")

    return CRLF.join(lines) + CRLF


def _decode_time(component, name: str) -> Optional[str]:
    if name not in component:
        return None
    value: Union[datetime, date] = component.decoded(name)
    if isinstance(value, datetime):
        return to_calendar_zone(value).isoformat()
    return value.isoformat()


def _text(component, name: str) -> Optional[str]:
    value = component.get(name)
    return str(value) if value is not None else None


def parse_ical(text: str) -> List[Dict[str, Any]]:
    """
    Parse one or more concatenated VCALENDAR records into plain event dicts.

    Each dict carries uid, summary, startDate, endDate, description and
    location. Timestamps are ISO 8601 strings in the calendar timezone.
    Event order follows the input and says nothing about backend order.

    Args:
        text: Raw iCalendar text

    Returns:
        List of event dicts
    """
    if not text or not text.strip():
        return []

    events = []
    for calendar in Calendar.from_ical(text, multiple=True):
        for component in calendar.walk("VEVENT"):
            events.append(
                {
                    "uid": _text(component, "UID"),
                    "summary": _text(component, "SUMMARY") or "",
                    "startDate": _decode_time(component, "DTSTART"),
                    "endDate": _decode_time(component, "DTEND"),
                    "location": _text(component, "LOCATION"),
                    "description": _text(component, "DESCRIPTION"),
                }
            )

    logger.debug(f"Parsed {len(events)} events from calendar data")
    return events
