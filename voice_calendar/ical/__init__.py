"""iCalendar record generation and parsing."""

from .codec import (
    CALENDAR_TIMEZONE,
    CalendarEvent,
    escape_text,
    generate_ical,
    parse_ical,
    parse_local_datetime,
)

__all__ = [
    "CALENDAR_TIMEZONE",
    "CalendarEvent",
    "escape_text",
    "generate_ical",
    "parse_ical",
    "parse_local_datetime",
]
