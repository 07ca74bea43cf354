"""Calendar event creation tool."""

import logging
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .base import BaseTool, ToolResult
from ..errors import CalendarBackendError, EventValidationError, VoiceCalendarError
from ..ical.codec import (
    CALENDAR_TIMEZONE,
    DEFAULT_UID_DOMAIN,
    CalendarEvent,
    default_end,
    generate_ical,
    parse_ical,
    parse_local_datetime,
)

logger = logging.getLogger(__name__)

LOCAL_DATETIME_REGEX = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$"


class CreateEventRequest(BaseModel):
    """Arguments for createEvent."""

    start: str = Field(
        ...,
        pattern=LOCAL_DATETIME_REGEX,
        description=(
            "Start date and time of the event as ISO 8601 datetime (YYYY-MM-DDTHH:MM:SS) "
            f"in {CALENDAR_TIMEZONE} timezone"
        ),
    )
    end: Optional[str] = Field(
        default=None,
        pattern=LOCAL_DATETIME_REGEX,
        description=(
            "End date and time of the event as ISO 8601 datetime (YYYY-MM-DDTHH:MM:SS) "
            f"in {CALENDAR_TIMEZONE} timezone. If not provided, defaults to one hour after start time"
        ),
    )
    title: str = Field(..., min_length=1, description="Short title of the event")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    location: Optional[str] = Field(default=None, description="Optional location of the event")


class CreateEventTool(BaseTool):
    """Creates an event, then reads it back to confirm what was stored."""

    request_model = CreateEventRequest

    def __init__(self, backend, uid_domain: str = DEFAULT_UID_DOMAIN):
        """
        Initialize createEvent tool.

        Args:
            backend: Calendar backend (create_event/get_event)
            uid_domain: Domain suffix for generated event UIDs
        """
        super().__init__(
            name="createEvent",
            description="Creates a new event in the calendar with the provided details.",
        )
        self.backend = backend
        self.uid_domain = uid_domain

    async def execute(self, **kwargs) -> ToolResult:
        """
        Create a calendar event.

        Args:
            **kwargs: CreateEventRequest fields

        Returns:
            ToolResult with the stored event as parsed back from the backend
        """
        try:
            request = CreateEventRequest.model_validate(kwargs)
        except ValidationError as e:
            return ToolResult(
                success=False,
                data=None,
                error=f"Failed to create event: invalid arguments: {e}",
            )

        try:
            start = parse_local_datetime(request.start)
            end = parse_local_datetime(request.end) if request.end else default_end(start)
            if end <= start:
                raise EventValidationError("end must be after start")

            event = CalendarEvent(
                title=request.title,
                start=start,
                end=end,
                description=request.description,
                location=request.location,
            )
            event_url = await self.backend.create_event(generate_ical(event, domain=self.uid_domain))

            stored = parse_ical(await self.backend.get_event(event_url))
            if not stored or not stored[0]["startDate"] or not stored[0]["endDate"]:
                raise CalendarBackendError("Event not created")
        except (VoiceCalendarError, ValueError) as e:
            logger.error(f"Error creating event: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"Failed to create event: {e}",
            )

        created = stored[0]
        return ToolResult(
            success=True,
            data=created,
            message=(
                f'Event created successfully for "{request.title}" '
                f"from {created['startDate']} to {created['endDate']}."
            ),
        )
