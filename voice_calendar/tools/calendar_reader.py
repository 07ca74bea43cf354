"""Calendar listing tools."""

import json
import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError

from .base import BaseTool, ToolResult
from .calendar_writer import LOCAL_DATETIME_REGEX
from ..errors import VoiceCalendarError
from ..ical.codec import CALENDAR_TIMEZONE, parse_ical, parse_local_datetime

logger = logging.getLogger(__name__)

EVENT_EXAMPLE = (
    '[{"summary":"Meeting","startDate":"2024-10-01T10:00:00+03:00",'
    '"endDate":"2024-10-01T11:00:00+03:00","location":"Office",'
    '"description":"Discuss project status."}]'
)


def parse_records(records: List[str]) -> List[Dict[str, Any]]:
    """Parse raw backend records into a flat list of event dicts."""
    events = []
    for record in records:
        events.extend(parse_ical(record))
    return events


class ListEventsByRangeRequest(BaseModel):
    """Arguments for listEventsByRange."""

    start: str = Field(
        ...,
        pattern=LOCAL_DATETIME_REGEX,
        description=(
            "Start date and time of the range as ISO 8601 datetime (YYYY-MM-DDTHH:MM:SS) "
            f"in {CALENDAR_TIMEZONE} timezone"
        ),
    )
    end: str = Field(
        ...,
        pattern=LOCAL_DATETIME_REGEX,
        description=(
            "End date and time of the range as ISO 8601 datetime (YYYY-MM-DDTHH:MM:SS) "
            f"in {CALENDAR_TIMEZONE} timezone"
        ),
    )


class ListEventsTool(BaseTool):
    """Lists every event in the calendar."""

    def __init__(self, backend):
        super().__init__(
            name="listEvents",
            description=(
                "Lists all events from the CalDAV calendar. Returns parsed event data including "
                "title, start/end times, location, and description as JSON. Example: " + EVENT_EXAMPLE
            ),
        )
        self.backend = backend

    async def execute(self, **kwargs) -> ToolResult:
        try:
            events = parse_records(await self.backend.list_events())
        except (VoiceCalendarError, ValueError) as e:
            logger.error(f"Error listing events: {e}")
            return ToolResult(success=False, data=None, error=f"Failed to list events: {e}")

        logger.debug(f"Listed {len(events)} events")
        return ToolResult(
            success=True,
            data=events,
            message=f"Events retrieved successfully: {json.dumps(events, ensure_ascii=False)}",
        )


class ListEventsByRangeTool(BaseTool):
    """Lists events overlapping a local-time window."""

    request_model = ListEventsByRangeRequest

    def __init__(self, backend):
        super().__init__(
            name="listEventsByRange",
            description=(
                "Lists events from the CalDAV calendar within the specified date range. Returns "
                "parsed event data including title, start/end times, location, and description "
                "as JSON. Example: " + EVENT_EXAMPLE
            ),
        )
        self.backend = backend

    async def execute(self, **kwargs) -> ToolResult:
        try:
            request = ListEventsByRangeRequest.model_validate(kwargs)
        except ValidationError as e:
            return ToolResult(
                success=False,
                data=None,
                error=f"Failed to list events by date range: invalid arguments: {e}",
            )

        try:
            start = parse_local_datetime(request.start)
            end = parse_local_datetime(request.end)
            if end <= start:
                raise ValueError("end must be after start")
            events = parse_records(await self.backend.list_events_by_range(start, end))
        except (VoiceCalendarError, ValueError) as e:
            logger.error(f"Error listing events by date range: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"Failed to list events by date range: {e}",
            )

        logger.debug(f"Listed {len(events)} events between {request.start} and {request.end}")
        return ToolResult(
            success=True,
            data=events,
            message=(
                f"Events retrieved successfully for range {request.start} to {request.end}: "
                f"{json.dumps(events, ensure_ascii=False)}"
            ),
        )
