"""Failure types surfaced by the calendar assistant."""


class VoiceCalendarError(Exception):
    """Base class for all calendar assistant failures."""


class ConfigurationError(VoiceCalendarError):
    """Required configuration is missing or invalid. Fatal at startup."""


class ToolPeerError(VoiceCalendarError):
    """The tool server could not be reached or refused the session."""


class ToolExecutionError(VoiceCalendarError):
    """A tool invocation failed at the protocol level."""


class ChatEndpointError(VoiceCalendarError):
    """The chat completion endpoint failed or returned no usable message."""


class TranscriptionError(VoiceCalendarError):
    """Audio could not be transcribed."""


class CalendarBackendError(VoiceCalendarError):
    """The CalDAV backend rejected or failed a request."""


class EventValidationError(VoiceCalendarError, ValueError):
    """A calendar event is missing fields required to build a record."""
