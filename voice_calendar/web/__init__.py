"""HTTP boundary."""

from .server import CalendarAssistantServer
from .transcription import compose_prompt, transcribe_audio

__all__ = ["CalendarAssistantServer", "compose_prompt", "transcribe_audio"]
