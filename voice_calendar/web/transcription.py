"""Audio transcription for uploaded voice prompts."""

import logging
from typing import Optional

from ..errors import TranscriptionError
from ..llm.base import BaseLLM

logger = logging.getLogger(__name__)


def compose_prompt(prompt: Optional[str], transcript: str) -> str:
    """Append a transcript to a typed prompt, or use it alone when nothing was typed."""
    prompt = (prompt or "").strip()
    if prompt:
        return f"{prompt}\n\n[Audio transcription: {transcript}]"
    return transcript


async def transcribe_audio(llm: BaseLLM, audio: bytes, filename: str) -> str:
    """
    Transcribe an uploaded clip through the chat endpoint.

    Raises:
        TranscriptionError: If the endpoint fails or returns nothing
    """
    if not audio:
        raise TranscriptionError("Audio file is empty")

    transcript = await llm.transcribe(audio, filename)
    if not transcript or not transcript.strip():
        raise TranscriptionError("Transcription returned no text")

    logger.info(f"Transcribed {len(audio)} bytes of audio into {len(transcript)} chars")
    return transcript.strip()
