"""OpenAI-compatible chat endpoint implementation."""

from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from ..errors import ChatEndpointError, TranscriptionError
from .base import BaseLLM, LLMResponse, ToolCall


class OpenAILLM(BaseLLM):
    """Chat completions and transcription against an OpenAI-compatible endpoint.

    The endpoint is usually a proxy, so ``base_url`` points at the proxy root
    and ``/v1`` is appended here.
    """

    def __init__(
        self,
        base_url: str,
        model: str = "gpt-4o-mini",
        api_key: str = "not-needed",
        transcription_model: str = "whisper-1",
        timeout: float = 60.0,
    ):
        """
        Initialize the client.

        Args:
            base_url: Endpoint root (e.g. "http://localhost:8080")
            model: Chat model name
            api_key: API key forwarded to the endpoint
            transcription_model: Model used for audio transcription
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.transcription_model = transcription_model

        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=f"{self.base_url}/v1",
            timeout=timeout,
        )

    async def _complete_impl(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]],
        tool_choice: str,
    ) -> LLMResponse:
        api_params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }
        if tools:
            api_params["tools"] = tools
            api_params["tool_choice"] = tool_choice

        try:
            response = await self.client.chat.completions.create(**api_params)
        except OpenAIError as e:
            raise ChatEndpointError(f"Chat completion request failed: {e}") from e

        if not response.choices:
            raise ChatEndpointError("Chat completion response contained no choices")

        message = response.choices[0].message

        tool_calls = []
        for tc in message.tool_calls or []:
            tool_calls.append(
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=tc.function.arguments or "",
                )
            )

        return LLMResponse(text=message.content, tool_calls=tool_calls)

    async def transcribe(self, audio: bytes, filename: str) -> str:
        try:
            result = await self.client.audio.transcriptions.create(
                model=self.transcription_model,
                file=(filename, audio),
            )
        except OpenAIError as e:
            raise TranscriptionError(f"Audio transcription failed: {e}") from e
        return result.text

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model
