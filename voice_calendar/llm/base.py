"""Base LLM interface."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import ChatEndpointError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    ``arguments`` is the raw payload exactly as the model produced it. It is
    expected to be a JSON object but is not guaranteed to be one.
    """

    id: str
    name: str
    arguments: str = ""


@dataclass
class LLMResponse:
    """The single message chosen by the chat endpoint."""

    text: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)


def check_tool_call_ids(tool_calls: List[ToolCall]) -> None:
    """
    Reject tool calls that cannot be answered unambiguously.

    Every tool result is matched to its call by id, so ids must be present
    and unique within one message.

    Raises:
        ChatEndpointError: If an id is empty or repeated
    """
    seen = set()
    for call in tool_calls:
        if not call.id:
            raise ChatEndpointError(f"Chat endpoint returned tool call '{call.name}' without an id")
        if call.id in seen:
            raise ChatEndpointError(f"Chat endpoint returned duplicate tool call id '{call.id}'")
        seen.add(call.id)


class BaseLLM(ABC):
    """Abstract base class for chat completion endpoints.

    Every call goes through complete(), which logs request and response
    summaries before and after the provider-specific implementation runs.
    """

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: str = "auto",
    ) -> LLMResponse:
        """
        Send a conversation to the chat endpoint.

        Args:
            messages: Ordered conversation in chat-completion message format
            tools: Function tool definitions offered to the model
            tool_choice: Tool choice mode ("auto" or "none")

        Returns:
            LLMResponse with text and/or tool calls
        """
        logger.debug(
            f"Chat request to {self.get_model_name()}: "
            f"{len(messages)} messages, {len(tools or [])} tools, tool_choice={tool_choice}"
        )

        response = await self._complete_impl(messages, tools, tool_choice)
        check_tool_call_ids(response.tool_calls)

        logger.debug(
            f"Chat response from {self.get_model_name()}: "
            f"text length {len(response.text or '')}, {len(response.tool_calls)} tool calls"
        )
        return response

    @abstractmethod
    async def _complete_impl(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]],
        tool_choice: str,
    ) -> LLMResponse:
        """Provider-specific implementation of complete()."""
        pass

    @abstractmethod
    async def transcribe(self, audio: bytes, filename: str) -> str:
        """
        Transcribe an audio clip to text.

        Args:
            audio: Raw audio file content
            filename: Original file name (used by the endpoint to detect the format)

        Returns:
            Transcribed text
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Get the chat model name being used."""
        pass
