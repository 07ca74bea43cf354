"""Conversation state for a single tool session."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..llm.base import ToolCall

ROLES = ("system", "user", "assistant", "tool")


@dataclass(frozen=True)
class ChatMessage:
    """One turn in the dialogue."""

    role: str
    content: Optional[str] = None
    tool_calls: Tuple[ToolCall, ...] = ()
    tool_call_id: Optional[str] = None

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role}")
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("Tool messages require a tool_call_id")
        if self.tool_calls and self.role != "assistant":
            raise ValueError("Only assistant messages may carry tool calls")

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant(
        cls, content: Optional[str], tool_calls: Optional[List[ToolCall]] = None
    ) -> "ChatMessage":
        return cls(role="assistant", content=content, tool_calls=tuple(tool_calls or ()))

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> "ChatMessage":
        return cls(role="tool", content=content, tool_call_id=tool_call_id)

    def to_payload(self) -> Dict[str, Any]:
        """Render in chat-completion message format."""
        payload: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            payload["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        if self.tool_call_id:
            payload["tool_call_id"] = self.tool_call_id
        return payload


@dataclass
class ConversationLog:
    """Append-only, ordered message log owned by one orchestrator session.

    Tool results must answer an invocation issued by the closest preceding
    assistant message, and each invocation may be answered only once.
    """

    _messages: List[ChatMessage] = field(default_factory=list)

    def append(self, message: ChatMessage) -> None:
        if message.role == "tool":
            self._check_tool_reply(message)
        self._messages.append(message)

    def _check_tool_reply(self, message: ChatMessage) -> None:
        answered = set()
        for previous in reversed(self._messages):
            if previous.role == "tool":
                answered.add(previous.tool_call_id)
                continue
            if previous.role == "assistant":
                issued = {call.id for call in previous.tool_calls}
                if message.tool_call_id not in issued:
                    raise ValueError(
                        f"Tool result {message.tool_call_id} does not match any "
                        "invocation of the preceding assistant message"
                    )
                if message.tool_call_id in answered:
                    raise ValueError(f"Tool call {message.tool_call_id} already answered")
                return
            break
        raise ValueError("Tool result appended without a preceding assistant message")

    @property
    def last(self) -> Optional[ChatMessage]:
        return self._messages[-1] if self._messages else None

    def to_payload(self) -> List[Dict[str, Any]]:
        return [message.to_payload() for message in self._messages]

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)
