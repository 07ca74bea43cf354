"""Round-trip tool-calling loop between the chat endpoint and the tool server."""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Sequence

from pydantic import BaseModel

from ..config.config_schema import OrchestratorConfig
from ..llm.base import BaseLLM
from .conversation import ChatMessage, ConversationLog
from .prompts import get_system_prompt
from .tool_peer import ToolCatalogEntry, ToolPeer

logger = logging.getLogger(__name__)


class SessionResult(BaseModel):
    """Outcome of one tool session."""

    answer: str
    tool_call_count: int
    rounds: int
    tool_names: List[str] = []
    processing_time_ms: float = 0


def to_function_tools(catalog: Sequence[ToolCatalogEntry]) -> List[Dict[str, Any]]:
    """Translate the tool catalog into chat-completion function tools."""
    return [
        {
            "type": "function",
            "function": {
                "name": entry.name,
                "description": entry.description,
                "parameters": entry.parameters,
            },
        }
        for entry in catalog
    ]


def parse_args_or_empty(payload: str) -> Dict[str, Any]:
    """
    Parse a tool argument payload, substituting an empty argument set.

    Models sometimes emit truncated or non-object JSON. That must not abort
    the session, so anything that is not a JSON object becomes ``{}``.

    Args:
        payload: Raw argument text from the model

    Returns:
        Parsed arguments, or an empty dict when the payload is unusable
    """
    if not payload or not payload.strip():
        return {}
    try:
        arguments = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning(f"Malformed tool arguments, using empty arguments: {e} (payload: {payload[:200]!r})")
        return {}
    if not isinstance(arguments, dict):
        logger.warning(f"Tool arguments are not an object, using empty arguments: {payload[:200]!r}")
        return {}
    return arguments


class ToolSessionOrchestrator:
    """Drives a bounded conversation in which the model may call calendar tools.

    Each run() owns its own conversation log and tool server session, so
    concurrent runs share no state.
    """

    def __init__(
        self,
        config: OrchestratorConfig,
        llm: BaseLLM,
        peer_factory: Callable[[str], ToolPeer] = ToolPeer,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Validated orchestrator configuration
            llm: Chat endpoint client
            peer_factory: Builds a tool server session for a URL
        """
        self.config = config
        self.llm = llm
        self.peer_factory = peer_factory

    async def run(self, prompt: str) -> SessionResult:
        """
        Answer a free-text prompt, calling tools as the model requests.

        Args:
            prompt: Composed user prompt

        Returns:
            SessionResult with the final answer and the number of tool calls

        Raises:
            ValueError: If the prompt is empty
            ToolPeerError, ToolExecutionError, ChatEndpointError: On collaborator failure
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must not be empty")

        start_time = time.time()
        logger.info(f"Starting tool session ({len(prompt)} chars prompt)")

        async with self.peer_factory(self.config.tool_server_url) as peer:
            catalog = tuple(await peer.list_tools())
            tools = to_function_tools(catalog)
            logger.debug(f"Tool catalog: {[entry.name for entry in catalog]}")

            log = ConversationLog()
            log.append(ChatMessage.system(get_system_prompt(entry.name for entry in catalog)))
            log.append(ChatMessage.user(prompt))

            tool_names: List[str] = []
            rounds = 0
            converged = False

            while rounds < self.config.max_rounds:
                rounds += 1
                response = await self.llm.complete(log.to_payload(), tools=tools, tool_choice="auto")
                log.append(ChatMessage.assistant(response.text, response.tool_calls))

                if not response.tool_calls:
                    converged = True
                    break

                # Strictly sequential: later calls may depend on earlier ones
                for call in response.tool_calls:
                    arguments = parse_args_or_empty(call.arguments)
                    logger.info(f"Round {rounds}: calling tool '{call.name}'")
                    logger.debug(f"Tool '{call.name}' arguments: {arguments}")

                    text = await peer.call_tool(call.name, arguments)
                    log.append(ChatMessage.tool(text, call.id))
                    tool_names.append(call.name)

        if not converged:
            logger.warning(
                f"Round budget of {self.config.max_rounds} exhausted, returning last message"
            )

        answer = (log.last.content or "").strip()
        processing_time = (time.time() - start_time) * 1000
        logger.info(
            f"Tool session finished in {processing_time:.2f}ms: "
            f"{rounds} rounds, {len(tool_names)} tool calls"
        )

        return SessionResult(
            answer=answer,
            tool_call_count=len(tool_names),
            rounds=rounds,
            tool_names=tool_names,
            processing_time_ms=processing_time,
        )
