"""Client side of the tool-exposing peer (MCP over streamable HTTP)."""

import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

from ..errors import ToolExecutionError, ToolPeerError

logger = logging.getLogger(__name__)


def _root_cause(error: BaseException) -> BaseException:
    """Unwrap the exception groups raised by the transport's task groups."""
    while getattr(error, "exceptions", None):
        error = error.exceptions[0]
    return error


async def _unwind(stack: AsyncExitStack, exc: Optional[BaseException]) -> Optional[BaseException]:
    """
    Close the transport, handing it the exception that ended the session.

    Returns:
        The failure the transport reports, ``exc`` itself when it passes
        through unchanged, or None after a clean close

    Raises:
        BaseException: Cancellation of the caller and other non-Exception
            errors, unchanged
    """
    try:
        if exc is None:
            await stack.aclose()
        else:
            await stack.__aexit__(type(exc), exc, exc.__traceback__)
    except BaseException as error:
        cause = _root_cause(error)
        if not isinstance(cause, Exception):
            raise
        return exc if cause is exc else cause
    return None


@dataclass(frozen=True)
class ToolCatalogEntry:
    """One invocable operation advertised by the tool server."""

    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)


class ToolPeer:
    """A single MCP session, opened on enter and always closed on exit.

    Usage:
        async with ToolPeer(url) as peer:
            catalog = await peer.list_tools()
            text = await peer.call_tool("listEvents", {})
    """

    def __init__(self, url: str):
        self.url = url
        self._stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "ToolPeer":
        stack = AsyncExitStack()
        try:
            read_stream, write_stream, _ = await stack.enter_async_context(
                streamablehttp_client(self.url)
            )
            session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
            await session.initialize()
        except BaseException as e:
            # A transport failure shows up here as a cancellation of this task
            cause = await _unwind(stack, e) or e
            raise ToolPeerError(f"Failed to connect to tool server at {self.url}: {cause}") from cause

        self._stack = stack
        self._session = session
        logger.debug(f"Connected to tool server at {self.url}")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        stack, self._stack, self._session = self._stack, None, None
        if stack is None:
            return False

        cause = await _unwind(stack, exc)
        logger.debug(f"Closed tool server session at {self.url}")

        if cause is exc:
            return False
        if cause is None:
            # The transport absorbed the cancellation it raised in this task
            raise ToolPeerError(f"Connection to tool server at {self.url} was lost") from exc
        raise ToolPeerError(f"Connection to tool server at {self.url} failed: {cause}") from cause

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise ToolPeerError("Tool server session is not open")
        return self._session

    async def list_tools(self) -> List[ToolCatalogEntry]:
        """Fetch the tool catalog."""
        session = self._require_session()
        try:
            result = await session.list_tools()
        except Exception as e:
            raise ToolPeerError(f"Failed to list tools: {e}") from e

        return [
            ToolCatalogEntry(
                name=tool.name,
                description=tool.description or "No description",
                parameters=dict(tool.inputSchema or {}),
            )
            for tool in result.tools
        ]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> str:
        """
        Invoke a tool and return its text output.

        Args:
            name: Tool name
            arguments: Structured tool arguments

        Returns:
            All text segments of the result joined with newlines
        """
        session = self._require_session()
        try:
            result = await session.call_tool(name, arguments)
        except Exception as e:
            raise ToolExecutionError(f"Tool '{name}' failed: {e}") from e

        if result.isError:
            logger.warning(f"Tool '{name}' reported an error result")

        return "\n".join(item.text for item in result.content if getattr(item, "type", None) == "text")
