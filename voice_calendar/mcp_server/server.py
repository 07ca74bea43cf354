"""Serves the tool registry over MCP (streamable HTTP transport)."""

import logging
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

from .. import __version__
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "calendar-server"


def build_tool_definitions(registry: ToolRegistry) -> List[types.Tool]:
    """Describe every registered tool in MCP form."""
    definitions = []
    for tool in registry.get_all_tools():
        schema = tool.get_schema()
        definitions.append(
            types.Tool(
                name=schema["name"],
                description=schema["description"],
                inputSchema=schema["parameters"],
            )
        )
    return definitions


async def dispatch_tool_call(
    registry: ToolRegistry, name: str, arguments: Optional[Dict[str, Any]]
) -> List[types.TextContent]:
    """
    Execute a registered tool and render its result as text content.

    Raises:
        ValueError: If no tool with that name is registered
    """
    tool = registry.get_tool(name)
    if tool is None:
        raise ValueError(f"Unknown tool: {name}")

    logger.info(f"Executing tool '{name}'")
    result = await tool.execute(**(arguments or {}))
    if not result.success:
        logger.warning(f"Tool '{name}' failed: {result.error}")

    return [types.TextContent(type="text", text=result.to_text())]


def create_mcp_server(registry: ToolRegistry) -> Server:
    """Build an MCP server whose tools are the registry's tools."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return build_tool_definitions(registry)

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        return await dispatch_tool_call(registry, name, arguments)

    return server


def create_session_manager(server: Server) -> StreamableHTTPSessionManager:
    """Stateless sessions: each orchestrator run opens and closes its own."""
    return StreamableHTTPSessionManager(app=server, json_response=True, stateless=True)


class StreamableHTTPEndpoint:
    """ASGI endpoint forwarding requests to the session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope, receive, send) -> None:
        await self.session_manager.handle_request(scope, receive, send)
