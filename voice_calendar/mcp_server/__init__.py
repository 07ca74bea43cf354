"""MCP server exposing the calendar tools."""

from .server import (
    StreamableHTTPEndpoint,
    build_tool_definitions,
    create_mcp_server,
    create_session_manager,
    dispatch_tool_call,
)

__all__ = [
    "StreamableHTTPEndpoint",
    "build_tool_definitions",
    "create_mcp_server",
    "create_session_manager",
    "dispatch_tool_call",
]
