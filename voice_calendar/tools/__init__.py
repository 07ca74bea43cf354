"""Calendar tools."""

from .base import BaseTool, ToolResult
from .calendar_reader import ListEventsByRangeTool, ListEventsTool
from .calendar_writer import CreateEventTool
from .registry import ToolRegistry

__all__ = [
    "BaseTool",
    "ToolResult",
    "ToolRegistry",
    "CreateEventTool",
    "ListEventsTool",
    "ListEventsByRangeTool",
]
