"""Centralized tool registry."""

import logging
from typing import Dict, List, Optional

from .base import BaseTool
from ..config.config_schema import AppConfig

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Centralized registry for all tools."""

    def __init__(self):
        """Initialize empty tool registry."""
        self._tools: Dict[str, BaseTool] = {}

    def register_tool(self, tool: BaseTool) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: Tool instance to register
        """
        self._tools[tool.get_name()] = tool

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """
        Get a tool by name.

        Args:
            name: Tool name

        Returns:
            Tool instance or None if not found
        """
        return self._tools.get(name)

    def get_all_tools(self) -> List[BaseTool]:
        """
        Get all registered tools.

        Returns:
            List of all registered tools
        """
        return list(self._tools.values())

    def initialize_tools(self, config: AppConfig, backend=None) -> None:
        """
        Initialize and register the calendar tools.

        Args:
            config: Application configuration
            backend: Optional calendar backend (built from config if omitted)
        """
        if not config.calendar:
            logger.warning("No calendar configured, calendar tools not registered")
            return

        from .calendar_reader import ListEventsByRangeTool, ListEventsTool
        from .calendar_writer import CreateEventTool

        if backend is None:
            from ..backend.caldav_client import CalDavCalendar

            backend = CalDavCalendar(
                url=config.calendar.url,
                username=config.calendar.username,
                password=config.calendar.password,
                calendar_url=config.calendar.calendar_url,
            )

        self.register_tool(CreateEventTool(backend, uid_domain=config.calendar.uid_domain))
        self.register_tool(ListEventsTool(backend))
        self.register_tool(ListEventsByRangeTool(backend))
