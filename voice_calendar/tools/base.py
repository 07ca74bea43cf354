"""Base tool interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel


@dataclass
class ToolResult:
    """Result from tool execution."""

    success: bool
    data: Any
    error: Optional[str] = None
    message: Optional[str] = None

    def to_text(self) -> str:
        """Text handed back to the model."""
        if self.success:
            return self.message or "Success (no output)"
        return self.error or "Unknown error"


class EmptyRequest(BaseModel):
    """Request model for tools without parameters."""


class BaseTool(ABC):
    """Abstract base class for all tools.

    Subclasses declare a pydantic ``request_model``; the JSON schema offered
    to the model is derived from it.
    """

    request_model: Type[BaseModel] = EmptyRequest

    def __init__(self, name: str, description: str):
        """
        Initialize tool.

        Args:
            name: Tool name (used for registration)
            description: Tool description
        """
        self.name = name
        self.description = description

    @abstractmethod
    async def execute(self, **kwargs) -> ToolResult:
        """
        Execute the tool.

        Args:
            **kwargs: Tool-specific parameters

        Returns:
            ToolResult with execution result
        """
        pass

    def get_schema(self) -> Dict[str, Any]:
        """
        Get tool schema.

        Returns:
            Dictionary with name, description and JSON schema parameters
        """
        parameters = self.request_model.model_json_schema()
        parameters.pop("title", None)
        parameters.setdefault("properties", {})
        return {
            "name": self.name,
            "description": self.description,
            "parameters": parameters,
        }

    def get_name(self) -> str:
        """Get tool name."""
        return self.name

    def get_description(self) -> str:
        """Get tool description."""
        return self.description
