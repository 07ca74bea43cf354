"""Tests for base tool class."""

import pytest
from pydantic import BaseModel, Field

from voice_calendar.tools.base import BaseTool, EmptyRequest, ToolResult


class EchoRequest(BaseModel):
    text: str = Field(..., description="Text to echo")


class EchoTool(BaseTool):
    """Echo tool implementation."""

    request_model = EchoRequest

    def __init__(self):
        super().__init__(name="echo", description="Echoes its input")

    async def execute(self, **kwargs) -> ToolResult:
        return ToolResult(success=True, data=kwargs, message=kwargs.get("text"))


class PingTool(BaseTool):
    def __init__(self):
        super().__init__(name="ping", description="No arguments")

    async def execute(self, **kwargs) -> ToolResult:
        return ToolResult(success=True, data=None)


@pytest.mark.asyncio
async def test_tool_execute():
    """Test tool execution."""
    result = await EchoTool().execute(text="hello")

    assert result.success is True
    assert result.data == {"text": "hello"}
    assert result.to_text() == "hello"


def test_tool_schema_from_request_model():
    """Test the schema is derived from the request model."""
    schema = EchoTool().get_schema()

    assert schema["name"] == "echo"
    assert schema["description"] == "Echoes its input"
    assert schema["parameters"]["type"] == "object"
    assert schema["parameters"]["required"] == ["text"]
    assert schema["parameters"]["properties"]["text"]["description"] == "Text to echo"
    assert "title" not in schema["parameters"]


def test_tool_schema_without_parameters():
    """Test tools with no arguments still advertise an object schema."""
    assert PingTool.request_model is EmptyRequest
    parameters = PingTool().get_schema()["parameters"]

    assert parameters["type"] == "object"
    assert parameters["properties"] == {}


def test_tool_name_and_description():
    tool = EchoTool()
    assert tool.get_name() == "echo"
    assert tool.get_description() == "Echoes its input"


def test_tool_result_text():
    """Test text rendering of results."""
    assert ToolResult(success=True, data=None, message="ok").to_text() == "ok"
    assert ToolResult(success=True, data=None).to_text() == "Success (no output)"
    assert ToolResult(success=False, data=None, error="Failed: x").to_text() == "Failed: x"
    assert ToolResult(success=False, data=None).to_text() == "Unknown error"
