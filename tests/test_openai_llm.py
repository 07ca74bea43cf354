"""Tests for the OpenAI-compatible chat endpoint client."""

from types import SimpleNamespace

import pytest
from openai import OpenAIError
from unittest.mock import AsyncMock

from voice_calendar.errors import ChatEndpointError, TranscriptionError
from voice_calendar.llm.base import LLMResponse, ToolCall
from voice_calendar.llm.openai_llm import OpenAILLM


def completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def function_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def llm():
    """Client with the network layer replaced."""
    llm = OpenAILLM(base_url="http://localhost:8080/", model="test-model")
    llm.client.chat.completions.create = AsyncMock()
    llm.client.audio.transcriptions.create = AsyncMock()
    return llm


def test_base_url_gets_api_prefix():
    llm = OpenAILLM(base_url="http://localhost:8080/")
    assert str(llm.client.base_url).rstrip("/") == "http://localhost:8080/v1"
    assert llm.get_model_name() == "gpt-4o-mini"


@pytest.mark.asyncio
async def test_text_response(llm):
    llm.client.chat.completions.create.return_value = completion(content="Hello")

    response = await llm.complete([{"role": "user", "content": "Hi"}])

    assert response == LLMResponse(text="Hello", tool_calls=[])
    kwargs = llm.client.chat.completions.create.await_args.kwargs
    assert kwargs == {"model": "test-model", "messages": [{"role": "user", "content": "Hi"}]}


@pytest.mark.asyncio
async def test_tools_sent_with_tool_choice(llm):
    llm.client.chat.completions.create.return_value = completion(content="ok")
    tools = [{"type": "function", "function": {"name": "listEvents", "parameters": {}}}]

    await llm.complete([{"role": "user", "content": "Hi"}], tools=tools, tool_choice="auto")

    kwargs = llm.client.chat.completions.create.await_args.kwargs
    assert kwargs["tools"] == tools
    assert kwargs["tool_choice"] == "auto"


@pytest.mark.asyncio
async def test_tool_calls_keep_raw_arguments(llm):
    llm.client.chat.completions.create.return_value = completion(
        tool_calls=[
            function_call("call_1", "listEventsByRange", '{"start": "2025-06-11T00:00:00"'),
            function_call("call_2", "listEvents", None),
        ]
    )

    response = await llm.complete([{"role": "user", "content": "Hi"}])

    assert response.text is None
    assert response.tool_calls == [
        ToolCall("call_1", "listEventsByRange", '{"start": "2025-06-11T00:00:00"'),
        ToolCall("call_2", "listEvents", ""),
    ]


@pytest.mark.asyncio
async def test_endpoint_failure(llm):
    llm.client.chat.completions.create.side_effect = OpenAIError("connection refused")

    with pytest.raises(ChatEndpointError, match="connection refused"):
        await llm.complete([{"role": "user", "content": "Hi"}])


@pytest.mark.asyncio
async def test_no_choices(llm):
    llm.client.chat.completions.create.return_value = SimpleNamespace(choices=[])

    with pytest.raises(ChatEndpointError, match="no choices"):
        await llm.complete([{"role": "user", "content": "Hi"}])


@pytest.mark.asyncio
async def test_transcribe(llm):
    llm.client.audio.transcriptions.create.return_value = SimpleNamespace(text="book a meeting")

    text = await llm.transcribe(b"RIFF....", "clip.wav")

    assert text == "book a meeting"
    llm.client.audio.transcriptions.create.assert_awaited_once_with(
        model="whisper-1", file=("clip.wav", b"RIFF....")
    )


@pytest.mark.asyncio
async def test_transcribe_failure(llm):
    llm.client.audio.transcriptions.create.side_effect = OpenAIError("bad audio")

    with pytest.raises(TranscriptionError):
        await llm.transcribe(b"data", "clip.wav")


@pytest.mark.asyncio
async def test_duplicate_tool_call_ids_rejected(llm):
    llm.client.chat.completions.create.return_value = completion(
        tool_calls=[
            function_call("x", "listEvents", "{}"),
            function_call("x", "createEvent", '{"title": "Gym"}'),
        ]
    )

    with pytest.raises(ChatEndpointError, match="duplicate tool call id 'x'"):
        await llm.complete([{"role": "user", "content": "Hi"}])


@pytest.mark.asyncio
async def test_missing_tool_call_id_rejected(llm):
    llm.client.chat.completions.create.return_value = completion(
        tool_calls=[function_call("", "listEvents", "{}")]
    )

    with pytest.raises(ChatEndpointError, match="without an id"):
        await llm.complete([{"role": "user", "content": "Hi"}])
