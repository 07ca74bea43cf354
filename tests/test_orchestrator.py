"""Tests for ToolSessionOrchestrator."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from voice_calendar.agent.orchestrator import (
    SessionResult,
    ToolSessionOrchestrator,
    parse_args_or_empty,
    to_function_tools,
)
from voice_calendar.agent.tool_peer import ToolCatalogEntry
from voice_calendar.config.config_schema import OrchestratorConfig
from voice_calendar.errors import ChatEndpointError, ToolExecutionError
from voice_calendar.llm.base import BaseLLM, LLMResponse, ToolCall

CATALOG = [
    ToolCatalogEntry(
        name="listEventsByRange",
        description="List events in a date range",
        parameters={
            "type": "object",
            "properties": {"start": {"type": "string"}, "end": {"type": "string"}},
            "required": ["start", "end"],
        },
    ),
    ToolCatalogEntry(name="listEvents", description="List all events", parameters={"type": "object"}),
    ToolCatalogEntry(name="createEvent", description="Create an event", parameters={"type": "object"}),
]


class FakePeer:
    """In-memory tool server session that records its lifecycle."""

    def __init__(self, url, results=None):
        self.url = url
        self.results = results or {}
        self.entered = False
        self.exited = False
        self.calls = []
        self.list_tools = AsyncMock(return_value=list(CATALOG))

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exited = True
        return False

    async def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        result = self.results.get(name, f"{name} done")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def config():
    return OrchestratorConfig(
        tool_server_url="http://localhost:3000/mcp",
        chat_endpoint_url="http://localhost:8080",
    )


@pytest.fixture
def peers():
    return []


@pytest.fixture
def peer_factory(peers):
    def factory(url, results=None):
        peer = FakePeer(url, results)
        peers.append(peer)
        return peer

    return factory


def make_llm(*responses):
    llm = MagicMock(spec=BaseLLM)
    llm.complete = AsyncMock(side_effect=list(responses))
    llm.get_model_name = MagicMock(return_value="test-model")
    return llm


@pytest.mark.asyncio
async def test_answer_without_tool_calls(config, peer_factory, peers):
    """A direct answer takes one round and no tool calls."""
    llm = make_llm(LLMResponse(text="Hello there!"))
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    result = await orchestrator.run("Hi")

    assert isinstance(result, SessionResult)
    assert result.answer == "Hello there!"
    assert result.tool_call_count == 0
    assert result.rounds == 1
    assert peers[0].url == "http://localhost:3000/mcp"
    assert peers[0].calls == []
    assert peers[0].exited


@pytest.mark.asyncio
async def test_first_request_carries_system_prompt_and_tools(config, peer_factory):
    """The opening request holds the system prompt, the user prompt and the catalog."""
    llm = make_llm(LLMResponse(text="Done"))
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    await orchestrator.run("What's on tomorrow?")

    messages = llm.complete.call_args.args[0]
    kwargs = llm.complete.call_args.kwargs
    assert [m["role"] for m in messages] == ["system", "user"]
    assert "listEventsByRange, listEvents, createEvent" in messages[0]["content"]
    assert messages[1]["content"] == "What's on tomorrow?"
    assert kwargs["tool_choice"] == "auto"
    assert [t["function"]["name"] for t in kwargs["tools"]] == [
        "listEventsByRange",
        "listEvents",
        "createEvent",
    ]


@pytest.mark.asyncio
async def test_range_listing_flow(config, peer_factory, peers):
    """One tool call, then a final answer grounded on its result."""
    llm = make_llm(
        LLMResponse(
            tool_calls=[
                ToolCall(
                    "call_1",
                    "listEventsByRange",
                    '{"start": "2025-06-11T00:00:00", "end": "2025-06-11T23:59:59"}',
                )
            ]
        ),
        LLMResponse(text="You have a dentist appointment at 14:00."),
    )
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    result = await orchestrator.run("What do I have tomorrow?")

    assert result.answer == "You have a dentist appointment at 14:00."
    assert result.tool_call_count == 1
    assert result.rounds == 2
    assert result.tool_names == ["listEventsByRange"]
    assert peers[0].calls == [
        ("listEventsByRange", {"start": "2025-06-11T00:00:00", "end": "2025-06-11T23:59:59"})
    ]

    second_request = llm.complete.call_args_list[1].args[0]
    assert [m["role"] for m in second_request] == ["system", "user", "assistant", "tool"]
    assert second_request[2]["tool_calls"][0]["id"] == "call_1"
    assert second_request[3] == {
        "role": "tool",
        "content": "listEventsByRange done",
        "tool_call_id": "call_1",
    }


@pytest.mark.asyncio
async def test_tool_calls_run_sequentially_in_order(config, peer_factory, peers):
    """Calls from one round run in the order the model issued them."""
    llm = make_llm(
        LLMResponse(
            tool_calls=[
                ToolCall("a", "listEventsByRange", "{}"),
                ToolCall("b", "createEvent", '{"title": "Gym"}'),
                ToolCall("c", "listEvents", ""),
            ]
        ),
        LLMResponse(text="Booked."),
    )
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    result = await orchestrator.run("Book gym if free")

    assert [name for name, _ in peers[0].calls] == ["listEventsByRange", "createEvent", "listEvents"]
    assert result.tool_call_count == 3
    tool_ids = [m.get("tool_call_id") for m in llm.complete.call_args_list[1].args[0] if m["role"] == "tool"]
    assert tool_ids == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_malformed_arguments_become_empty(config, peer_factory, peers):
    """Unparseable arguments are replaced by {} and the session continues."""
    llm = make_llm(
        LLMResponse(tool_calls=[ToolCall("c1", "listEvents", '{"start": ')]),
        LLMResponse(text="Here are your events."),
    )
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    result = await orchestrator.run("List my events")

    assert peers[0].calls == [("listEvents", {})]
    assert result.answer == "Here are your events."
    assert result.tool_call_count == 1


@pytest.mark.asyncio
async def test_round_cap_returns_last_content(config, peer_factory, peers):
    """A model that never stops calling tools is cut off after the round budget."""
    responses = [
        LLMResponse(text=f"checking {i}", tool_calls=[ToolCall(f"c{i}", "listEvents", "{}")])
        for i in range(config.max_rounds)
    ]
    llm = make_llm(*responses)
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    result = await orchestrator.run("Loop forever")

    assert llm.complete.await_count == 5
    assert result.rounds == 5
    assert result.tool_call_count == 5
    # Last message in the log is the final tool result
    assert result.answer == "listEvents done"
    assert peers[0].exited


@pytest.mark.asyncio
async def test_round_cap_is_configurable(peer_factory):
    config = OrchestratorConfig(
        tool_server_url="http://localhost:3000/mcp",
        chat_endpoint_url="http://localhost:8080",
        max_rounds=2,
    )
    llm = make_llm(
        LLMResponse(tool_calls=[ToolCall("c1", "listEvents", "{}")]),
        LLMResponse(tool_calls=[ToolCall("c2", "listEvents", "{}")]),
    )
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    result = await orchestrator.run("Loop")

    assert llm.complete.await_count == 2
    assert result.rounds == 2


@pytest.mark.asyncio
async def test_empty_final_content(config, peer_factory):
    """A final message without content yields an empty answer."""
    llm = make_llm(LLMResponse(text=None))
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    result = await orchestrator.run("Hi")

    assert result.answer == ""


@pytest.mark.asyncio
async def test_answer_is_trimmed(config, peer_factory):
    llm = make_llm(LLMResponse(text="  Done.\n"))
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    assert (await orchestrator.run("Hi")).answer == "Done."


@pytest.mark.asyncio
async def test_empty_prompt_rejected(config, peer_factory, peers):
    llm = make_llm()
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    with pytest.raises(ValueError):
        await orchestrator.run("   ")

    assert peers == []


@pytest.mark.asyncio
async def test_peer_released_on_chat_failure(config, peer_factory, peers):
    """The tool server session is closed when the chat endpoint fails."""
    llm = make_llm(ChatEndpointError("connection refused"))
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    with pytest.raises(ChatEndpointError):
        await orchestrator.run("Hi")

    assert peers[0].entered
    assert peers[0].exited


@pytest.mark.asyncio
async def test_peer_released_on_tool_failure(config, peers):
    """Tool transport failures propagate after the session is closed."""

    def factory(url):
        peer = FakePeer(url, results={"listEvents": ToolExecutionError("boom")})
        peers.append(peer)
        return peer

    llm = make_llm(LLMResponse(tool_calls=[ToolCall("c1", "listEvents", "{}")]))
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=factory)

    with pytest.raises(ToolExecutionError):
        await orchestrator.run("List")

    assert peers[0].exited


@pytest.mark.asyncio
async def test_sessions_do_not_share_state(config, peer_factory, peers):
    """Each run opens its own tool session and conversation."""
    llm = make_llm(LLMResponse(text="first"), LLMResponse(text="second"))
    orchestrator = ToolSessionOrchestrator(config, llm, peer_factory=peer_factory)

    await orchestrator.run("one")
    await orchestrator.run("two")

    assert len(peers) == 2
    second_request = llm.complete.call_args_list[1].args[0]
    assert [m["role"] for m in second_request] == ["system", "user"]
    assert second_request[1]["content"] == "two"


def test_to_function_tools():
    tools = to_function_tools(CATALOG[:1])

    assert tools == [
        {
            "type": "function",
            "function": {
                "name": "listEventsByRange",
                "description": "List events in a date range",
                "parameters": CATALOG[0].parameters,
            },
        }
    ]


@pytest.mark.parametrize(
    "payload,expected",
    [
        ('{"title": "Gym"}', {"title": "Gym"}),
        ("", {}),
        ("   ", {}),
        ('{"title": ', {}),
        ("[1, 2]", {}),
        ('"text"', {}),
        ("null", {}),
    ],
)
def test_parse_args_or_empty(payload, expected):
    assert parse_args_or_empty(payload) == expected


class ScriptedLLM(BaseLLM):
    """Concrete endpoint returning canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)

    async def _complete_impl(self, messages, tools, tool_choice):
        return self.responses.pop(0)

    async def transcribe(self, audio, filename):
        return ""

    def get_model_name(self):
        return "scripted"


@pytest.mark.parametrize(
    "tool_calls",
    [
        [ToolCall("x", "listEvents", "{}"), ToolCall("x", "createEvent", '{"title": "Gym"}')],
        [ToolCall("", "listEvents", "{}"), ToolCall("", "createEvent", '{"title": "Gym"}')],
    ],
)
@pytest.mark.asyncio
async def test_ambiguous_tool_call_ids_fail_before_any_call(config, peer_factory, peers, tool_calls):
    """Calls that cannot be paired with their results are rejected up front."""
    orchestrator = ToolSessionOrchestrator(
        config, ScriptedLLM(LLMResponse(tool_calls=tool_calls)), peer_factory=peer_factory
    )

    with pytest.raises(ChatEndpointError):
        await orchestrator.run("Book gym")

    assert peers[0].calls == []
    assert peers[0].exited
