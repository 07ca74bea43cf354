"""Tests for the application entry point."""

import pytest
import yaml
from unittest.mock import AsyncMock, patch

from voice_calendar import main as main_module


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch.object(main_module, "setup_logging"):
        yield


@pytest.mark.asyncio
async def test_missing_config_exits(tmp_path):
    with patch.object(main_module.sys, "argv", ["voice-calendar", str(tmp_path / "missing.yaml")]):
        with pytest.raises(SystemExit) as exc_info:
            await main_module.main()

    assert exc_info.value.code == 1


@pytest.mark.asyncio
async def test_starts_server_from_config(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.dump(
            {
                "orchestrator": {
                    "tool_server_url": "http://localhost:3000/mcp",
                    "chat_endpoint_url": "http://localhost:8080",
                    "max_rounds": 3,
                },
                "server": {"serve_tools": False},
            }
        )
    )

    with patch.object(main_module.sys, "argv", ["voice-calendar", "-v", str(config_path)]), patch.object(
        main_module, "CalendarAssistantServer"
    ) as server_cls:
        server = server_cls.return_value
        server.start = AsyncMock()
        server.stop = AsyncMock()
        server.get_url.return_value = "http://0.0.0.0:3000"

        await main_module.main()

    kwargs = server_cls.call_args.kwargs
    assert kwargs["registry"] is None
    assert kwargs["orchestrator"].config.max_rounds == 3
    assert kwargs["llm"].get_model_name() == "gpt-4o-mini"
    server.start.assert_awaited_once()
    server.stop.assert_awaited_once()
